__version__ = "0.4.0"

from ._generic import NotSet, not_none
from ._importlib import appending_to_sys_path, import_class
from ._option_sets import LoggingOptions
from ._text import pluralize
from ._tomlconfig import TomlConfigFile
from .supplier import Supplier

__all__ = [
    # _generic
    "not_none",
    "NotSet",
    # _importlib
    "appending_to_sys_path",
    "import_class",
    # _option_sets
    "LoggingOptions",
    # _text
    "pluralize",
    # _tomlconfig
    "TomlConfigFile",
    # supplier
    "Supplier",
]
