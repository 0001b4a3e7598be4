import contextlib
import importlib
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Type, TypeVar, overload

T = TypeVar("T")


@overload
def import_class(fqn: str) -> type:
    ...


@overload
def import_class(fqn: str, base_type: type[T]) -> type[T]:
    ...


def import_class(fqn: str, base_type: "Type[T] | None" = None) -> "Type[T] | type":
    """
    Import a class by its fully qualified name. Both `package.module.Class` and `package.module:Class` are
    accepted. A :class:`TypeError` is raised if the object is not a class or not a subclass of *base_type*.
    """

    if ":" in fqn:
        mod_name, cls_name = fqn.partition(":")[::2]
    else:
        mod_name, cls_name = fqn.rpartition(".")[::2]
    if not mod_name or not cls_name:
        raise ValueError(f"not a fully qualified class name: {fqn!r}")

    module = importlib.import_module(mod_name)
    try:
        cls = getattr(module, cls_name)
    except AttributeError:
        raise ImportError(f"module {mod_name!r} has no member {cls_name!r}") from None
    if not isinstance(cls, type):
        raise TypeError(f"expected type object at {fqn!r}, got {type(cls).__name__}")
    if base_type is not None and not issubclass(cls, base_type):
        raise TypeError(f"expected subclass of {base_type.__name__} at {fqn!r}, got {cls.__name__}")
    return cls


@contextlib.contextmanager
def appending_to_sys_path(paths: Iterable[str | Path]) -> Iterator[None]:
    """Temporarily append *paths* to :data:`sys.path`. Only the entries that were added are removed again."""

    added = [str(p) for p in paths if str(p) not in sys.path]
    sys.path.extend(added)
    try:
        yield
    finally:
        for path in added:
            if path in sys.path:
                sys.path.remove(path)
