""" The standard library of tasks and data types. """

from anvil.core import ComponentRegistry, Mapper, PathList

from .call_task import CallTask
from .definition_task import TaskdefTask, TypedefTask
from .delete_task import DeleteTask
from .echo_task import EchoTask
from .fail_task import FailTask
from .filelist import FileList
from .property_task import PropertyTask
from .touch_task import TouchTask
from .uptodate_task import UpToDateTask

__all__ = [
    "CallTask",
    "DeleteTask",
    "EchoTask",
    "FailTask",
    "FileList",
    "PropertyTask",
    "register_defaults",
    "TaskdefTask",
    "TouchTask",
    "TypedefTask",
    "UpToDateTask",
]


def register_defaults(registry: ComponentRegistry) -> None:
    """Register the standard tasks and data types. This is the `std` entrypoint of the `anvil.components` group."""

    registry.add_task("call", CallTask)
    registry.add_task("delete", DeleteTask)
    registry.add_task("echo", EchoTask)
    registry.add_task("fail", FailTask)
    registry.add_task("property", PropertyTask)
    registry.add_task("taskdef", TaskdefTask)
    registry.add_task("touch", TouchTask)
    registry.add_task("typedef", TypedefTask)
    registry.add_task("uptodate", UpToDateTask)

    registry.add_type("filelist", FileList)
    registry.add_type("mapper", Mapper)
    registry.add_type("path", PathList)
