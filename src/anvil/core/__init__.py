__version__ = "0.4.0"

from anvil.core.system.binder import Binder, element, text_content
from anvil.core.system.component import DataType, ProjectComponent
from anvil.core.system.context import BuildContext, BuildOutcome, BuildResult
from anvil.core.system.element import Element
from anvil.core.system.errors import (
    BuildError,
    ConfigurationError,
    DependencyCycleError,
    Location,
    ReferenceCycleError,
    TaskError,
)
from anvil.core.system.filesystem import FileSystem, LocalFileSystem, MemoryFileSystem
from anvil.core.system.mapper import FileNameMapper, Mapper
from anvil.core.system.paths import PathElement, PathList
from anvil.core.system.project import Project
from anvil.core.system.property import Property, PropertyContainer
from anvil.core.system.references import Reference, Slot
from anvil.core.system.registry import ComponentRegistry
from anvil.core.system.target import Target
from anvil.core.system.task import FailurePolicyTask, LogLevel, Task, TaskStatus, TaskStatusType
from anvil.core.system.uptodate import StalenessEvaluator

__all__ = [
    "__version__",
    "Binder",
    "BuildContext",
    "BuildError",
    "BuildOutcome",
    "BuildResult",
    "ComponentRegistry",
    "ConfigurationError",
    "DataType",
    "DependencyCycleError",
    "element",
    "Element",
    "FailurePolicyTask",
    "FileNameMapper",
    "FileSystem",
    "LocalFileSystem",
    "Location",
    "LogLevel",
    "Mapper",
    "MemoryFileSystem",
    "PathElement",
    "PathList",
    "Project",
    "ProjectComponent",
    "Property",
    "PropertyContainer",
    "Reference",
    "ReferenceCycleError",
    "Slot",
    "StalenessEvaluator",
    "Target",
    "Task",
    "TaskError",
    "TaskStatus",
    "TaskStatusType",
    "text_content",
]
