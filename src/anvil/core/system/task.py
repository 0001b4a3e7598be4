""" This module provides the :class:`Task` class, which represents a configured build action inside of a target. """

from __future__ import annotations

import abc
import dataclasses
import enum
import logging
from typing import TYPE_CHECKING

from anvil.core.system.component import ProjectComponent
from anvil.core.system.errors import ConfigurationError, TaskError
from anvil.core.system.property import Property

if TYPE_CHECKING:
    from anvil.core.system.project import Project


class TaskStatusType(enum.Enum):
    """Represents the possible statuses that a task can return from its execution."""

    SUCCEEDED = enum.auto()  #: The task did its work.
    FAILED = enum.auto()  #: The task failed.
    SKIPPED = enum.auto()  #: The task was not applicable.
    UP_TO_DATE = enum.auto()  #: The task found its outputs to be up to date and did not do its usual work.
    WARNING = enum.auto()  #: The task succeeded, but with warnings.

    def is_ok(self) -> bool:
        return self != TaskStatusType.FAILED


@dataclasses.dataclass
class TaskStatus:
    """Represents a task status with a message."""

    type: TaskStatusType
    message: str | None

    def is_ok(self) -> bool:
        return self.type.is_ok()

    def is_failed(self) -> bool:
        return self.type == TaskStatusType.FAILED

    def is_succeeded(self) -> bool:
        return self.type == TaskStatusType.SUCCEEDED

    def is_skipped(self) -> bool:
        return self.type == TaskStatusType.SKIPPED

    def is_up_to_date(self) -> bool:
        return self.type == TaskStatusType.UP_TO_DATE

    def is_warning(self) -> bool:
        return self.type == TaskStatusType.WARNING

    @staticmethod
    def failed(message: str | None = None) -> TaskStatus:
        return TaskStatus(TaskStatusType.FAILED, message)

    @staticmethod
    def succeeded(message: str | None = None) -> TaskStatus:
        return TaskStatus(TaskStatusType.SUCCEEDED, message)

    @staticmethod
    def skipped(message: str | None = None) -> TaskStatus:
        return TaskStatus(TaskStatusType.SKIPPED, message)

    @staticmethod
    def up_to_date(message: str | None = None) -> TaskStatus:
        return TaskStatus(TaskStatusType.UP_TO_DATE, message)

    @staticmethod
    def warning(message: str | None = None) -> TaskStatus:
        return TaskStatus(TaskStatusType.WARNING, message)


class LogLevel(enum.Enum):
    """The values accepted by `level` attributes."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"
    DEBUG = "debug"

    def to_logging(self) -> int:
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.VERBOSE: logging.DEBUG,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class Task(ProjectComponent, abc.ABC):
    """
    A task is a configured build action. Tasks go through the following stages:

    * Creation, when the element that declares the task is read. The task knows its project, its owning
      target (`None` for tasks declared at the top level) and the location of its element.
    * Configuration, right before the task runs. Attributes, nested elements and text of the element are
      applied by the :class:`~anvil.core.system.configurator.Configurator` after property expansion.
    * Execution (:meth:`execute`), exactly once per run of the owning target.

    A task signals a failure by raising a :class:`TaskError` (or by returning :meth:`TaskStatus.failed`).
    """

    #: A human readable description of what the task does.
    description: str | None = None

    def __init__(self, project: Project) -> None:
        super().__init__(project)

    @property
    def name(self) -> str:
        return self.element_name or type(self).__name__

    @abc.abstractmethod
    def execute(self) -> TaskStatus | None:
        """Perform the task. Returning `None` is the same as returning :meth:`TaskStatus.succeeded`."""

        raise NotImplementedError(self)

    def perform(self) -> TaskStatus:
        """Calls :meth:`execute` and converts reads of unset required attributes into configuration errors."""

        try:
            status = self.execute()
        except Property.Empty as exc:
            prop = exc.supplier
            if isinstance(prop, Property) and prop.owner is self:
                message = f"{self.describe()} requires the {prop.name.rstrip('_')!r} attribute"
                raise ConfigurationError(message, self.location)
            raise ConfigurationError(f"{self.describe()}: {exc}", self.location) from exc
        if status is None:
            return TaskStatus.succeeded()
        if status.is_failed():
            raise TaskError(status.message or f"{self.describe()} failed", self.location)
        return status


class FailurePolicyTask(Task):
    """
    Base class for tasks that let the user decide what happens when their work fails:

    * `failonerror` – the error aborts the build,
    * `quiet` – the error is logged at debug level and the task continues,
    * otherwise – the error is logged as a warning and the task continues. If `errorproperty` is set, that
      property is set to `true` so that later targets can branch on it.

    In a delegated sub-build (see :attr:`Project.halt_on_failure`) every error aborts the build.
    """

    quiet: Property[bool] = Property.default(False)
    failonerror: Property[bool] = Property.default(False)
    errorproperty: Property[str] = Property.required(help="A property to set when an error is tolerated.")

    def check_failure_policy(self) -> None:
        if self.quiet.get() and self.failonerror.get():
            raise ConfigurationError("quiet and failonerror cannot both be set to true", self.location)

    def handle_error(self, message: str, cause: BaseException | None = None) -> None:
        if self.failonerror.get() or self.project.halt_on_failure:
            raise TaskError(message, self.location) from cause
        if self.quiet.get():
            self.logger.debug("%s", message)
            return
        self.logger.warning("%s", message)
        if self.errorproperty.is_set():
            self.project.properties.set(self.errorproperty.get(), "true", override=True)
