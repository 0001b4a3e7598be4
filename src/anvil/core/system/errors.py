from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import ClassVar


@dataclasses.dataclass(frozen=True)
class Location:
    """Points to the place in a build description that an element was declared at."""

    UNKNOWN: ClassVar[Location]

    filename: str | None
    lineno: int | None = None
    column: int | None = None

    def __bool__(self) -> bool:
        return self.filename is not None or self.lineno is not None

    def __str__(self) -> str:
        parts = [self.filename or "<unknown>"]
        if self.lineno is not None:
            parts.append(str(self.lineno))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


Location.UNKNOWN = Location(None)


class _LocatedError(Exception):
    def __init__(self, message: str, location: Location | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location or Location.UNKNOWN

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ConfigurationError(_LocatedError):
    """
    Raised when a build description cannot be turned into a runnable build, e.g. because of an unsupported
    attribute, a value that cannot be coerced, a missing required attribute or a cycle. Configuration errors
    are always fatal.
    """

    def with_location(self, location: Location | None) -> ConfigurationError:
        """Attach *location* unless the error already knows where it comes from. Returns the error itself."""

        if not self.location and location:
            self.location = location
        return self


class DependencyCycleError(ConfigurationError):
    def __init__(self, cycle: Sequence[str], location: Location | None = None) -> None:
        self.cycle = list(cycle)
        super().__init__(f"encountered a dependency cycle: {' -> '.join(self.cycle)}", location)


class ReferenceCycleError(ConfigurationError):
    def __init__(self, chain: Sequence[str], location: Location | None = None) -> None:
        self.chain = list(chain)
        super().__init__(f"circular reference: {' -> '.join(self.chain)}", location)


class TaskError(_LocatedError):
    """
    Raised by a task when the work it performs fails. Whether a task raises this error or only reports the
    problem is decided by the task's failure policy.
    """


class BuildError(Exception):
    """Raised by the executor when a target did not complete."""

    def __init__(self, target: str, task: str | None, cause: BaseException) -> None:
        self.target = target
        self.task = task
        self.cause = cause

    @property
    def location(self) -> Location:
        location = getattr(self.cause, "location", None)
        return location if isinstance(location, Location) else Location.UNKNOWN

    def __str__(self) -> str:
        if self.task:
            return f'task "{self.task}" of target "{self.target}" failed: {self.cause}'
        return f'target "{self.target}" failed: {self.cause}'
