""" Defines the executor and observer API. """

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anvil.core.system.graph import TargetGraph, TargetStatus
    from anvil.core.system.target import Invocation, Target
    from anvil.core.system.task import TaskStatus


class BuildObserver(abc.ABC):
    """Observes events of a :class:`TargetExecutor`. All methods do nothing by default."""

    def before_build(self, graph: TargetGraph) -> None:
        ...

    def before_target(self, target: Target) -> None:
        ...

    def before_task(self, target: Target, invocation: Invocation) -> None:
        ...

    def after_task(self, target: Target, invocation: Invocation, status: TaskStatus) -> None:
        ...

    def after_target(self, target: Target, status: TargetStatus) -> None:
        ...

    def after_build(self, graph: TargetGraph) -> None:
        ...


class NullBuildObserver(BuildObserver):
    """An observer that ignores all events."""


class GraphExecutor(abc.ABC):
    @abc.abstractmethod
    def execute_graph(self, graph: TargetGraph, observer: BuildObserver) -> None:
        """Execute the targets of the trimmed *graph*. Raises a :class:`BuildError` if a target fails."""
