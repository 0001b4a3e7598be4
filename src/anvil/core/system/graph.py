from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from networkx import DiGraph, find_cycle
from networkx.exception import NetworkXNoCycle

from anvil.common import not_none
from anvil.core.system.errors import ConfigurationError, DependencyCycleError
from anvil.core.system.target import Target

if TYPE_CHECKING:
    from anvil.core.system.project import Project

logger = logging.getLogger(__name__)


class TargetState(enum.Enum):
    """The states a target goes through in a build run."""

    PENDING = enum.auto()  #: The target has not been looked at yet.
    SKIPPED = enum.auto()  #: The guard of the target prevented it from running.
    READY = enum.auto()  #: The guard allows the target to run.
    RUNNING = enum.auto()  #: The tasks of the target are being executed.
    DONE = enum.auto()  #: All tasks of the target completed.
    FAILED = enum.auto()  #: A task of the target failed.
    ABORTED = enum.auto()  #: The target did not run because the build was aborted.

    def is_final(self) -> bool:
        return self in (TargetState.SKIPPED, TargetState.DONE, TargetState.FAILED, TargetState.ABORTED)

    def is_ok(self) -> bool:
        return self in (TargetState.SKIPPED, TargetState.DONE)


@dataclasses.dataclass
class TargetStatus:
    """Represents a target state with a message."""

    state: TargetState
    message: str | None = None

    def is_ok(self) -> bool:
        return self.state.is_ok()

    def is_failed(self) -> bool:
        return self.state == TargetState.FAILED

    def is_aborted(self) -> bool:
        return self.state == TargetState.ABORTED

    def is_skipped(self) -> bool:
        return self.state == TargetState.SKIPPED

    @staticmethod
    def pending() -> TargetStatus:
        return TargetStatus(TargetState.PENDING)

    @staticmethod
    def skipped(message: str | None = None) -> TargetStatus:
        return TargetStatus(TargetState.SKIPPED, message)

    @staticmethod
    def ready() -> TargetStatus:
        return TargetStatus(TargetState.READY)

    @staticmethod
    def running() -> TargetStatus:
        return TargetStatus(TargetState.RUNNING)

    @staticmethod
    def done(message: str | None = None) -> TargetStatus:
        return TargetStatus(TargetState.DONE, message)

    @staticmethod
    def failed(message: str | None = None) -> TargetStatus:
        return TargetStatus(TargetState.FAILED, message)

    @staticmethod
    def aborted(message: str | None = None) -> TargetStatus:
        return TargetStatus(TargetState.ABORTED, message)


class TargetGraph:
    """The target graph represents a project's targets as a directed graph. An edge points from a target to the
    targets that depend on it.

    Before a target graph is passed to an executor, it is trimmed to contain only the targets that are needed
    for the requested goal targets. Trimming validates that every dependency exists and that there are no
    dependency cycles, so that a broken graph is reported before any task runs."""

    def __init__(self, project: Project, populate: bool = True) -> None:
        self._project = project
        self._digraph = DiGraph()
        self._order: list[str] = []
        self._status: dict[str, TargetStatus] = {}
        if populate:
            self.populate()

    def __bool__(self) -> bool:
        return len(self._digraph.nodes) > 0

    def __len__(self) -> int:
        return len(self._digraph.nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._digraph.nodes

    # Low level internal API

    def _get_target(self, name: str) -> Target | None:
        data = self._digraph.nodes.get(name)
        return None if data is None else data["data"]

    def _check_dependency(self, target: Target, dependency: str) -> None:
        if dependency not in self._project.targets:
            raise ConfigurationError(
                f"Target {dependency!r} does not exist in the project {self._project.name!r}. "
                f"It is used from target {target.name!r}.",
                target.location,
            )

    def _visit(self, name: str, visited: set[str], path: list[str], order: list[str]) -> None:
        """Depth-first walk in `depends` order that appends each target after all of its dependencies."""

        if name in path:
            cycle = path[path.index(name) :] + [name]
            raise DependencyCycleError(cycle, not_none(self._get_target(name)).location)
        if name in visited:
            return
        target = not_none(self._get_target(name), lambda: f"no target {name!r} in the graph")
        for dependency in target.depends:
            self._check_dependency(target, dependency)
            self._visit(dependency, visited, path + [name], order)
        visited.add(name)
        order.append(name)

    # Public API

    @property
    def project(self) -> Project:
        return self._project

    def populate(self) -> None:
        """Add all targets of the project to the graph."""

        for target in self._project.targets.values():
            self._digraph.add_node(target.name, data=target)
        for target in self._project.targets.values():
            for dependency in target.depends:
                if dependency in self._digraph.nodes:
                    self._digraph.add_edge(dependency, target.name)

    def validate(self) -> None:
        """Check all targets of the graph for missing dependencies and cycles."""

        for target in self.targets():
            for dependency in target.depends:
                self._check_dependency(target, dependency)
        try:
            edges = find_cycle(self._digraph)
        except NetworkXNoCycle:
            return
        cycle = [u for u, _v in edges] + [edges[0][0]]
        raise DependencyCycleError(cycle, not_none(self._get_target(cycle[0])).location)

    def trim(self, goals: Sequence[str]) -> TargetGraph:
        """Returns a copy of the graph that contains only the *goals* and their transitive dependencies, and
        computes the execution order.

        :raise ConfigurationError: If a goal or a dependency does not exist.
        :raise DependencyCycleError: If the goals depend on a cycle.
        """

        order: list[str] = []
        visited: set[str] = set()
        for goal in goals:
            if goal not in self._digraph.nodes:
                raise ConfigurationError(f"Target {goal!r} does not exist in the project {self._project.name!r}.")
            self._visit(goal, visited, [], order)

        graph = TargetGraph(self._project, populate=False)
        graph._digraph = self._digraph.subgraph(order).copy()
        graph._order = order
        graph._status = {name: TargetStatus.pending() for name in order}
        return graph

    def execution_order(self) -> list[Target]:
        """Returns the targets in the order they are executed. Dependencies come before their dependents, in
        the order they are listed in `depends`, and each target appears once."""

        return [self.get_target(name) for name in self._order]

    def get_target(self, name: str) -> Target:
        return not_none(self._get_target(name), lambda: f"no target {name!r} in the graph")

    def get_dependencies(self, target: Target) -> list[Target]:
        return [self.get_target(name) for name in self._digraph.predecessors(target.name)]

    def get_dependents(self, target: Target) -> list[Target]:
        return [self.get_target(name) for name in self._digraph.successors(target.name)]

    def get_upstream(self, target: Target) -> Iterator[Target]:
        """Iterate over all transitive dependencies of *target*."""

        stack = list(self._digraph.predecessors(target.name))
        seen: set[str] = set()
        while stack:
            name = stack.pop()
            if name not in seen:
                seen.add(name)
                yield self.get_target(name)
                stack.extend(self._digraph.predecessors(name))

    def get_status(self, target: Target) -> TargetStatus:
        return self._status.get(target.name, TargetStatus.pending())

    def set_status(self, target: Target, status: TargetStatus) -> None:
        current = self.get_status(target)
        if current.state.is_final():
            raise RuntimeError(f"target {target.name!r} already has a final status ({current.state.name})")
        logger.debug("Target %r: %s -> %s", target.name, current.state.name, status.state.name)
        self._status[target.name] = status

    def targets(
        self,
        pending: bool = False,
        failed: bool = False,
        not_executed: bool = False,
    ) -> Iterable[Target]:
        """Returns the targets in the graph.

        :param pending: Return only targets that have not reached a final state.
        :param failed: Return only failed targets.
        :param not_executed: Return only targets that were aborted."""

        targets = (self.get_target(name) for name in (self._order or self._digraph.nodes))
        if pending:
            targets = (t for t in targets if not self.get_status(t).state.is_final())
        if failed:
            targets = (t for t in targets if self.get_status(t).is_failed())
        if not_executed:
            targets = (t for t in targets if self.get_status(t).is_aborted())
        return targets

    def is_complete(self) -> bool:
        """Returns `True` if, and only if, every target in the graph was executed or skipped."""

        return all(self.get_status(t).is_ok() for t in self.targets())
