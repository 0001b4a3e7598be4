from __future__ import annotations

import builtins
import logging
import time
from collections.abc import Callable
from functools import partial

from anvil.common import pluralize
from anvil.core.system.errors import BuildError, ConfigurationError, TaskError
from anvil.core.system.executor import BuildObserver, GraphExecutor
from anvil.core.system.graph import TargetGraph, TargetStatus
from anvil.core.system.target import Invocation, Target
from anvil.core.system.task import TaskStatus

TARGETS_NOT_EXECUTED_TITLE = "Targets that were not executed due to failures"
logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)


class TargetExecutor(GraphExecutor):
    """
    Executes the targets of a trimmed :class:`TargetGraph` one after another in the graph's execution order.

    Each target's guard is evaluated when it is its turn, after its dependencies ran, and the target is
    skipped if the guard does not hold. When a target fails, all targets that were not started yet are
    aborted. With *keep_going*, only the targets that depend on a failed target are aborted.
    """

    def __init__(self, keep_going: bool = False) -> None:
        self.keep_going = keep_going

    def execute_graph(self, graph: TargetGraph, observer: BuildObserver) -> None:
        first_error: BuildError | None = None
        observer.before_build(graph)
        try:
            for target in graph.execution_order():
                if first_error is not None and not self.keep_going:
                    self._abort(graph, observer, target, "build aborted")
                    continue
                upstream = next((t for t in graph.get_upstream(target) if not graph.get_status(t).is_ok()), None)
                if upstream is not None:
                    self._abort(graph, observer, target, f"dependency {upstream.name!r} did not complete")
                    continue
                error = self._execute_target(graph, observer, target)
                if first_error is None:
                    first_error = error
        finally:
            observer.after_build(graph)

        if first_error is not None:
            raise first_error

    def _abort(self, graph: TargetGraph, observer: BuildObserver, target: Target, reason: str) -> None:
        status = TargetStatus.aborted(reason)
        graph.set_status(target, status)
        observer.after_target(target, status)

    def _execute_target(self, graph: TargetGraph, observer: BuildObserver, target: Target) -> BuildError | None:
        project = graph.project
        reason = target.check_guards(project)
        if reason is not None:
            status = TargetStatus.skipped(reason)
            graph.set_status(target, status)
            observer.after_target(target, status)
            return None

        graph.set_status(target, TargetStatus.ready())
        graph.set_status(target, TargetStatus.running())
        observer.before_target(target)

        current: Invocation | None = None

        def before_task(invocation: Invocation) -> None:
            nonlocal current
            current = invocation
            observer.before_task(target, invocation)

        def after_task(invocation: Invocation, status: TaskStatus) -> None:
            observer.after_task(target, invocation, status)

        try:
            target.execute(project, before_task, after_task)
        except (ConfigurationError, TaskError, BuildError) as exc:
            error: BaseException = exc
            message = str(exc)
        except Exception as exc:
            logger.debug("Unhandled exception in target %r", target.name, exc_info=True)
            error = exc
            message = f"unhandled exception: {exc}"
        else:
            status = TargetStatus.done()
            graph.set_status(target, status)
            observer.after_target(target, status)
            return None

        status = TargetStatus.failed(message)
        graph.set_status(target, status)
        observer.after_target(target, status)
        return BuildError(target.name, current.name if current else None, error)


class DefaultPrintingBuildObserver(BuildObserver):
    """Prints the progress of a build and a summary at the end."""

    def __init__(
        self,
        target_prefix: str = ">",
        status_to_text: Callable[[TargetStatus], str] | None = None,
        format_header: Callable[[str], str] | None = None,
        format_duration: Callable[[str], str] | None = None,
    ) -> None:
        self.target_prefix = target_prefix
        self.status_to_text = status_to_text or self.default_status_to_text
        self.format_header = format_header or str
        self.format_duration = format_duration or str
        self._status: dict[str, TargetStatus] = {}
        self._started: dict[str, float] = {}
        self._duration: dict[str, float] = {}

    def default_status_to_text(self, status: TargetStatus) -> str:
        if status.message:
            return f"{status.state.name} ({status.message})"
        else:
            return status.state.name

    def before_build(self, graph: TargetGraph) -> None:
        print()
        print(self.format_header(f"Build {graph.project.name}"))
        print()

    def before_target(self, target: Target) -> None:
        print(self.target_prefix, f"{target.name}:")
        self._started[target.name] = time.perf_counter()

    def after_task(self, target: Target, invocation: Invocation, status: TaskStatus) -> None:
        if not status.is_succeeded():
            message = f" ({status.message})" if status.message else ""
            print(" " * (len(self.target_prefix) + 1) + f"[{invocation.name}] {status.type.name}{message}")

    def after_target(self, target: Target, status: TargetStatus) -> None:
        if status.is_skipped():
            print(self.target_prefix, f"{target.name}:", self.status_to_text(status))
        self._status[target.name] = status
        if target.name in self._started:
            self._duration[target.name] = time.perf_counter() - self._started[target.name]

    def after_build(self, graph: TargetGraph) -> None:
        print()
        print(self.format_header("Build summary"))
        print()

        executed = [name for name, status in self._status.items() if not status.is_aborted()]
        for name in executed:
            print(
                " " * (len(self.target_prefix) + 1) + name,
                self.status_to_text(self._status[name]),
                self.format_duration(f"[{self._duration[name]:.3f}s]") if name in self._duration else "",
            )

        not_executed = [t.name for t in graph.targets(not_executed=True)]
        if not_executed:
            print()
            print(self.format_header(TARGETS_NOT_EXECUTED_TITLE))
            print()
            for name in not_executed:
                print(" " * (len(self.target_prefix) + 1) + name)

        print()
        print(f"{len(executed)} {pluralize('target', executed)} run, {len(not_executed)} not executed")
