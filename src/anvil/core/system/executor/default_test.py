from __future__ import annotations

from textwrap import dedent

from pytest import CaptureFixture, raises

from anvil.core.system.context import BuildContext
from anvil.core.system.errors import BuildError, TaskError
from anvil.core.system.executor import BuildObserver
from anvil.core.system.executor.default import TARGETS_NOT_EXECUTED_TITLE, DefaultPrintingBuildObserver
from anvil.core.system.filesystem import MemoryFileSystem
from anvil.core.system.graph import TargetGraph, TargetState, TargetStatus
from anvil.core.system.project import Project
from anvil.core.system.property import Property
from anvil.core.system.target import Invocation, Target
from anvil.core.system.task import Task, TaskStatus
from anvil.core.testing import default_registry, load_build_string


class RecordTask(Task):
    """Appends its value to the `log` property."""

    value: Property[str]

    def execute(self) -> None:
        log = self.project.properties.get("log", "")
        self.project.properties.set("log", log + self.value.get() + ";", override=True)


class CrashTask(Task):
    def execute(self) -> None:
        raise RuntimeError("crashed")


class RecordingObserver(BuildObserver):
    def __init__(self) -> None:
        self.events: list[str] = []

    def before_build(self, graph: TargetGraph) -> None:
        self.events.append("before_build")

    def before_target(self, target: Target) -> None:
        self.events.append(f"before_target:{target.name}")

    def after_task(self, target: Target, invocation: Invocation, status: TaskStatus) -> None:
        self.events.append(f"after_task:{target.name}:{invocation.name}:{status.type.name}")

    def after_target(self, target: Target, status: TargetStatus) -> None:
        self.events.append(f"after_target:{target.name}:{status.state.name}")

    def after_build(self, graph: TargetGraph) -> None:
        self.events.append("after_build")


BUILD = dedent(
    """
    <project name="executor">
        <target name="a"><record value="a"/></target>
        <target name="b" depends="a"><fail message="b failed"/><record value="b"/></target>
        <target name="c"><record value="c"/></target>
        <target name="d" depends="b"><record value="d"/></target>
        <target name="e" depends="a"><crash/></target>
        <target name="guarded" depends="a" if="enabled"><record value="guarded"/></target>
        <target name="after-guarded" depends="guarded"><record value="after-guarded"/></target>
    </project>
    """
)


def _load(keep_going: bool = False) -> Project:
    registry = default_registry()
    registry.add_task("record", RecordTask)
    registry.add_task("crash", CrashTask)
    context = BuildContext(registry, MemoryFileSystem(), keep_going=keep_going)
    return load_build_string(context, BUILD)


def test__TargetExecutor__runs_targets_and_notifies_the_observer() -> None:
    project = _load()
    observer = RecordingObserver()
    project.execute_targets(["a", "c"], observer)

    assert project.properties["log"] == "a;c;"
    assert observer.events == [
        "before_build",
        "before_target:a",
        "after_task:a:record:SUCCEEDED",
        "after_target:a:DONE",
        "before_target:c",
        "after_task:c:record:SUCCEEDED",
        "after_target:c:DONE",
        "after_build",
    ]


def test__TargetExecutor__failure_aborts_the_remaining_targets() -> None:
    project = _load()
    observer = RecordingObserver()

    with raises(BuildError) as excinfo:
        project.execute_targets(["b", "c"], observer)

    assert excinfo.value.target == "b"
    assert excinfo.value.task == "fail"
    assert isinstance(excinfo.value.cause, TaskError)
    assert str(excinfo.value) == 'task "fail" of target "b" failed: <string>:4: b failed'
    assert project.properties["log"] == "a;"
    assert "after_task:b:fail:FAILED" in observer.events
    assert "after_target:b:FAILED" in observer.events
    assert "after_target:c:ABORTED" in observer.events
    assert observer.events[-1] == "after_build"


def test__TargetExecutor__keep_going_only_aborts_dependents_of_failed_targets() -> None:
    project = _load(keep_going=True)
    observer = RecordingObserver()

    with raises(BuildError) as excinfo:
        project.execute_targets(["d", "c"], observer)

    assert excinfo.value.target == "b"
    assert project.properties["log"] == "a;c;"
    assert "after_target:d:ABORTED" in observer.events
    assert "after_target:c:DONE" in observer.events


def test__TargetExecutor__halt_on_failure_ignores_keep_going() -> None:
    project = _load(keep_going=True)
    project.halt_on_failure = True

    with raises(BuildError):
        project.execute_targets(["d", "c"], RecordingObserver())
    assert project.properties["log"] == "a;"


def test__TargetExecutor__skipped_targets_do_not_block_dependents() -> None:
    project = _load()
    observer = RecordingObserver()
    project.execute_targets(["after-guarded"], observer)

    assert project.properties["log"] == "a;after-guarded;"
    assert "after_target:guarded:SKIPPED" in observer.events


def test__TargetExecutor__guard_sees_properties_of_dependencies() -> None:
    project = _load()
    project.properties.set("enabled", "yes")
    project.execute_targets(["after-guarded"], RecordingObserver())
    assert project.properties["log"] == "a;guarded;after-guarded;"


def test__TargetExecutor__unhandled_exception_fails_the_target() -> None:
    project = _load()
    graph_status: list[TargetStatus] = []

    class Observer(RecordingObserver):
        def after_target(self, target: Target, status: TargetStatus) -> None:
            graph_status.append(status)

    with raises(BuildError) as excinfo:
        project.execute_targets(["e"], Observer())

    assert isinstance(excinfo.value.cause, RuntimeError)
    assert excinfo.value.task == "crash"
    assert graph_status[-1].state == TargetState.FAILED
    assert graph_status[-1].message == "unhandled exception: crashed"


def test__DefaultPrintingBuildObserver__prints_summary(capsys: CaptureFixture[str]) -> None:
    project = _load()
    with raises(BuildError):
        project.execute_targets(["b", "c"], DefaultPrintingBuildObserver())

    out = capsys.readouterr().out
    assert "Build executor" in out
    assert "> a:" in out
    assert "[fail] FAILED" in out
    assert "FAILED (<string>:4: b failed)" in out
    assert TARGETS_NOT_EXECUTED_TITLE in out
    assert "2 targets run, 1 not executed" in out
