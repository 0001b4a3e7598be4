from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from anvil.core.system.binder import Binder
from anvil.core.system.element import Element
from anvil.core.system.errors import BuildError, ConfigurationError, Location, TaskError
from anvil.core.system.executor import BuildObserver, NullBuildObserver
from anvil.core.system.filesystem import FileSystem, LocalFileSystem
from anvil.core.system.loader import ProjectLoader, parse_build_file
from anvil.core.system.project import Project
from anvil.core.system.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class BuildOutcome(enum.Enum):
    SUCCESS = enum.auto()  #: All requested targets completed.
    FAILED = enum.auto()  #: A task failed while the targets were running.
    ABORTED = enum.auto()  #: The build could not start, e.g. because of a dependency cycle.


@dataclasses.dataclass(frozen=True)
class BuildResult:
    """The result of :meth:`BuildContext.run`."""

    outcome: BuildOutcome
    message: str | None = None
    target: str | None = None  #: The name of the target that failed.
    task: str | None = None  #: The name of the task that failed.
    location: Location = Location.UNKNOWN

    def is_success(self) -> bool:
        return self.outcome == BuildOutcome.SUCCESS

    @staticmethod
    def success() -> BuildResult:
        return BuildResult(BuildOutcome.SUCCESS)

    @staticmethod
    def failed(error: BuildError) -> BuildResult:
        return BuildResult(BuildOutcome.FAILED, str(error.cause), error.target, error.task, error.location)

    @staticmethod
    def aborted(error: ConfigurationError) -> BuildResult:
        return BuildResult(BuildOutcome.ABORTED, str(error), location=error.location)


class BuildContext:
    """
    Owns everything that lives for the duration of one build invocation: the binder and its per-class metadata
    cache, the table of registered tasks and types, the file system and the observer of the build. Nothing of it
    is shared with other contexts, so builds can run side by side (e.g. in tests).

    :param registry: The tasks and types that are available to build descriptions. Defaults to the components
        registered through the `anvil.components` entry points.
    :param filesystem: The file access used by file based tasks. Defaults to the local file system.
    :param observer: Receives the progress of the build.
    :param implicit_booleans: See :class:`Binder`.
    :param keep_going: Keep running targets that do not depend on a failed target.
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        filesystem: FileSystem | None = None,
        observer: BuildObserver | None = None,
        implicit_booleans: bool = False,
        keep_going: bool = False,
    ) -> None:
        self.registry = registry if registry is not None else ComponentRegistry().load_entrypoints()
        self.filesystem = filesystem or LocalFileSystem()
        self.observer = observer or NullBuildObserver()
        self.binder = Binder(implicit_booleans)
        self.keep_going = keep_going
        self.project: Project | None = None

    def __repr__(self) -> str:
        return f"BuildContext(project={self.project!r})"

    def load_project(
        self,
        source: Path | Element,
        properties: Mapping[str, str] | None = None,
        basedir: Path | None = None,
    ) -> Project:
        """
        Load a build description from a file or an element tree and perform its top-level tasks. The loaded
        project becomes :attr:`project`.

        :param properties: User properties. They are set before the build description is read and can not be
            changed by it.
        :param basedir: The directory that relative paths are resolved against, unless the build description
            names its own base directory. Defaults to the directory of the build file, or the current directory.
        :raise ConfigurationError: If the build description is invalid or a top-level task fails.
        """

        build_file: Path | None = None
        if isinstance(source, Path):
            build_file = source.absolute()
            source = parse_build_file(build_file)
            basedir = basedir or build_file.parent

        project = Project(self, basedir or Path.cwd(), source=source, build_file=build_file)
        for name, value in (properties or {}).items():
            project.properties.set_user(name, value)
        try:
            ProjectLoader(project).load(source)
        except TaskError as exc:
            raise ConfigurationError(f"top-level task failed: {exc.message}", exc.location) from exc
        self.project = project
        return project

    def run(self, targets: Sequence[str] = ()) -> BuildResult:
        """
        Run *targets* of the loaded project, or its default target if none are given. Build errors are not
        raised but returned as a :class:`BuildResult`.
        """

        if self.project is None:
            raise RuntimeError("no project loaded")

        targets = list(targets)
        if not targets:
            if not self.project.default_target:
                return BuildResult(BuildOutcome.ABORTED, "no target specified and the project has no default target")
            targets = [self.project.default_target]

        try:
            self.project.execute_targets(targets)
        except ConfigurationError as exc:
            logger.debug("Build aborted: %s", exc)
            return BuildResult.aborted(exc)
        except BuildError as exc:
            logger.debug("Build failed: %s", exc)
            return BuildResult.failed(exc)
        return BuildResult.success()
