from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from anvil.core.system.element import Element
from anvil.core.system.errors import ConfigurationError
from anvil.core.system.executor import BuildObserver
from anvil.core.system.executor.default import TargetExecutor
from anvil.core.system.graph import TargetGraph
from anvil.core.system.properties import PropertyStore
from anvil.core.system.references import ReferenceRegistry
from anvil.core.system.target import Target

if TYPE_CHECKING:
    from anvil.core.system.context import BuildContext

logger = logging.getLogger(__name__)

#: Properties that every project defines for itself and that are never handed down to a sub-build.
BUILTIN_PROPERTIES = frozenset(["project.name", "project.basedir", "anvil.file", "anvil.version"])


class Project:
    """
    A project is the root of one build: it holds the build properties, the references to shared objects and
    the targets that were declared in a build description.

    A project that runs a target on behalf of another project (see :meth:`derive`) has a :attr:`parent` and
    :attr:`halt_on_failure` set, which makes every tolerated task error fatal.
    """

    def __init__(
        self,
        context: BuildContext,
        basedir: Path,
        name: str | None = None,
        source: Element | None = None,
        build_file: Path | None = None,
        parent: Project | None = None,
        halt_on_failure: bool = False,
    ) -> None:
        self.context = context
        self.basedir = basedir.absolute()
        self.name = name or ""
        self.description: str | None = None
        self.default_target: str | None = None
        self.source = source
        self.build_file = build_file
        self.parent = parent
        self.halt_on_failure = halt_on_failure
        self.properties = PropertyStore()
        self.references = ReferenceRegistry()
        self.targets: dict[str, Target] = {}
        self.root_target = Target("")

    def __repr__(self) -> str:
        return f"Project({self.name!r}, {str(self.basedir)!r})"

    def init_builtin_properties(self) -> None:
        from anvil.core import __version__

        self.properties.set("project.name", self.name, override=True)
        self.properties.set("project.basedir", str(self.basedir), override=True)
        self.properties.set("anvil.version", __version__, override=True)
        if self.build_file is not None:
            self.properties.set("anvil.file", str(self.build_file), override=True)

    def resolve_file(self, path: str | Path) -> Path:
        """Resolve *path* relative to the project's base directory. Absolute paths are returned unchanged."""

        path = Path(path)
        if path.is_absolute():
            return path
        return self.basedir / path

    def add_target(self, target: Target) -> Target:
        if target.name in self.targets:
            raise ConfigurationError(f"Duplicate target {target.name!r}", target.location)
        self.targets[target.name] = target
        return target

    def target(self, name: str) -> Target:
        """Return a target by name."""

        try:
            return self.targets[name]
        except KeyError:
            raise ConfigurationError(f"Target {name!r} does not exist in the project {self.name!r}.")

    def execute_root(self) -> None:
        """Perform the tasks declared at the top level of the build description, in document order."""

        logger.debug("Executing %d top-level task(s) of project %r", len(self.root_target), self.name)
        self.root_target.execute(self)

    def execute_targets(self, names: Sequence[str], observer: BuildObserver | None = None) -> None:
        """
        Run the given targets and their dependencies.

        :raise ConfigurationError: If a target does not exist or the targets depend on a cycle. Nothing has run
            in that case.
        :raise BuildError: If a target failed.
        """

        graph = TargetGraph(self).trim(names)
        executor = TargetExecutor(keep_going=self.context.keep_going and not self.halt_on_failure)
        executor.execute_graph(graph, observer or self.context.observer)

    def derive(
        self,
        inherit_all: bool = True,
        inherit_refs: bool = False,
        overrides: Mapping[str, str] | None = None,
        references: Mapping[str, str] | None = None,
    ) -> Project:
        """
        Create a fresh project from the same build description to run a target on behalf of this project. The
        new project has its own property store and reference registry.

        :param inherit_all: Hand down all properties of this project. Otherwise the new project only knows the
            *overrides*.
        :param inherit_refs: Make all references of this project visible in the new project.
        :param overrides: Properties that are set in the new project. They win over inherited properties and
            over every property that the new project's build description sets.
        :param references: Maps the IDs of references in this project to the IDs that they are registered as
            in the new project. They are registered after the build description has been read, as are inherited
            references that the new project does not define itself.
        """

        from anvil.core.system.loader import ProjectLoader

        if self.source is None:
            raise ConfigurationError(f"Project {self.name!r} was not loaded from a build description")

        child = Project(
            self.context,
            self.basedir,
            source=self.source,
            build_file=self.build_file,
            parent=self,
            halt_on_failure=True,
        )
        for name, value in (overrides or {}).items():
            child.properties.set_user(name, value)
        if inherit_all:
            for name, value in self.properties.items():
                if name not in BUILTIN_PROPERTIES:
                    child.properties.set_inherited(name, value)

        ProjectLoader(child).load(self.source)

        if inherit_refs:
            for refid, obj in self.references.items():
                if refid not in child.references:
                    child.references.register(refid, obj)

        for refid, to_refid in (references or {}).items():
            if refid not in self.references:
                raise ConfigurationError(f"reference {refid!r} not found")
            child.references.register(to_refid or refid, self.references.get(refid))

        return child
