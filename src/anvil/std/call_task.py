from __future__ import annotations

from typing import TYPE_CHECKING

from anvil.core import BuildError, ConfigurationError, Property, ProjectComponent, Task, TaskError, element
from anvil.core.system.executor import NullBuildObserver

if TYPE_CHECKING:
    from anvil.core import Project


class Param(ProjectComponent):
    """A property that is set in the called project. It wins over all other definitions of the property."""

    name_: Property[str]
    value: Property[str]


class ReferenceForward(ProjectComponent):
    """Makes the reference `refid` available in the called project, optionally under the ID `torefid`."""

    refid: Property[str]
    torefid: Property[str] = Property.required()


class CallTask(Task):
    """
    Calls another target of the same build description in a fresh copy of the project. The callee sees the
    properties of the caller unless `inheritall` is disabled; properties set with nested `<param>` (or
    `<property>`) elements always win. References are only passed when `inheritrefs` is enabled or when they
    are forwarded with a nested `<reference>` element.

    Every error in the called target is fatal, regardless of the failure policy of the tasks that it runs.
    """

    description = "Calls a target of the same project."

    target: Property[str] = Property.required(help="The name of the target to call.")
    inheritall: Property[bool] = Property.default(True)
    inheritrefs: Property[bool] = Property.default(False)

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self._params: list[Param] = []
        self._references: list[ReferenceForward] = []

    @element("param")
    def add_param(self, param: Param) -> None:
        self._params.append(param)

    @element("property")
    def add_property(self, param: Param) -> None:
        self._params.append(param)

    @element("reference")
    def add_reference(self, reference: ReferenceForward) -> None:
        self._references.append(reference)

    def execute(self) -> None:
        target = self.target.get_or(None)
        if self.owning_target is None or self.owning_target.is_root():
            self.logger.warning("Cowardly refusing to call target %r from the root", target)
            return
        if target is None:
            raise ConfigurationError("Attribute target is required.", self.location)

        overrides = {param.name_.get(): param.value.get() for param in self._params}
        references = {ref.refid.get(): ref.torefid.get_or(None) or ref.refid.get() for ref in self._references}

        self.logger.debug("Calling target %r of project %r", target, self.project.name)
        try:
            callee = self.project.derive(
                inherit_all=self.inheritall.get(),
                inherit_refs=self.inheritrefs.get(),
                overrides=overrides,
                references=references,
            )
            callee.execute_targets([target], NullBuildObserver())
        except (ConfigurationError, BuildError, TaskError) as exc:
            raise TaskError(f"calling target {target!r} failed: {exc}", self.location) from exc
