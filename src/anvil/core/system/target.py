""" A target is a named, ordered list of tasks with dependencies on other targets and guard conditions. """

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from anvil.core.system.configurator import Configurator
from anvil.core.system.element import Element
from anvil.core.system.errors import Location
from anvil.core.system.task import Task, TaskStatus

if TYPE_CHECKING:
    from anvil.core.system.project import Project


def split_names(value: str | None) -> list[str]:
    """
    Split a comma-separated list of names.

    >>> split_names(" compile, test ,,package")
    ['compile', 'test', 'package']
    """

    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


class Invocation:
    """
    A task (or a data type) declared inside of a target together with the element that it is configured from.

    The object is created from the element by :meth:`instantiate` unless it is passed in directly, and it is
    configured the first time it is performed, so that property references in its element see the properties
    set by the tasks that ran before it.
    """

    def __init__(self, instance: Any | None = None, element: Element | None = None) -> None:
        assert instance is not None or element is not None, "an instance or an element is required"
        self.instance = instance
        self.element = element
        self.target: Target | None = None
        self.configured = element is None

    def __repr__(self) -> str:
        return f"Invocation({self.element if self.instance is None else self.instance!r})"

    @property
    def location(self) -> Location:
        if self.element is not None:
            return self.element.location
        return getattr(self.instance, "location", Location.UNKNOWN)

    @property
    def name(self) -> str:
        if isinstance(self.instance, Task):
            return self.instance.name
        return self.element.tag if self.element is not None else type(self.instance).__name__

    def instantiate(self, project: Project) -> Any:
        """Create the object from the element's tag, if that has not happened yet, and return it."""

        if self.instance is None:
            assert self.element is not None
            owner = None if self.target is None or self.target.is_root() else self.target
            self.instance = Configurator(project).create(self.element, owner)
        return self.instance

    def configure(self, project: Project) -> None:
        self.instantiate(project)
        if self.configured:
            return
        assert self.element is not None
        Configurator(project).configure_instance(self.element, self.instance)
        self.configured = True

    def perform(self, project: Project) -> TaskStatus | None:
        """Configure the object and, if it is a task, execute it. Returns `None` for data types."""

        self.configure(project)
        if isinstance(self.instance, Task):
            return self.instance.perform()
        return None


class Target:
    """
    A named unit of build work.

    :param depends: The names of the targets that must run before this target, in the order they should run.
    :param if_condition: Comma-separated property names. The target only runs if all of them are set.
    :param unless_condition: Comma-separated property names. The target does not run if any of them is set.
    """

    def __init__(
        self,
        name: str,
        depends: Sequence[str] = (),
        if_condition: str | None = None,
        unless_condition: str | None = None,
        description: str | None = None,
        location: Location | None = None,
    ) -> None:
        self.name = name
        self.depends = list(depends)
        self.if_condition = if_condition
        self.unless_condition = unless_condition
        self.description = description
        self.location = location or Location.UNKNOWN
        self._invocations: list[Invocation] = []

    def __repr__(self) -> str:
        return f"Target({self.name!r})"

    def __iter__(self) -> Iterator[Invocation]:
        return iter(self._invocations)

    def __len__(self) -> int:
        return len(self._invocations)

    def add(self, item: Task | Invocation) -> Invocation:
        """Append a task (or an invocation) to the target."""

        invocation = item if isinstance(item, Invocation) else Invocation(item)
        invocation.target = self
        if isinstance(invocation.instance, Task) and not self.is_root():
            invocation.instance.owning_target = self
        self._invocations.append(invocation)
        return invocation

    def is_root(self) -> bool:
        """Returns `True` for the implicit target that holds the tasks declared at the top level."""

        return self.name == ""

    def check_guards(self, project: Project) -> str | None:
        """Returns a reason to skip the target based on its `if` and `unless` conditions, or `None` to run it."""

        for name in split_names(project.properties.resolve(self.if_condition or "")):
            if name not in project.properties:
                return f"property {name!r} is not set"
        for name in split_names(project.properties.resolve(self.unless_condition or "")):
            if name in project.properties:
                return f"property {name!r} is set"
        return None

    def execute(
        self,
        project: Project,
        before_task: Callable[[Invocation], None] | None = None,
        after_task: Callable[[Invocation, TaskStatus], None] | None = None,
    ) -> None:
        """
        Perform every task of the target in declaration order. The first error propagates and aborts the
        remaining tasks. The guards are not checked here, see :meth:`check_guards`.
        """

        for invocation in self._invocations:
            if before_task:
                before_task(invocation)
            try:
                status = invocation.perform(project)
            except BaseException:
                if after_task:
                    after_task(invocation, TaskStatus.failed())
                raise
            if after_task and status is not None:
                after_task(invocation, status)
