""" The table of element names that tasks and data types are registered under. """

from __future__ import annotations

import logging
from collections.abc import Mapping

from importlib_metadata import entry_points  # Stdlib module is bugged in 3.10

from anvil.core.system.task import Task

logger = logging.getLogger(__name__)

#: Entry point group of functions that register tasks and types, e.g. `anvil.std:register_defaults`.
ENTRYPOINT_GROUP = "anvil.components"


class ComponentRegistry:
    """
    Maps element names (case-insensitive) to the task and data type classes that implement them. A name can be
    registered as a task or as a type, but not as both.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, type[Task]] = {}
        self._types: dict[str, type] = {}

    def __repr__(self) -> str:
        return f"ComponentRegistry(tasks={sorted(self._tasks)}, types={sorted(self._types)})"

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    @property
    def tasks(self) -> Mapping[str, type[Task]]:
        return self._tasks

    @property
    def types(self) -> Mapping[str, type]:
        return self._types

    def add_task(self, name: str, cls: type[Task]) -> None:
        if not (isinstance(cls, type) and issubclass(cls, Task)):
            raise TypeError(f"expected a Task subclass for {name!r}, got {cls!r}")
        key = name.lower()
        self._types.pop(key, None)
        if key in self._tasks and self._tasks[key] is not cls:
            logger.debug("Redefining task %r (%s -> %s)", key, self._tasks[key].__qualname__, cls.__qualname__)
        self._tasks[key] = cls

    def add_type(self, name: str, cls: type) -> None:
        if not isinstance(cls, type):
            raise TypeError(f"expected a class for {name!r}, got {cls!r}")
        if issubclass(cls, Task):
            raise TypeError(f"{cls.__qualname__} is a task and can not be registered as a type")
        key = name.lower()
        self._tasks.pop(key, None)
        if key in self._types and self._types[key] is not cls:
            logger.debug("Redefining type %r (%s -> %s)", key, self._types[key].__qualname__, cls.__qualname__)
        self._types[key] = cls

    def lookup(self, name: str) -> type | None:
        key = name.lower()
        return self._tasks.get(key) or self._types.get(key)

    def copy(self) -> ComponentRegistry:
        registry = ComponentRegistry()
        registry._tasks = dict(self._tasks)
        registry._types = dict(self._types)
        return registry

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> ComponentRegistry:
        """Call every function registered in the entry point *group* with this registry. Returns the registry."""

        for entrypoint in entry_points(group=group):
            logger.debug("Loading components from entrypoint %r (%s)", entrypoint.name, entrypoint.value)
            entrypoint.load()(self)
        return self
