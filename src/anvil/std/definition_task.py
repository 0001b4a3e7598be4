""" Tasks that make Python classes available as elements of a build description. """

from __future__ import annotations

import abc

from anvil.common import appending_to_sys_path, import_class
from anvil.core import ConfigurationError, PathList, Property, Task


class _DefinitionTask(Task):
    name_: Property[str] = Property.required(help="The element name to register the class under.")
    classname: Property[str] = Property.required(help="The class, as `package.module.Class`.")
    classpath: Property[PathList] = Property.required(help="Directories to search for the class' module.")

    def _import(self) -> type:
        classpath = [str(p) for p in self.classpath.get()] if self.classpath.is_set() else []
        try:
            with appending_to_sys_path(classpath):
                return import_class(self.classname.get())
        except (ImportError, TypeError, ValueError) as exc:
            message = f"{self.describe()}: unable to load {self.classname.get()!r}: {exc}"
            raise ConfigurationError(message, self.location) from exc

    @abc.abstractmethod
    def _register(self, name: str, cls: type) -> None:
        ...

    def execute(self) -> None:
        name, cls = self.name_.get(), self._import()
        try:
            self._register(name, cls)
        except TypeError as exc:
            raise ConfigurationError(f"{self.describe()}: {exc}", self.location) from exc
        self.logger.debug("Registered <%s> as %s", name, cls.__qualname__)


class TaskdefTask(_DefinitionTask):
    """Registers a :class:`Task` subclass as a task."""

    description = "Defines a task."

    def _register(self, name: str, cls: type) -> None:
        self.project.context.registry.add_task(name, cls)


class TypedefTask(_DefinitionTask):
    """Registers a class as a data type."""

    description = "Defines a data type."

    def _register(self, name: str, cls: type) -> None:
        self.project.context.registry.add_type(name, cls)
