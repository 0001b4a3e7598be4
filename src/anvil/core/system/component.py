""" Base classes for objects that are configured from the elements of a build description. """

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from anvil.core.system.errors import ConfigurationError, Location
from anvil.core.system.property import PropertyContainer
from anvil.core.system.references import Referable, Reference

if TYPE_CHECKING:
    from anvil.core.system.project import Project
    from anvil.core.system.target import Target

T_DataType = TypeVar("T_DataType", bound="DataType")


class ProjectComponent(PropertyContainer):
    """
    Base class for tasks, types and their nested elements. A component belongs to exactly one project and,
    if it was declared inside of a target, to that target.
    """

    def __init__(self, project: Project) -> None:
        super().__init__()
        self.project = project
        self.location = Location.UNKNOWN
        self.element_name: str | None = None
        self.owning_target: Target | None = None

    def __repr__(self) -> str:
        return f"<{self.element_name or type(self).__name__}> at {self.location}"

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(f"anvil.task.{self.element_name or type(self).__name__.lower()}")

    def describe(self) -> str:
        """A short human readable name of the component for use in messages."""

        return f"<{self.element_name}>" if self.element_name else type(self).__name__


class DataType(ProjectComponent, Referable):
    """
    Base class for shareable types such as paths and file lists. A data type that was declared with a `refid`
    is only an alias of another data type of the same kind; its accessors should go through :meth:`get_ref`.
    """

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self.refid: Reference | None = None

    def reference_target(self) -> str | None:
        return self.refid.refid if self.refid is not None else None

    def is_reference(self) -> bool:
        return self.refid is not None

    def set_refid(self, refid: Reference) -> None:
        self.refid = refid

    def get_ref(self: T_DataType) -> T_DataType:
        """Return the data type that this object refers to, or the object itself if it is not a reference."""

        if self.refid is None:
            return self
        return self.refid.resolve(type(self))

    def too_many_attributes(self) -> ConfigurationError:
        return ConfigurationError("You must not specify more than one attribute when using refid", self.location)

    def no_children_allowed(self) -> ConfigurationError:
        return ConfigurationError("You must not specify nested elements when using refid", self.location)
