""" Builds and configures the object tree of a build description with the help of the :class:`Binder`. """

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from anvil.core.system.binder import describe_element, instantiate
from anvil.core.system.component import DataType, ProjectComponent
from anvil.core.system.element import Element
from anvil.core.system.errors import ConfigurationError

if TYPE_CHECKING:
    from anvil.core.system.project import Project
    from anvil.core.system.target import Target

logger = logging.getLogger(__name__)


class Configurator:
    """
    Turns elements into configured objects of a project.

    Before attributes are applied, `${...}` references in attribute values and text are expanded against the
    project's properties. The `id` attribute registers the object in the project's references and the `refid`
    attribute turns a data type into a reference to another one; `refid` must be the only attribute (besides
    `id`) of its element. Elements of other kinds may declare `refid` as a regular attribute.

    An `id` is registered when its element is configured, not when the object is created. Objects of targets that
    have not run yet can therefore not be referenced.
    """

    def __init__(self, project: Project) -> None:
        self.project = project
        self.binder = project.context.binder

    def create(self, element: Element, owning_target: Target | None = None) -> Any:
        """
        Instantiate the task or type registered for the element's tag without configuring it. The declarations of its
        class are checked here, so that invalid classes fail before any target runs.
        """

        cls = self.project.context.registry.lookup(element.tag)
        if cls is None:
            raise ConfigurationError(f"unknown task or type <{element.tag}>", element.location)
        try:
            self.binder.describe(cls)
            instance = instantiate(cls, self.project)
        except ConfigurationError as exc:
            raise exc.with_location(element.location)
        if isinstance(instance, ProjectComponent):
            instance.element_name = element.tag.lower()
            instance.location = element.location
            instance.owning_target = owning_target
        return instance

    def configure(self, element: Element, owner: Any | None = None) -> Any:
        """
        Configure the object for *element*. Without an *owner*, the object is created from the registry.
        Otherwise the element is a nested element of *owner* and the object is created through the binder,
        configured, and only then attached to the owner.
        """

        if owner is None:
            return self.configure_instance(element, self.create(element))

        handle = self.binder.create_child(self.project, owner, element.tag, element.location)
        self.configure_instance(element, handle.instance)
        handle.attach()
        return handle.instance

    def configure_instance(self, element: Element, instance: Any) -> Any:
        """Apply the attributes, nested elements and text of *element* to the existing *instance*."""

        logger.debug("Configuring %s from %r", describe_element(instance), element)
        self._register_id(element, instance)
        resolve = self.project.properties.resolve
        attributes = {name: resolve(value) for name, value in element.attributes.items()}

        refid = next((value for name, value in attributes.items() if name.lower() == "refid"), None)
        if refid is not None and isinstance(instance, DataType):
            self._configure_reference(element, instance, refid, attributes)
            return instance

        for name, value in attributes.items():
            if name.lower() != "id":
                self.binder.set_attribute(self.project, instance, name, value, element.location)
        for child in element.children:
            self.configure(child, instance)
        if element.text:
            self.binder.add_text(self.project, instance, resolve(element.text), element.location)
        return instance

    def _configure_reference(
        self, element: Element, instance: DataType, refid: str, attributes: dict[str, str]
    ) -> None:
        if any(name.lower() not in ("id", "refid") for name in attributes):
            raise instance.too_many_attributes().with_location(element.location)
        if element.children or element.text.strip():
            raise instance.no_children_allowed().with_location(element.location)
        instance.set_refid(self.project.references.reference(refid, element.location))

        # Unknown IDs, type mismatches and reference cycles are configuration errors.
        instance.get_ref()

    def _register_id(self, element: Element, instance: Any) -> None:
        refid = element.get("id")
        if refid is not None:
            self.project.references.register(self.project.properties.resolve(refid), instance)
