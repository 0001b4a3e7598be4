""" The generic element tree that a build description is parsed into. Elements carry no semantics; the
:class:`~anvil.core.system.configurator.Configurator` gives them meaning by binding them onto objects. """

from __future__ import annotations

import dataclasses
from collections.abc import Iterator

from anvil.core.system.errors import Location


@dataclasses.dataclass
class Element:
    tag: str
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)
    children: list[Element] = dataclasses.field(default_factory=list)
    text: str = ""
    location: Location = Location.UNKNOWN

    def __repr__(self) -> str:
        return f"<{self.tag}> at {self.location}"

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return an attribute value, matching the *name* case-insensitively."""

        lower = name.lower()
        for key, value in self.attributes.items():
            if key.lower() == lower:
                return value
        return default

    def iter(self, tag: str) -> Iterator[Element]:
        """Iterate over the direct children with the given *tag* (case-insensitive)."""

        lower = tag.lower()
        return (child for child in self.children if child.tag.lower() == lower)

    def append(self, child: Element) -> Element:
        self.children.append(child)
        return child
