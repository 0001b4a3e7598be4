""" The build property store: a flat mapping of names to string values with "first writer wins" semantics. """

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

logger = logging.getLogger(__name__)

#: Matches `$$` (an escaped dollar sign) or a `${name}` property reference.
PROPERTY_REFERENCE = re.compile(r"\$(\$|\{([^${}]+)\})")


class PropertyStore(Mapping[str, str]):
    """
    Holds the build properties of one project. A property that has been set once is immutable unless the writer
    explicitly asks to override it. User properties (given on the command line or as overrides of a delegated
    sub-build) are immutable even for writers that ask to override.

    >>> store = PropertyStore()
    >>> store.set("name", "anvil")
    True
    >>> store.set("name", "other")
    False
    >>> store.resolve("hello ${name}, ${unknown} costs $$5")
    'hello anvil, ${unknown} costs $5'
    """

    def __init__(self) -> None:
        self._properties: dict[str, str] = {}
        self._user_properties: set[str] = set()

    def __repr__(self) -> str:
        return f"PropertyStore({self._properties!r})"

    # Mapping

    def __getitem__(self, name: str) -> str:
        return self._properties[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    # Public API

    def is_user_property(self, name: str) -> bool:
        return name in self._user_properties

    def user_properties(self) -> dict[str, str]:
        return {k: v for k, v in self._properties.items() if k in self._user_properties}

    def set(self, name: str, value: str, *, override: bool = False) -> bool:
        """
        Set a property. Returns `True` if the value was stored, `False` if an existing value was kept because the
        property is immutable.

        :param override: Replace an existing value, unless the existing value is a user property.
        """

        if name in self._user_properties:
            logger.debug("Not overriding user property %r", name)
            return False
        if name in self._properties and not override:
            logger.debug("Property %r is already set to %r", name, self._properties[name])
            return False
        self._properties[name] = str(value)
        return True

    def set_user(self, name: str, value: str) -> None:
        """Set a user property. User properties win over every other write."""

        self._properties[name] = str(value)
        self._user_properties.add(name)

    def set_inherited(self, name: str, value: str) -> None:
        """Set a property that was handed down from a calling build. It behaves like a user property unless the
        property was already set by a user (e.g. an explicit override takes precedence)."""

        if name not in self._user_properties:
            self.set_user(name, value)

    def resolve(self, template: str) -> str:
        """
        Replace every `${name}` in *template* with the value of the property. References to properties that are
        not set are kept as they are. `$$` is an escaped `$`.
        """

        def _replace(match: re.Match[str]) -> str:
            if match.group(1) == "$":
                return "$"
            name = match.group(2)
            if name in self._properties:
                return self._properties[name]
            logger.debug("Property ${%s} has not been set", name)
            return match.group(0)

        if "$" not in template:
            return template
        return PROPERTY_REFERENCE.sub(_replace, template)

    def copy(self) -> PropertyStore:
        store = PropertyStore()
        store._properties = dict(self._properties)
        store._user_properties = set(self._user_properties)
        return store
