""" Named references to shared objects and the slot namespace of live value cells. """

from __future__ import annotations

import abc
import logging
import re
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar, overload

from anvil.common import Supplier
from anvil.core.system.errors import ConfigurationError, Location, ReferenceCycleError

T = TypeVar("T")
logger = logging.getLogger(__name__)

#: An attribute value that consists of exactly one slot reference, e.g. `%{task.current_file}`.
SLOT_REFERENCE = re.compile(r"^%\{([\w.\-]+)\}$")


def parse_slot_reference(value: str) -> str | None:
    """
    Returns the slot name if *value* is a slot reference. Slot references cannot be mixed with other text.

    >>> parse_slot_reference("%{task.current_file}")
    'task.current_file'
    >>> parse_slot_reference("file: %{task.current_file}") is None
    True
    """

    match = SLOT_REFERENCE.match(value)
    return match.group(1) if match else None


class Referable(abc.ABC):
    """Implemented by objects that may themselves only be an alias of another registered object."""

    @abc.abstractmethod
    def reference_target(self) -> str | None:
        """Return the ID of the object that this object refers to, or `None` if it is not a reference."""


class Reference:
    """A named pointer to an object in a :class:`ReferenceRegistry`. The pointer is resolved lazily."""

    def __init__(self, registry: ReferenceRegistry, refid: str, location: Location | None = None) -> None:
        self.registry = registry
        self.refid = refid
        self.location = location or Location.UNKNOWN

    def __repr__(self) -> str:
        return f"Reference({self.refid!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Reference) and other.registry is self.registry and other.refid == self.refid

    def __hash__(self) -> int:
        return hash(self.refid)

    @overload
    def resolve(self) -> Any:
        ...

    @overload
    def resolve(self, expected_type: type[T]) -> T:
        ...

    def resolve(self, expected_type: type[Any] | None = None) -> Any:
        try:
            return self.registry.resolve(self.refid, expected_type)
        except ConfigurationError as exc:
            raise exc.with_location(self.location)


class Slot(Supplier[Any]):
    """A live value cell. Consumers bound to a slot observe every value that a producer stores in it."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: Any = None

    def __repr__(self) -> str:
        return f"Slot({self.name!r})"

    def derived_from(self) -> Iterable[Supplier[Any]]:
        return ()

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value


class ReferenceRegistry:
    """
    Maps IDs to the objects that were declared with them, and slot names to :class:`Slot` objects. Resolving an
    ID follows :class:`Referable` objects until an object that is not itself a reference is found.
    """

    def __init__(self) -> None:
        self._objects: dict[str, Any] = {}
        self._slots: dict[str, Slot] = {}

    def __contains__(self, refid: str) -> bool:
        return refid in self._objects

    def __iter__(self) -> Iterator[str]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def items(self) -> Iterable[tuple[str, Any]]:
        return self._objects.items()

    def register(self, refid: str, obj: Any) -> None:
        if refid in self._objects and self._objects[refid] is not obj:
            logger.warning("Overriding previous definition of reference to %r", refid)
        self._objects[refid] = obj

    def get(self, refid: str) -> Any | None:
        """Return the object registered under *refid* without following references."""

        return self._objects.get(refid)

    def reference(self, refid: str, location: Location | None = None) -> Reference:
        return Reference(self, refid, location)

    def resolve(self, refid: str, expected_type: type[Any] | None = None) -> Any:
        """
        Resolve *refid*, following reference chains.

        :raise ConfigurationError: If the ID is unknown or the object is not an instance of *expected_type*.
        :raise ReferenceCycleError: If the chain of references leads back to an ID already visited.
        """

        chain: list[str] = []
        key = refid
        while True:
            if key in chain:
                raise ReferenceCycleError([*chain, key])
            chain.append(key)
            if key not in self._objects:
                if len(chain) == 1:
                    raise ConfigurationError(f"reference {key!r} not found")
                raise ConfigurationError(f"reference {key!r} not found (via {' -> '.join(chain[:-1])})")
            obj = self._objects[key]
            target = obj.reference_target() if isinstance(obj, Referable) else None
            if target is None:
                break
            key = target

        if expected_type is not None and not isinstance(obj, expected_type):
            raise ConfigurationError(
                f"{refid!r} doesn't denote a {expected_type.__name__}, but a {type(obj).__name__}"
            )
        return obj

    def slot(self, name: str) -> Slot:
        """Return the slot with the given *name*, creating it on first access."""

        try:
            return self._slots[name]
        except KeyError:
            slot = self._slots[name] = Slot(name)
            return slot

    def copy(self) -> ReferenceRegistry:
        """Return a registry that shares the same objects (by identity) but not the slots."""

        registry = ReferenceRegistry()
        registry._objects = dict(self._objects)
        return registry
