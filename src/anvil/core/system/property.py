"""
Properties are the attributes of tasks and types as seen from Python.

Every class that derives from :class:`PropertyContainer` declares its attributes as class annotations of type
:class:`Property`. The :class:`~anvil.core.system.binder.Binder` coerces attribute strings of the build description
to the property's item type and stores them in the property. A property that is declared as *listening* may also
hold a live :class:`~anvil.core.system.references.Slot`, in which case every read returns the slot's current value.

.. code:: Example

    from anvil.core.system.property import Property, PropertyContainer

    class Archive(PropertyContainer):
        destfile: Property[Path]
        compress: Property[bool] = Property.default(True)
        current: Property[str] = Property.required(listening=True)

Reading a property that has neither a value nor a default raises :attr:`Property.Empty`.
"""

from __future__ import annotations

import copy
import dataclasses
import sys
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, ClassVar, TypeVar

from typeapi import ClassTypeHint, LiteralTypeHint, TypeHint, UnionTypeHint, get_annotations

from anvil.common import NotSet, Supplier

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class _PropertyOptions:
    """Returned by :meth:`Property.default` and friends and replaced by a :class:`Property` on the class."""

    default: Any = NotSet.Value
    default_factory: Callable[[], Any] | NotSet = NotSet.Value
    help: str | None = None
    listening: bool = False


@dataclasses.dataclass(frozen=True)
class PropertyDescriptor:
    """An entry in :attr:`PropertyContainer.__schema__`."""

    name: str
    item_type: TypeHint
    default: Any = NotSet.Value
    default_factory: Callable[[], Any] | NotSet = NotSet.Value
    help: str | None = None
    listening: bool = False

    def has_default(self) -> bool:
        return self.default is not NotSet.Value or self.default_factory is not NotSet.Value

    def make_default(self) -> Any:
        if self.default_factory is not NotSet.Value:
            return self.default_factory()
        return copy.deepcopy(self.default)


def _accepted_types(hint: TypeHint) -> tuple[type, ...]:
    if isinstance(hint, UnionTypeHint):
        return tuple(t for member in hint for t in _accepted_types(member))
    if isinstance(hint, LiteralTypeHint):
        return tuple(dict.fromkeys(type(value) for value in hint.values))
    if isinstance(hint, ClassTypeHint):
        return (hint.type,)
    raise TypeError(f"unsupported Property type hint {hint}")


class Property(Supplier[T]):
    """
    An attribute of a :class:`PropertyContainer`. On the class, the property is a descriptor that gives access to
    the property of the same name on the instance.
    """

    Empty = Supplier.Empty

    @staticmethod
    def required(*, help: str | None = None, listening: bool = False) -> Any:
        """Declare a property without a default. Only needed to give a help text or to make it *listening*."""

        return _PropertyOptions(help=help, listening=listening)

    @staticmethod
    def default(value: Any, *, help: str | None = None, listening: bool = False) -> Any:
        """Declare the default of a property. Each container receives its own copy of *value*."""

        return _PropertyOptions(default=value, help=help, listening=listening)

    @staticmethod
    def default_factory(func: Callable[[], Any], help: str | None = None) -> Any:
        return _PropertyOptions(default_factory=func, help=help)

    def __init__(
        self,
        owner: PropertyContainer | type[PropertyContainer],
        name: str,
        item_type: TypeHint | Any,
        help: str | None = None,
        listening: bool = False,
    ) -> None:
        self.owner = owner
        self.name = name
        self.item_type = item_type if isinstance(item_type, TypeHint) else TypeHint(item_type)
        self.accepted_types = _accepted_types(self.item_type)
        self.help = help
        self.listening = listening
        self._value: Supplier[T] = Supplier.void()

    def __repr__(self) -> str:
        owner = self.owner if isinstance(self.owner, type) else type(self.owner)
        return f"Property({owner.__name__}.{self.name})"

    def accepts(self, type_: type) -> bool:
        """Returns `True` if values of exactly *type_* can be stored in the property."""

        return type_ in self.accepted_types

    def _accept(self, value: Any) -> Any:
        # The accepted types are tried in declaration order, so `Path | str` converts a string but `str | Path`
        # keeps it.
        for type_ in self.accepted_types:
            if type_ is object:
                return value
            if type_ is Path and isinstance(value, str):
                return Path(value)
            if type_ is bool and not isinstance(value, bool):
                continue
            if isinstance(value, type_):
                return value
        expected = " or ".join(t.__name__ for t in self.accepted_types)
        raise TypeError(f"{self}: expected {expected}, got {type(value).__name__}")

    def derived_from(self) -> Iterable[Supplier[Any]]:
        yield self._value
        yield from self._value.derived_from()

    def get(self) -> T:
        try:
            return self._value.get()
        except Supplier.Empty:
            raise Supplier.Empty(self, f"the {self.name.rstrip('_')!r} attribute is not set")

    def set(self, value: T | Supplier[T]) -> None:
        """Store a value, or a supplier (e.g. a :class:`Slot`) that is read whenever the property is read."""

        self._value = value if isinstance(value, Supplier) else Supplier.of(self._accept(value))

    def setdefault(self, value: T | Supplier[T]) -> None:
        if not self.is_set():
            self.set(value)

    def clear(self) -> None:
        self._value = Supplier.void()

    def is_set(self) -> bool:
        """Returns `True` if the property holds a value or a default. The value is not evaluated."""

        return not self._value.is_void()

    def _instance_property(self, instance: PropertyContainer) -> Property[T]:
        prop = vars(instance)[self.name]
        assert isinstance(prop, Property), prop
        return prop

    def __get__(self, instance: PropertyContainer | None, owner: type[Any]) -> Property[T]:
        return self if instance is None else self._instance_property(instance)

    def __set__(self, instance: PropertyContainer, value: T | Supplier[T] | None) -> None:
        prop = self._instance_property(instance)
        if value is None and not prop.accepts(type(None)):
            prop.clear()
        else:
            prop.set(value)  # type: ignore[arg-type]


class PropertyContainer:
    """
    Base class for objects whose attributes are :class:`Property` annotations. The :attr:`__schema__` of a class
    is collected when the class is created and includes the properties of its bases.
    """

    __schema__: ClassVar[Mapping[str, PropertyDescriptor]] = {}

    def __init_subclass__(cls) -> None:
        schema: dict[str, PropertyDescriptor] = {}
        for base in reversed(cls.__bases__):
            if issubclass(base, PropertyContainer):
                schema.update(base.__schema__)

        namespace = vars(sys.modules[cls.__module__])
        for key, annotation in get_annotations(cls).items():
            hint = TypeHint(annotation)
            options = vars(cls).get(key)
            if not (isinstance(hint, ClassTypeHint) and hint.type is Property):
                if isinstance(options, _PropertyOptions):
                    raise TypeError(f"{cls.__qualname__}.{key} has property options but is not typed as a Property")
                continue
            if hint.args is None or len(hint.args) != 1:
                raise TypeError(f"{cls.__qualname__}.{key} must be annotated as Property[T], got {hint}")

            options = options if isinstance(options, _PropertyOptions) else _PropertyOptions()
            schema[key] = PropertyDescriptor(
                name=key,
                item_type=hint[0].evaluate(namespace),
                default=options.default,
                default_factory=options.default_factory,
                help=options.help,
                listening=options.listening,
            )

        cls.__schema__ = schema
        for key, desc in schema.items():
            setattr(cls, key, Property[Any](cls, key, desc.item_type, desc.help, desc.listening))

    def __init__(self) -> None:
        for key, desc in self.__schema__.items():
            prop = Property[Any](self, key, desc.item_type, desc.help, desc.listening)
            if desc.has_default():
                prop.set(desc.make_default())
            vars(self)[key] = prop
