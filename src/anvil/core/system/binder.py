"""
The binder applies the attributes, nested elements and text of an element to an object.

What an object supports is declared statically on its class:

* attributes are the :class:`~anvil.core.system.property.Property` annotations of a
  :class:`~anvil.core.system.property.PropertyContainer`,
* nested elements are methods decorated with :func:`element`, either *creators* (no parameter, they create
  and keep the child themselves and return it for configuration) or *adders* (one parameter whose annotated
  class the binder instantiates and configures before the adder receives it),
* nested text is passed to the method decorated with :func:`text_content`.

:meth:`Binder.describe` turns these declarations into :class:`BinderMetadata` once per class and validates them.
Names are matched ignoring case, underscores and dashes.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from typeapi import ClassTypeHint, TypeHint, get_annotations

from anvil.core.system.component import DataType, ProjectComponent
from anvil.core.system.errors import ConfigurationError, Location
from anvil.core.system.property import Property, PropertyContainer
from anvil.core.system.references import Reference, parse_slot_reference

if TYPE_CHECKING:
    from anvil.core.system.project import Project

T_Callable = TypeVar("T_Callable", bound=Callable[..., Any])
logger = logging.getLogger(__name__)

ELEMENT_MARKER = "__anvil_element__"
TEXT_MARKER = "__anvil_text__"

#: Attribute names that are interpreted by the configurator and can not be declared as properties. `refid` is
#: only reserved on data types.
RESERVED_ATTRIBUTES = frozenset(["id"])
DATATYPE_RESERVED_ATTRIBUTES = RESERVED_ATTRIBUTES | {"refid"}

TRUE_TOKENS = frozenset(["on", "true", "t", "yes", "1"])
FALSE_TOKENS = frozenset(["off", "false", "f", "no", "0"])


def normalize_name(name: str) -> str:
    """
    >>> normalize_name("fail_on_error"), normalize_name("FailOnError"), normalize_name("from_")
    ('failonerror', 'failonerror', 'from')
    """

    return name.rstrip("_").replace("_", "").replace("-", "").lower()


def parse_boolean(value: str) -> bool:
    lower = value.strip().lower()
    if lower in TRUE_TOKENS:
        return True
    if lower in FALSE_TOKENS:
        return False
    raise ValueError(f"expected one of {', '.join(sorted(TRUE_TOKENS | FALSE_TOKENS))}, got {value!r}")


def element(name: str | None = None) -> Callable[[T_Callable], T_Callable]:
    """
    Decorator to declare a method as the factory of a nested element. Without a *name*, the element is named after
    the method, minus a `create_` or `add_` prefix.
    """

    def decorator(func: T_Callable) -> T_Callable:
        element_name = name
        if element_name is None:
            element_name = func.__name__
            for prefix in ("create_", "add_"):
                if element_name.startswith(prefix):
                    element_name = element_name[len(prefix) :]
                    break
        setattr(func, ELEMENT_MARKER, element_name)
        return func

    return decorator


def text_content(func: T_Callable) -> T_Callable:
    """Decorator to declare the method that receives the text content of an element."""

    setattr(func, TEXT_MARKER, True)
    return func


class ChildKind(enum.Enum):
    CREATOR = enum.auto()
    ADDER = enum.auto()


@dataclasses.dataclass(frozen=True)
class AttributeSetter:
    name: str  #: The name of the property on the object.
    property: Property[Any]

    @property
    def listening(self) -> bool:
        return self.property.listening


@dataclasses.dataclass(frozen=True)
class ChildFactory:
    name: str  #: The normalized element name.
    kind: ChildKind
    method: str
    child_type: type | None  #: The produced type. Always known for adders.


@dataclasses.dataclass(frozen=True)
class BinderMetadata:
    type: type
    attributes: Mapping[str, AttributeSetter]
    elements: Mapping[str, ChildFactory]
    text_handler: str | None

    def supports_text(self) -> bool:
        return self.text_handler is not None


@dataclasses.dataclass
class ChildHandle:
    """A nested element's object. For adders, :meth:`attach` must be called once the child is configured."""

    instance: Any
    factory: ChildFactory
    owner: Any
    attached: bool = False

    def attach(self) -> None:
        assert not self.attached, "child is already attached"
        self.attached = True
        if self.factory.kind == ChildKind.ADDER:
            getattr(self.owner, self.factory.method)(self.instance)


Coercion = Callable[["Project", str], Any]


def construction_mode(cls: type) -> str | None:
    """
    Returns `"default"` if *cls* can be constructed without arguments, `"project"` if it must be constructed with
    only the project, or `None` if neither is possible.
    """

    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return None
    required = [
        param
        for param in signature.parameters.values()
        if param.default is param.empty and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]
    if not required:
        return "default"
    if len(required) == 1 and required[0].name == "project" and required[0].kind != required[0].POSITIONAL_ONLY:
        return "project"
    return None


def instantiate(cls: type, project: Project) -> Any:
    mode = construction_mode(cls)
    if mode == "project":
        return cls(project=project)
    elif mode == "default":
        return cls()
    raise ConfigurationError(f"{cls.__name__} can not be constructed without arguments or with only the project")


def describe_element(instance: Any) -> str:
    if isinstance(instance, ProjectComponent):
        return instance.describe()
    return type(instance).__name__


class Binder:
    """
    Discovers and caches what a class supports, and applies attributes, nested elements and text to instances.
    One binder is owned by each :class:`~anvil.core.system.context.BuildContext`.

    :param implicit_booleans: Convert boolean-looking values to `bool` also for untyped (`Property[object]`)
        attributes. This exists for compatibility with build descriptions that rely on it and is off by default.
    """

    COERCIONS: ClassVar[dict[type, Coercion]] = {}

    def __init__(self, implicit_booleans: bool = False) -> None:
        self.implicit_booleans = implicit_booleans
        self._cache: dict[type, BinderMetadata] = {}

    @staticmethod
    def coercion(type_: type) -> Callable[[Coercion], Coercion]:
        """Decorator for functions that convert an attribute string to *type_*."""

        def decorator(func: Coercion) -> Coercion:
            Binder.COERCIONS[type_] = func
            return func

        return decorator

    # Discovery

    def describe(self, type_: type) -> BinderMetadata:
        """Return the metadata for *type_*. Raises a :class:`ConfigurationError` if the declarations are invalid."""

        try:
            return self._cache[type_]
        except KeyError:
            pass
        logger.debug("Discovering the attributes and nested elements of %s", type_.__qualname__)
        metadata = self._cache[type_] = self._discover(type_)
        return metadata

    def _describe_at(self, type_: type, location: Location | None) -> BinderMetadata:
        try:
            return self.describe(type_)
        except ConfigurationError as exc:
            raise exc.with_location(location)

    def _discover(self, type_: type) -> BinderMetadata:
        attributes: dict[str, AttributeSetter] = {}
        if issubclass(type_, PropertyContainer):
            reserved = DATATYPE_RESERVED_ATTRIBUTES if issubclass(type_, DataType) else RESERVED_ATTRIBUTES
            for key in type_.__schema__:
                name = normalize_name(key)
                if name in reserved:
                    raise ConfigurationError(f"{type_.__qualname__}.{key}: {name!r} is a reserved attribute name")
                if name in attributes:
                    raise ConfigurationError(
                        f"{type_.__qualname__} declares the attribute {name!r} twice "
                        f"({attributes[name].name!r} and {key!r})"
                    )
                attributes[name] = AttributeSetter(key, getattr(type_, key))

        elements: dict[str, ChildFactory] = {}
        text_handler: str | None = None
        seen: set[str] = set()
        for klass in type_.__mro__:
            for key, member in vars(klass).items():
                if key in seen:
                    continue
                seen.add(key)
                if not inspect.isfunction(member):
                    continue
                if getattr(member, TEXT_MARKER, False):
                    if text_handler is not None:
                        raise ConfigurationError(
                            f"{type_.__qualname__} declares more than one text handler ({text_handler}, {key})"
                        )
                    if len(inspect.signature(member).parameters) != 2:
                        raise ConfigurationError(f"{klass.__qualname__}.{key}() must accept exactly one argument")
                    text_handler = key
                elif hasattr(member, ELEMENT_MARKER):
                    factory = self._describe_factory(klass, key, member)
                    if factory.name in elements:
                        raise ConfigurationError(
                            f"{type_.__qualname__} declares the nested element {factory.name!r} twice "
                            f"({elements[factory.name].method}, {key})"
                        )
                    elements[factory.name] = factory

        return BinderMetadata(type_, attributes, elements, text_handler)

    def _describe_factory(self, klass: type, key: str, func: Callable[..., Any]) -> ChildFactory:
        qualname = f"{klass.__qualname__}.{key}()"
        name = normalize_name(getattr(func, ELEMENT_MARKER))
        params = list(inspect.signature(func).parameters.values())[1:]

        try:
            annotations = get_annotations(func)
        except Exception as exc:
            if not params:
                logger.debug("Unable to evaluate the return type of %s: %s", qualname, exc)
                return ChildFactory(name, ChildKind.CREATOR, key, None)
            raise ConfigurationError(f"unable to evaluate the type annotations of {qualname}: {exc}") from exc

        if not params:
            produced = annotations.get("return")
            child_type = produced if isinstance(produced, type) else None
            return ChildFactory(name, ChildKind.CREATOR, key, child_type)

        if len(params) > 1:
            raise ConfigurationError(f"{qualname} must accept no argument (creator) or exactly one argument (adder)")

        param = params[0]
        if param.name not in annotations:
            raise ConfigurationError(f"{qualname} must annotate the type of its {param.name!r} parameter")
        hint = TypeHint(annotations[param.name])
        if not isinstance(hint, ClassTypeHint) or hint.args:
            raise ConfigurationError(f"{qualname} must annotate {param.name!r} with a concrete class, got {hint}")
        child_type = hint.type
        if inspect.isabstract(child_type):
            raise ConfigurationError(f"{qualname} expects the abstract class {child_type.__name__}")
        if construction_mode(child_type) is None:
            raise ConfigurationError(
                f"{qualname} expects a {child_type.__name__}, which can not be constructed without arguments or "
                "with only the project"
            )
        return ChildFactory(name, ChildKind.ADDER, key, child_type)

    # Binding

    def set_attribute(
        self,
        project: Project,
        instance: Any,
        name: str,
        value: str,
        location: Location | None = None,
    ) -> None:
        """
        Set the attribute *name* of *instance* from the string *value*. A value that is a slot reference (e.g.
        `%{task.current_file}`) binds a listening attribute to the live slot instead.
        """

        metadata = self._describe_at(type(instance), location)
        setter = metadata.attributes.get(normalize_name(name))

        slot_name = parse_slot_reference(value)
        if slot_name is not None:
            if setter is None or not setter.listening:
                raise ConfigurationError(
                    f"{describe_element(instance)} doesn't support a slot-listening {name!r} attribute.", location
                )
            logger.debug("Binding %s.%s to slot %r", describe_element(instance), setter.name, slot_name)
            getattr(instance, setter.name).set(project.references.slot(slot_name))
            return

        if setter is None:
            raise ConfigurationError(f"{describe_element(instance)} doesn't support the {name!r} attribute.", location)

        try:
            coerced = self.coerce(project, setter.property, value)
            getattr(instance, setter.name).set(coerced)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"{describe_element(instance)}: invalid value {value!r} for the {name!r} attribute ({exc})", location
            ) from exc
        except ConfigurationError as exc:
            raise exc.with_location(location)

    def coerce(self, project: Project, prop: Property[Any], value: str) -> Any:
        """Convert *value* to the first type accepted by *prop* that it can be converted to."""

        errors = []
        for accepted_type in prop.accepted_types:
            if accepted_type is type(None):
                continue
            try:
                return self._coerce_to(project, accepted_type, value)
            except (TypeError, ValueError) as exc:
                errors.append(str(exc))
        raise ValueError("; ".join(errors))

    def _coerce_to(self, project: Project, type_: type, value: str) -> Any:
        if type_ is object:
            if self.implicit_booleans and value.strip().lower() in TRUE_TOKENS | FALSE_TOKENS:
                return parse_boolean(value)
            return value
        if issubclass(type_, enum.Enum):
            for member in type_:
                if str(member.value).lower() == value.strip().lower():
                    return member
            raise ValueError(f"expected one of {', '.join(str(m.value) for m in type_)}")
        for klass in type_.__mro__:
            if klass in self.COERCIONS:
                return self.COERCIONS[klass](project, value)
        raise TypeError(f"attributes of type {type_.__name__} can not be set from a string")

    def create_child(
        self,
        project: Project,
        instance: Any,
        name: str,
        location: Location | None = None,
    ) -> ChildHandle:
        """
        Create the object for the nested element *name*. For creators, the owner has already retained the child.
        For adders, the caller must configure the returned child and then call :meth:`ChildHandle.attach`.
        """

        metadata = self._describe_at(type(instance), location)
        factory = metadata.elements.get(normalize_name(name))
        if factory is None:
            raise ConfigurationError(
                f"{describe_element(instance)} doesn't support the nested {name!r} element.", location
            )

        try:
            if factory.kind == ChildKind.CREATOR:
                child = getattr(instance, factory.method)()
                if child is None:
                    raise ConfigurationError(f"{describe_element(instance)} did not create a nested {name!r} element")
            else:
                assert factory.child_type is not None
                child = instantiate(factory.child_type, project)
        except ConfigurationError as exc:
            raise exc.with_location(location)

        if isinstance(child, ProjectComponent):
            child.element_name = name.lower()
            child.location = location or Location.UNKNOWN
            if isinstance(instance, ProjectComponent):
                child.owning_target = instance.owning_target
        return ChildHandle(child, factory, instance)

    def add_text(self, project: Project, instance: Any, text: str, location: Location | None = None) -> None:
        """Pass nested *text* to the text handler of *instance*. Text that is only whitespace is ignored."""

        if not text.strip():
            return
        metadata = self._describe_at(type(instance), location)
        if metadata.text_handler is None:
            raise ConfigurationError(f"{describe_element(instance)} doesn't support nested text data.", location)
        try:
            getattr(instance, metadata.text_handler)(text)
        except ConfigurationError as exc:
            raise exc.with_location(location)


# Register the built-in coercions


@Binder.coercion(str)
def _coerce_str(project: Project, value: str) -> str:
    return value


@Binder.coercion(bool)
def _coerce_bool(project: Project, value: str) -> bool:
    return parse_boolean(value)


@Binder.coercion(int)
def _coerce_int(project: Project, value: str) -> int:
    return int(value.strip())


@Binder.coercion(float)
def _coerce_float(project: Project, value: str) -> float:
    return float(value.strip())


@Binder.coercion(Path)
def _coerce_path(project: Project, value: str) -> Path:
    return project.resolve_file(value)


@Binder.coercion(Reference)
def _coerce_reference(project: Project, value: str) -> Reference:
    return project.references.reference(value)
