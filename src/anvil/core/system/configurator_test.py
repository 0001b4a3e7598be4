from __future__ import annotations

from pytest import raises

from anvil.core.system.component import DataType, ProjectComponent
from anvil.core.system.configurator import Configurator
from anvil.core.system.element import Element
from anvil.core.system.errors import ConfigurationError, Location, ReferenceCycleError
from anvil.core.system.project import Project
from anvil.core.system.property import Property
from anvil.std import EchoTask, FileList


class Pattern(DataType):
    name_: Property[str]


def _element(tag: str, children: list[Element] | None = None, text: str = "", **attributes: str) -> Element:
    return Element(tag, attributes, children or [], text, Location("build.xml", 1))


def test__Configurator__configure_expands_properties_in_attributes_and_text(anvil_project: Project) -> None:
    anvil_project.properties.set("who", "world")
    anvil_project.properties.set("level", "debug")
    echo = Configurator(anvil_project).configure(_element("echo", text="hello ${who}", level="${level}"))

    assert isinstance(echo, EchoTask)
    assert echo.message.get() == "hello world"
    assert echo.location == Location("build.xml", 1)
    assert echo.element_name == "echo"


def test__Configurator__configure_invalid_value_names_the_location(anvil_project: Project) -> None:
    with raises(ConfigurationError) as excinfo:
        Configurator(anvil_project).configure(_element("echo", level="${missing}"))
    assert str(excinfo.value).startswith("build.xml:1: <echo>: invalid value '${missing}' for the 'level' attribute")


def test__Configurator__unknown_element(anvil_project: Project) -> None:
    with raises(ConfigurationError) as excinfo:
        Configurator(anvil_project).configure(_element("javac"))
    assert str(excinfo.value) == "build.xml:1: unknown task or type <javac>"


def test__Configurator__id_registers_the_instance(anvil_project: Project) -> None:
    filelist = Configurator(anvil_project).configure(_element("filelist", id="sources", dir="src", files="a.c"))
    assert anvil_project.references.get("sources") is filelist


def test__Configurator__create_does_not_register_the_id(anvil_project: Project) -> None:
    configurator = Configurator(anvil_project)
    element = _element("filelist", id="sources", dir="src", files="a.c")

    filelist = configurator.create(element)
    assert "sources" not in anvil_project.references
    configurator.configure_instance(element, filelist)
    assert anvil_project.references.get("sources") is filelist


def test__Configurator__refid_makes_a_data_type_a_reference(anvil_project: Project) -> None:
    configurator = Configurator(anvil_project)
    original = configurator.configure(_element("filelist", id="sources", dir="src", files="a.c b.c"))
    alias = configurator.configure(_element("filelist", refid="sources"))

    assert isinstance(alias, FileList)
    assert alias.get_ref() is original
    assert alias.get_files() == ["a.c", "b.c"]


def test__Configurator__refid_is_exclusive(anvil_project: Project) -> None:
    configurator = Configurator(anvil_project)
    configurator.configure(_element("filelist", id="sources", dir="src", files="a.c"))

    with raises(ConfigurationError) as excinfo:
        configurator.configure(_element("filelist", refid="sources", dir="other"))
    assert "You must not specify more than one attribute when using refid" in str(excinfo.value)

    with raises(ConfigurationError) as excinfo:
        configurator.configure(_element("filelist", [_element("file", name="x")], refid="sources"))
    assert "You must not specify nested elements when using refid" in str(excinfo.value)


def test__Configurator__refid_of_unknown_id(anvil_project: Project) -> None:
    with raises(ConfigurationError) as excinfo:
        Configurator(anvil_project).configure(_element("filelist", refid="nothing"))
    assert str(excinfo.value) == "build.xml:1: reference 'nothing' not found"


def test__Configurator__refid_with_type_mismatch(anvil_project: Project) -> None:
    configurator = Configurator(anvil_project)
    configurator.configure(_element("path", id="classpath", path="lib"))
    with raises(ConfigurationError) as excinfo:
        configurator.configure(_element("filelist", refid="classpath"))
    assert "'classpath' doesn't denote a FileList, but a PathList" in str(excinfo.value)


def test__Configurator__refid_on_a_task_is_unsupported(anvil_project: Project) -> None:
    with raises(ConfigurationError) as excinfo:
        Configurator(anvil_project).configure(_element("echo", refid="x"))
    assert "<echo> doesn't support the 'refid' attribute." in str(excinfo.value)


def test__Configurator__reference_cycles_are_detected(anvil_project: Project) -> None:
    anvil_project.context.registry.add_type("pattern", Pattern)
    configurator = Configurator(anvil_project)

    # a -> b -> c -> a, where the last link closes the cycle.
    a = configurator.create(_element("pattern"))
    b = configurator.create(_element("pattern"))
    anvil_project.references.register("a", a)
    anvil_project.references.register("b", b)
    a.set_refid(anvil_project.references.reference("b"))
    b.set_refid(anvil_project.references.reference("c"))

    with raises(ReferenceCycleError) as excinfo:
        configurator.configure(_element("pattern", id="c", refid="a"))
    assert excinfo.value.chain == ["a", "b", "c", "a"]


def test__Configurator__self_reference_is_a_cycle(anvil_project: Project) -> None:
    anvil_project.context.registry.add_type("pattern", Pattern)
    with raises(ReferenceCycleError):
        Configurator(anvil_project).configure(_element("pattern", id="p", refid="p"))


def test__Configurator__nested_children_are_attached_after_configuration(anvil_project: Project) -> None:
    filelist = Configurator(anvil_project).configure(
        _element("filelist", [_element("file", name="${name}.c"), _element("file", name="b.c")], dir="src")
    )
    assert isinstance(filelist, FileList)
    assert filelist.get_files() == ["${name}.c", "b.c"]
    assert all(isinstance(name, ProjectComponent) for name in filelist._names)
