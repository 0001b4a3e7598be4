from __future__ import annotations

from pathlib import Path
from textwrap import dedent

from pytest import raises

from anvil.core.system.context import BuildContext
from anvil.core.system.errors import ConfigurationError, Location
from anvil.core.system.loader import parse_build_file, parse_build_string
from anvil.core.testing import load_build_string
from anvil.std import EchoTask


def test__parse_build_string__converts_elements_with_line_numbers() -> None:
    root = parse_build_string(
        dedent(
            """\
            <project name="demo">
                <!-- a comment -->
                <echo level="info">Hello <!-- inline --> world</echo>
            </project>
            """
        ),
        "build.xml",
    )

    assert root.tag == "project"
    assert root.get("NAME") == "demo"
    assert root.location == Location("build.xml", 1)
    (echo,) = root.children
    assert echo.tag == "echo"
    assert echo.attributes == {"level": "info"}
    assert echo.text == "Hello  world"
    assert echo.location == Location("build.xml", 3)


def test__parse_build_string__malformed() -> None:
    with raises(ConfigurationError) as excinfo:
        parse_build_string("<project>\n<target></project>", "build.xml")
    assert str(excinfo.value).startswith("build.xml:2: malformed build description")


def test__parse_build_file(tempdir: Path) -> None:
    build_file = tempdir / "build.xml"
    build_file.write_text('<project name="demo"/>')
    assert parse_build_file(build_file).location == Location(str(build_file), 1)

    with raises(ConfigurationError) as excinfo:
        parse_build_file(tempdir / "missing.xml")
    assert "unable to read build file" in str(excinfo.value)


def test__ProjectLoader__reads_project_and_targets(anvil_ctx: BuildContext) -> None:
    project = load_build_string(
        anvil_ctx,
        dedent(
            """
            <project name="demo" default="dist" basedir="sub">
                <description>A demo project.</description>
                <property name="version" value="1.0"/>
                <target name="compile" description="Compiles."/>
                <target name="dist" depends="compile, docs" if="a" unless="b">
                    <echo>${version}</echo>
                </target>
                <target name="docs"/>
            </project>
            """
        ),
        basedir=Path("/work"),
    )

    assert project.name == "demo"
    assert project.default_target == "dist"
    assert project.description == "A demo project."
    assert project.basedir == Path("/work/sub")
    assert project.properties["version"] == "1.0"
    assert project.properties["project.name"] == "demo"
    assert project.properties["project.basedir"] == str(Path("/work/sub"))
    assert list(project.targets) == ["compile", "dist", "docs"]

    dist = project.target("dist")
    assert dist.depends == ["compile", "docs"]
    assert (dist.if_condition, dist.unless_condition) == ("a", "b")
    assert project.target("compile").description == "Compiles."

    # Tasks of targets are created right away, but configured only when they run.
    (invocation,) = dist
    assert isinstance(invocation.instance, EchoTask)
    assert invocation.instance.owning_target is dist
    assert not invocation.configured


def test__ProjectLoader__requires_project_root(anvil_ctx: BuildContext) -> None:
    with raises(ConfigurationError) as excinfo:
        load_build_string(anvil_ctx, "<target name='a'/>")
    assert "expected a <project> root element, got <target>" in str(excinfo.value)


def test__ProjectLoader__target_errors(anvil_ctx: BuildContext) -> None:
    with raises(ConfigurationError) as excinfo:
        load_build_string(anvil_ctx, '<project><target depends="a"/></project>')
    assert "<target> requires the 'name' attribute" in str(excinfo.value)

    with raises(ConfigurationError) as excinfo:
        load_build_string(anvil_ctx, '<project><target name="a" extends="b"/></project>')
    assert "<target> doesn't support the 'extends' attribute." in str(excinfo.value)

    with raises(ConfigurationError) as excinfo:
        load_build_string(anvil_ctx, '<project><target name="a"/><target name="a"/></project>')
    assert "Duplicate target 'a'" in str(excinfo.value)


def test__ProjectLoader__unknown_element_in_target_fails_before_any_target_runs(anvil_ctx: BuildContext) -> None:
    with raises(ConfigurationError) as excinfo:
        load_build_string(anvil_ctx, '<project>\n<target name="a">\n<javac/>\n</target>\n</project>')
    assert str(excinfo.value) == "<string>:3: unknown task or type <javac>"


def test__ProjectLoader__top_level_tasks_run_in_document_order(anvil_ctx: BuildContext) -> None:
    project = load_build_string(
        anvil_ctx,
        dedent(
            """
            <project>
                <property name="a" value="1"/>
                <property name="b" value="${a}2"/>
                <property name="a" value="3"/>
            </project>
            """
        ),
    )
    assert (project.properties["a"], project.properties["b"]) == ("1", "12")


def test__ProjectLoader__ids_in_targets_are_registered_when_the_target_runs(anvil_ctx: BuildContext) -> None:
    project = load_build_string(
        anvil_ctx,
        dedent(
            """
            <project>
                <target name="prepare">
                    <filelist id="sources" dir="src" files="a.c"/>
                </target>
            </project>
            """
        ),
    )

    assert "sources" not in project.references
    anvil_ctx.run(["prepare"])
    assert project.references.get("sources") is next(iter(project.target("prepare"))).instance


def test__ProjectLoader__reference_to_a_target_that_did_not_run(anvil_ctx: BuildContext) -> None:
    with raises(ConfigurationError) as excinfo:
        load_build_string(
            anvil_ctx,
            dedent(
                """
                <project>
                    <target name="prepare">
                        <path id="cp" location="lib"/>
                    </target>
                    <path id="mine">
                        <path refid="cp"/>
                    </path>
                </project>
                """
            ),
        )
    assert "reference 'cp' not found" in str(excinfo.value)
