from __future__ import annotations

import logging
from pathlib import Path
from textwrap import dedent

from pytest import LogCaptureFixture

from anvil.core import BuildContext, BuildOutcome
from anvil.core.testing import load_build_string

BUILD = dedent(
    """
    <project name="calls" basedir="/work">
        <property name="x" value="1"/>
        <property name="y" value="top"/>

        <target name="show">
            <echo file="${out}">x=${x} y=${y} z=${z}</echo>
        </target>

        <target name="call-with-param">
            <property name="z" value="caller"/>
            <call target="show">
                <param name="x" value="5"/>
                <param name="out" value="with-param.txt"/>
            </call>
        </target>

        <target name="call-without-inheritance">
            <property name="z" value="caller"/>
            <call target="show" inheritall="false">
                <property name="out" value="isolated.txt"/>
            </call>
        </target>

        <target name="call-missing">
            <call target="nope"/>
        </target>

        <target name="call-without-target">
            <call/>
        </target>

        <target name="clean">
            <delete><filelist refid="victims"/></delete>
        </target>

        <target name="call-with-reference">
            <filelist id="garbage" dir="/work" files="a.txt b.txt"/>
            <call target="clean">
                <reference refid="garbage" torefid="victims"/>
            </call>
        </target>

        <target name="call-without-reference">
            <filelist id="victims" dir="/work" files="a.txt"/>
            <call target="clean"/>
        </target>

        <target name="call-inheriting-references">
            <filelist id="victims" dir="/work" files="a.txt"/>
            <call target="clean" inheritrefs="true"/>
        </target>
    </project>
    """
)


def test__CallTask__params_win_over_the_callee_properties(anvil_ctx: BuildContext) -> None:
    load_build_string(anvil_ctx, BUILD)
    assert anvil_ctx.run(["call-with-param"]).outcome == BuildOutcome.SUCCESS
    assert anvil_ctx.filesystem.read(Path("/work/with-param.txt")) == b"x=5 y=top z=caller"


def test__CallTask__inheritall_false_only_passes_params(anvil_ctx: BuildContext) -> None:
    load_build_string(anvil_ctx, BUILD)
    assert anvil_ctx.run(["call-without-inheritance"]).outcome == BuildOutcome.SUCCESS
    assert anvil_ctx.filesystem.read(Path("/work/isolated.txt")) == b"x=1 y=top z=${z}"


def test__CallTask__does_not_change_the_caller_properties(anvil_ctx: BuildContext) -> None:
    project = load_build_string(anvil_ctx, BUILD)
    anvil_ctx.run(["call-with-param"])
    assert project.properties["x"] == "1"
    assert "out" not in project.properties


def test__CallTask__missing_target_fails_the_caller(anvil_ctx: BuildContext) -> None:
    load_build_string(anvil_ctx, BUILD)
    result = anvil_ctx.run(["call-missing"])

    assert result.outcome == BuildOutcome.FAILED
    assert result.target == "call-missing"
    assert result.task == "call"
    assert "calling target 'nope' failed" in (result.message or "")
    assert "Target 'nope' does not exist in the project 'calls'." in (result.message or "")


def test__CallTask__requires_target(anvil_ctx: BuildContext) -> None:
    load_build_string(anvil_ctx, BUILD)
    result = anvil_ctx.run(["call-without-target"])
    assert result.outcome == BuildOutcome.FAILED
    assert result.message == "<string>:30: Attribute target is required."


def test__CallTask__refuses_to_call_from_the_root(anvil_ctx: BuildContext, caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    load_build_string(anvil_ctx, '<project><call target="x"/><target name="x"><fail/></target></project>')
    assert "Cowardly refusing to call target 'x' from the root" in caplog.text


def test__CallTask__forwards_references(anvil_ctx: BuildContext) -> None:
    anvil_ctx.filesystem.write(Path("/work/a.txt"), b"")
    anvil_ctx.filesystem.write(Path("/work/b.txt"), b"")
    load_build_string(anvil_ctx, BUILD)

    assert anvil_ctx.run(["call-with-reference"]).outcome == BuildOutcome.SUCCESS
    assert not anvil_ctx.filesystem.exists(Path("/work/a.txt"))
    assert not anvil_ctx.filesystem.exists(Path("/work/b.txt"))


def test__CallTask__does_not_inherit_references_by_default(anvil_ctx: BuildContext) -> None:
    anvil_ctx.filesystem.write(Path("/work/a.txt"), b"")
    load_build_string(anvil_ctx, BUILD)

    result = anvil_ctx.run(["call-without-reference"])
    assert result.outcome == BuildOutcome.FAILED
    assert "victims" in (result.message or "")
    assert anvil_ctx.filesystem.exists(Path("/work/a.txt"))


def test__CallTask__inherits_configured_references(anvil_ctx: BuildContext) -> None:
    anvil_ctx.filesystem.write(Path("/work/a.txt"), b"")
    anvil_ctx.filesystem.write(Path("/work/b.txt"), b"")
    load_build_string(anvil_ctx, BUILD)

    assert anvil_ctx.run(["call-inheriting-references"]).outcome == BuildOutcome.SUCCESS
    assert not anvil_ctx.filesystem.exists(Path("/work/a.txt"))
    assert anvil_ctx.filesystem.exists(Path("/work/b.txt"))
