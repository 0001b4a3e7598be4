from __future__ import annotations

from pathlib import Path
from textwrap import dedent

from pytest import raises

from anvil.core import BuildContext, ConfigurationError
from anvil.core.testing import load_build_string
from anvil.std import FileList


def test__FileList__collects_names_from_all_sources(anvil_ctx: BuildContext) -> None:
    anvil_ctx.filesystem.write(Path("/work/files.txt"), b"${prefix}d.c\n\n  e.c  \n")
    project = load_build_string(
        anvil_ctx,
        dedent(
            """
            <project basedir="/work">
                <property name="prefix" value="gen/"/>
                <filelist id="sources" dir="src" files="a.c, b.c c.c" listfile="files.txt">
                    <file name="x.c"/>
                </filelist>
                <filelist id="alias" refid="sources"/>
            </project>
            """
        ),
    )

    sources = project.references.resolve("sources", FileList)
    assert sources.get_dir() == Path("/work/src")
    assert sources.get_files() == ["a.c", "b.c", "c.c", "x.c", "gen/d.c", "e.c"]

    alias = project.references.resolve("alias", FileList)
    assert alias.get_dir() == Path("/work/src")
    assert alias.get_files() == sources.get_files()


def test__FileList__errors(anvil_ctx: BuildContext) -> None:
    project = load_build_string(
        anvil_ctx,
        dedent(
            """
            <project basedir="/work">
                <filelist id="no-dir" files="a.c"/>
                <filelist id="no-files" dir="src"/>
                <filelist id="no-listfile" dir="src" listfile="missing.txt"/>
            </project>
            """
        ),
    )

    with raises(ConfigurationError) as excinfo:
        project.references.resolve("no-dir", FileList).get_files()
    assert str(excinfo.value) == "<string>:3: No directory specified for filelist."

    with raises(ConfigurationError) as excinfo:
        project.references.resolve("no-files", FileList).get_files()
    assert str(excinfo.value) == "<string>:4: No files specified for filelist."

    with raises(ConfigurationError) as excinfo:
        project.references.resolve("no-listfile", FileList).get_files()
    assert "An error occurred while reading from list file /work/missing.txt" in str(excinfo.value)
