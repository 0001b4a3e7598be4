from pathlib import Path
from textwrap import dedent

from pytest import CaptureFixture, mark, raises

from anvil.core.cli.main import main
from anvil.core.system.config import AnvilConfig
from tests.conftest import chdir_context

BUILD_XML = dedent(
    """\
    <project name="cli" default="greet">
        <property name="greeting" value="hello"/>
        <target name="greet" description="Writes the greeting.">
            <echo file="greeting.txt">${greeting}</echo>
        </target>
        <target name="broken">
            <fail message="broken on purpose"/>
        </target>
        <target name="independent">
            <touch file="independent.txt"/>
        </target>
        <target name="cycle1" depends="cycle2"/>
        <target name="cycle2" depends="cycle1"/>
    </project>
    """
)


def _run(*argv: str) -> int:
    with raises(SystemExit) as excinfo:
        main(argv=list(argv))
    assert isinstance(excinfo.value.code, int)
    return excinfo.value.code


@mark.integration
def test__main__runs_default_target(tempdir: Path, capsys: CaptureFixture[str]) -> None:
    (tempdir / "build.xml").write_text(BUILD_XML)
    with chdir_context(tempdir):
        assert _run("-q") == 0

    assert (tempdir / "greeting.txt").read_text() == "hello"
    assert "BUILD SUCCESSFUL" in capsys.readouterr().out


@mark.integration
def test__main__user_properties_and_build_file(tempdir: Path) -> None:
    (tempdir / "main.xml").write_text(BUILD_XML)
    with chdir_context(tempdir):
        assert _run("-q", "-f", "main.xml", "-D", "greeting=hi", "greet") == 0

    assert (tempdir / "greeting.txt").read_text() == "hi"


@mark.integration
def test__main__exit_codes(tempdir: Path, capsys: CaptureFixture[str]) -> None:
    (tempdir / "build.xml").write_text(BUILD_XML)
    with chdir_context(tempdir):
        assert _run("-q", "broken") == 1
        assert "BUILD FAILED" in capsys.readouterr().err

        assert _run("-q", "greet", "cycle1") == 2
        assert "cycle1 -> cycle2 -> cycle1" in capsys.readouterr().err
        assert not (tempdir / "greeting.txt").exists()

        assert _run("-q", "unknown-target") == 2


@mark.integration
def test__main__keep_going(tempdir: Path) -> None:
    (tempdir / "build.xml").write_text(BUILD_XML)
    with chdir_context(tempdir):
        assert _run("-q", "broken", "independent") == 1
        assert not (tempdir / "independent.txt").exists()

        assert _run("-q", "--keep-going", "broken", "independent") == 1
        assert (tempdir / "independent.txt").exists()


@mark.integration
def test__main__invalid_build_file_aborts(tempdir: Path, capsys: CaptureFixture[str]) -> None:
    (tempdir / "build.xml").write_text("<project>\n<target name='x'>\n</project>\n")
    with chdir_context(tempdir):
        assert _run("-q") == 2
    assert "malformed build file" in capsys.readouterr().err

    with chdir_context(tempdir):
        assert _run("-q", "-f", "missing.xml") == 2
    assert "unable to read build file" in capsys.readouterr().err


@mark.integration
def test__main__list_targets(tempdir: Path, capsys: CaptureFixture[str]) -> None:
    (tempdir / "build.xml").write_text(BUILD_XML)
    with chdir_context(tempdir):
        assert _run("-q", "--list") == 0

    out = capsys.readouterr().out
    assert "Targets of cli" in out
    assert "Writes the greeting." in out
    assert not (tempdir / "greeting.txt").exists()


@mark.integration
def test__main__init_config(tempdir: Path) -> None:
    with chdir_context(tempdir):
        assert _run("-q", "--init-config", "-f", "main.xml", "-D", "release=1") == 0

    config = AnvilConfig.load(tempdir / "anvil.toml")
    assert config.build_file == "main.xml"
    assert config.properties == {"release": "1"}


@mark.integration
def test__main__reads_the_configuration_next_to_the_build_file(tempdir: Path) -> None:
    (tempdir / "sub").mkdir()
    (tempdir / "sub" / "build.xml").write_text(BUILD_XML)
    (tempdir / "sub" / "anvil.toml").write_text('[properties]\ngreeting = "configured"\n')
    (tempdir / "anvil.toml").write_text('[properties]\ngreeting = "ignored"\n')

    with chdir_context(tempdir):
        assert _run("-q", "-f", "sub/build.xml") == 0

    assert (tempdir / "sub" / "greeting.txt").read_text() == "configured"
