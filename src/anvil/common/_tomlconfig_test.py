from pathlib import Path
from textwrap import dedent

import tomli
from pytest import raises

from anvil.common._tomlconfig import TomlConfigFile


def test__TomlConfigFile__load_and_save(tempdir: Path) -> None:
    config_file = tempdir / "anvil.toml"
    config_file.write_text(
        dedent(
            """
            build_file = "main.xml"

            [properties]
            version = "1.0"
            """
        )
    )
    config = TomlConfigFile(config_file)
    assert config.get_table("properties") == {"version": "1.0"}
    assert config.get_table("missing") == {}
    config["keep_going"] = True
    config.save()

    assert tomli.loads(config_file.read_text()) == {
        "build_file": "main.xml",
        "properties": {"version": "1.0"},
        "keep_going": True,
    }


def test__TomlConfigFile__missing_file_reads_as_empty(tempdir: Path) -> None:
    config = TomlConfigFile(tempdir / "nope.toml")
    assert not config.exists()
    assert dict(config) == {}


def test__TomlConfigFile__get_table_rejects_scalars(tempdir: Path) -> None:
    config_file = tempdir / "anvil.toml"
    config_file.write_text('properties = "oops"\n')
    with raises(ValueError):
        TomlConfigFile(config_file).get_table("properties")
