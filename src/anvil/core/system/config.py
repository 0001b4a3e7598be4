""" The optional `anvil.toml` configuration file of a build. """

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

from anvil.common import TomlConfigFile

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "anvil.toml"
DEFAULT_BUILD_FILE = "build.xml"


@dataclasses.dataclass
class AnvilConfig:
    """
    .. code:: toml

        build_file = "build.xml"
        default_target = "dist"
        implicit_booleans = false
        keep_going = false

        [properties]
        release = "1.0"
    """

    build_file: str = DEFAULT_BUILD_FILE
    default_target: str | None = None
    implicit_booleans: bool = False
    keep_going: bool = False
    properties: dict[str, str] = dataclasses.field(default_factory=dict)

    @staticmethod
    def load(path: Path) -> AnvilConfig:
        """Read the configuration from *path*. A missing file gives the default configuration."""

        file = TomlConfigFile(path)
        if not file.exists():
            logger.debug("No configuration file at %s", path)
            return AnvilConfig()

        def _get(key: str, type_: type, default: Any) -> Any:
            value = file.get(key, default)
            if value is not default and not isinstance(value, type_):
                raise ValueError(f"{path}: expected {type_.__name__} for {key!r}, got {type(value).__name__}")
            return value

        unknown = set(file) - {f.name for f in dataclasses.fields(AnvilConfig)}
        if unknown:
            logger.warning("%s: ignoring unknown keys %s", path, ", ".join(sorted(unknown)))

        return AnvilConfig(
            build_file=_get("build_file", str, DEFAULT_BUILD_FILE),
            default_target=_get("default_target", str, None),
            implicit_booleans=_get("implicit_booleans", bool, False),
            keep_going=_get("keep_going", bool, False),
            properties={k: str(v) for k, v in file.get_table("properties").items()},
        )

    def save(self, path: Path) -> None:
        file = TomlConfigFile(path)
        file["build_file"] = self.build_file
        if self.default_target is not None:
            file["default_target"] = self.default_target
        file["implicit_booleans"] = self.implicit_booleans
        file["keep_going"] = self.keep_going
        file["properties"] = dict(self.properties)
        file.save()
