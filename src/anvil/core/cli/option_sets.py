from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING

from anvil.core.system.config import CONFIG_FILENAME, AnvilConfig

if TYPE_CHECKING:
    import argparse


def _parse_define(value: str) -> tuple[str, str]:
    name, sep, val = value.partition("=")
    if not name:
        raise ValueError(value)
    return name, val if sep else "true"


@dataclasses.dataclass(frozen=True)
class BuildOptions:
    build_file: Path | None
    config_file: Path | None
    properties: dict[str, str]
    keep_going: bool

    @staticmethod
    def add_to_parser(parser: argparse.ArgumentParser) -> None:
        group = parser.add_argument_group("build options")
        group.add_argument(
            "-f",
            "--file",
            metavar="FILE",
            type=Path,
            help="the build file to use [default: build_file of the configuration, or build.xml]",
        )
        group.add_argument(
            "--config",
            metavar="FILE",
            type=Path,
            help=f"the configuration file to read [default: {CONFIG_FILENAME} next to the build file]",
        )
        group.add_argument(
            "-D",
            metavar="NAME=VALUE",
            dest="properties",
            action="append",
            type=_parse_define,
            default=[],
            help="set a user property. can be specified multiple times",
        )
        group.add_argument(
            "-k",
            "--keep-going",
            action="store_true",
            help="keep running targets that do not depend on a failed target",
        )

    @classmethod
    def collect(cls, args: argparse.Namespace) -> BuildOptions:
        return cls(
            build_file=args.file,
            config_file=args.config,
            properties=dict(args.properties),
            keep_going=args.keep_going,
        )

    def config_path(self) -> Path:
        """The `--config` file, or the configuration file next to the build file."""

        if self.config_file is not None:
            return self.config_file
        if self.build_file is not None:
            return self.build_file.parent / CONFIG_FILENAME
        return Path(CONFIG_FILENAME)

    def load_config(self) -> AnvilConfig:
        """Load the configuration file and apply the options given on the command line on top of it."""

        config = AnvilConfig.load(self.config_path())
        if self.build_file is not None:
            config.build_file = str(self.build_file)
        config.keep_going = config.keep_going or self.keep_going
        config.properties = {**config.properties, **self.properties}
        return config


@dataclasses.dataclass(frozen=True)
class RunOptions:
    targets: list[str]
    list_targets: bool
    init_config: bool

    @staticmethod
    def add_to_parser(parser: argparse.ArgumentParser) -> None:
        group = parser.add_argument_group("run options")
        group.add_argument("-l", "--list", dest="list_targets", action="store_true", help="list the targets and exit")
        group.add_argument(
            "--init-config",
            action="store_true",
            help=f"write the effective configuration to {CONFIG_FILENAME} (or --config) and exit",
        )
        group.add_argument(
            "targets",
            metavar="target",
            nargs="*",
            default=[],
            help="the targets to run. if not set, the default target of the project runs",
        )

    @classmethod
    def collect(cls, args: argparse.Namespace) -> RunOptions:
        return cls(
            targets=args.targets,
            list_targets=args.list_targets,
            init_config=args.init_config,
        )
