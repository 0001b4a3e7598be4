from __future__ import annotations

import argparse
import builtins
import logging
import sys
import textwrap
from functools import partial
from pathlib import Path
from typing import NoReturn

from termcolor import colored

from anvil.common import LoggingOptions
from anvil.core import __version__
from anvil.core.cli.option_sets import BuildOptions, RunOptions
from anvil.core.system.context import BuildContext, BuildOutcome, BuildResult
from anvil.core.system.errors import ConfigurationError
from anvil.core.system.executor.colored import ColoredPrintingBuildObserver
from anvil.core.system.project import Project

logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)

EXIT_CODES = {
    BuildOutcome.SUCCESS: 0,
    BuildOutcome.FAILED: 1,
    BuildOutcome.ABORTED: 2,
}


def _get_argument_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog,
        formatter_class=lambda prog: argparse.RawDescriptionHelpFormatter(prog, width=120, max_help_position=60),
        description=textwrap.dedent(
            """
            The Anvil build tool.

            Runs the targets of an XML build description and the targets they depend on.
            """
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    LoggingOptions.add_to_parser(parser, default_verbosity=1)
    BuildOptions.add_to_parser(parser)
    RunOptions.add_to_parser(parser)
    return parser


def list_targets(project: Project) -> None:
    print()
    print(colored(f"Targets of {project.name or 'the project'}", "blue", attrs=["bold", "underline"]))
    print()
    if not project.targets:
        print("  no targets")
        return
    longest_name = max(map(len, project.targets))
    for name in sorted(project.targets):
        target = project.targets[name]
        line = name.ljust(longest_name)
        if name == project.default_target:
            line = colored(line, "green", attrs=["bold"])
        print(f"  {line}  {target.description or ''}".rstrip())
    if project.default_target:
        print()
        print("Default target:", colored(project.default_target, attrs=["bold"]))


def print_result(result: BuildResult) -> None:
    if result.is_success():
        print(colored("BUILD SUCCESSFUL", "green", attrs=["bold"]))
        return
    print()
    header = "BUILD FAILED" if result.outcome == BuildOutcome.FAILED else "BUILD ABORTED"
    print(colored(header, "red", attrs=["bold"]), file=sys.stderr)
    print(colored("error:", "red"), result.message, file=sys.stderr)


def on_exception(exc: BaseException) -> int:
    """
    Called when an exception occurs in :func:`main_internal` to map it to an exit code and print a helpful
    error message.
    """

    match exc:
        case SystemExit():
            if not isinstance(exc.code, int):
                logger.warning("SystemExit.code is not an integer: %r", exc.code)
                return 1
            return exc.code
        case KeyboardInterrupt():
            print(colored("interrupted", "red"), file=sys.stderr)
            return 130
        case ConfigurationError():
            print(colored("BUILD ABORTED", "red", attrs=["bold"]), file=sys.stderr)
            print(colored("error:", "red"), exc, file=sys.stderr)
            return EXIT_CODES[BuildOutcome.ABORTED]
        case _:
            logger.error(
                "An unexpected error occurred in the Anvil CLI. This is likely a bug in Anvil or in a task "
                "that was loaded with <taskdef>.\n\n",
                exc_info=exc,
            )
            return 3


def main_internal(prog: str, argv: list[str] | None) -> NoReturn:
    parser = _get_argument_parser(prog)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    LoggingOptions.collect(args).init_logging()

    build_options = BuildOptions.collect(args)
    run_options = RunOptions.collect(args)
    try:
        config = build_options.load_config()
    except ValueError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc

    if run_options.init_config:
        config_file = build_options.config_path()
        config.save(config_file)
        print("wrote", config_file)
        sys.exit(0)

    context = BuildContext(
        observer=ColoredPrintingBuildObserver(),
        implicit_booleans=config.implicit_booleans,
        keep_going=config.keep_going,
    )
    project = context.load_project(Path(config.build_file), config.properties)

    if run_options.list_targets:
        list_targets(project)
        sys.exit(0)

    targets = run_options.targets
    if not targets and config.default_target:
        targets = [config.default_target]

    result = context.run(targets)
    print_result(result)
    sys.exit(EXIT_CODES[result.outcome])


def main(prog: str = "anvil", argv: list[str] | None = None, handle_exceptions: bool = True) -> NoReturn:
    try:
        main_internal(prog, argv)
    except BaseException as exc:
        if not handle_exceptions:
            raise
        sys.exit(on_exception(exc))


if __name__ == "__main__":
    main()
