""" Pytest fixtures for testing tasks and build descriptions. Registered as the `anvil-core` pytest plugin. """

from __future__ import annotations

import contextlib
import logging
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path

import pytest

from anvil.core.system.context import BuildContext
from anvil.core.system.filesystem import FileSystem, MemoryFileSystem
from anvil.core.system.loader import parse_build_string
from anvil.core.system.project import Project
from anvil.core.system.registry import ComponentRegistry

__all__ = [
    "anvil_ctx",
    "anvil_project",
    "load_build_string",
    "tempdir",
]

logger = logging.getLogger(__name__)


@pytest.fixture(name="tempdir")
def _tempdir_fixture() -> Iterator[Path]:
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def default_registry() -> ComponentRegistry:
    from anvil.std import register_defaults

    registry = ComponentRegistry()
    register_defaults(registry)
    return registry


@pytest.fixture(name="anvil_ctx")
def _anvil_ctx_fixture() -> Iterator[BuildContext]:
    with anvil_ctx() as ctx:
        yield ctx


@contextlib.contextmanager
def anvil_ctx(filesystem: FileSystem | None = None, **kwargs: bool) -> Iterator[BuildContext]:
    """
    A build context with the standard tasks and types and an in-memory file system. Keyword arguments are
    passed to :class:`BuildContext`.
    """

    yield BuildContext(default_registry(), filesystem or MemoryFileSystem(), **kwargs)


@pytest.fixture(name="anvil_project")
def _anvil_project_fixture(anvil_ctx: BuildContext) -> Iterator[Project]:
    with anvil_project(anvil_ctx) as project:
        yield project


@contextlib.contextmanager
def anvil_project(anvil_ctx: BuildContext) -> Iterator[Project]:
    """An empty project named `test` whose base directory is a temporary directory."""

    with tempfile.TemporaryDirectory() as tmpdir:
        yield load_build_string(anvil_ctx, '<project name="test"/>', basedir=Path(tmpdir))


def load_build_string(
    ctx: BuildContext,
    text: str,
    properties: Mapping[str, str] | None = None,
    basedir: Path | None = None,
) -> Project:
    """Load a build description from *text* into *ctx*."""

    logger.debug("Loading build description from string into %r", ctx)
    return ctx.load_project(parse_build_string(text, "<string>"), properties, basedir)
