"""
The staleness evaluator decides whether the files derived from a set of source files are current, by comparing
modification times. It only reads from the file system.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import PurePath

from anvil.core.system.errors import ConfigurationError
from anvil.core.system.filesystem import FileSystem
from anvil.core.system.mapper import FileNameMapper

logger = logging.getLogger(__name__)


class StalenessEvaluator:
    """
    A derived file is current if it exists and was modified at the same time as or after its source. Equal
    timestamps count as current.
    """

    def __init__(self, filesystem: FileSystem) -> None:
        self.filesystem = filesystem

    def _source(self, base_dir: PurePath | None, name: str | PurePath) -> PurePath:
        source = PurePath(name)
        if base_dir is not None and not source.is_absolute():
            source = base_dir / source
        if not self.filesystem.exists(source):
            raise ConfigurationError(f"{source} not found.")
        return source

    def _is_older(self, derived: PurePath, source: PurePath) -> bool:
        if not self.filesystem.exists(derived):
            logger.debug("%s is stale, %s does not exist", source, derived)
            return True
        if self.filesystem.last_modified(derived) < self.filesystem.last_modified(source):
            logger.debug("%s is stale, it is newer than %s", source, derived)
            return True
        return False

    def stale_sources(
        self,
        sources: Sequence[str | PurePath],
        mapper: FileNameMapper,
        base_dir: PurePath | None = None,
        dest_dir: PurePath | None = None,
    ) -> list[PurePath]:
        """
        Return the sources that have at least one derived file that is missing or older than the source. The
        *mapper* is applied to the source names as given, relative paths in its result are resolved against
        *dest_dir* (or *base_dir*). Sources that the mapper produces no names for are never stale.

        :param sources: Source file names, relative to *base_dir* unless they are absolute.
        :raise ConfigurationError: If a source file does not exist.
        """

        dest_dir = dest_dir if dest_dir is not None else base_dir
        stale = []
        for name in sources:
            source = self._source(base_dir, name)
            for derived_name in mapper.map(PurePath(name).as_posix()):
                derived = PurePath(derived_name)
                if dest_dir is not None and not derived.is_absolute():
                    derived = dest_dir / derived
                if self._is_older(derived, source):
                    stale.append(source)
                    break
        return stale

    def is_up_to_date(
        self,
        target_file: PurePath | None,
        sources: Sequence[str | PurePath],
        mapper: FileNameMapper | None = None,
        base_dir: PurePath | None = None,
    ) -> bool:
        """
        Without a *mapper*, returns `True` if *target_file* exists and no source is newer than it. With a
        *mapper*, returns `True` if none of the *sources* is stale (see :meth:`stale_sources`) and *target_file*
        is ignored.

        :raise ConfigurationError: If a source file does not exist. A missing *target_file* is checked first
            and makes the result `False` without looking at the sources.
        """

        if mapper is not None:
            return not self.stale_sources(sources, mapper, base_dir)
        if target_file is None:
            raise ValueError("a target file or a mapper is required")
        if not self.filesystem.exists(target_file):
            logger.debug("%s does not exist", target_file)
            return False
        resolved = [self._source(base_dir, name) for name in sources]
        target_mtime = self.filesystem.last_modified(target_file)
        for source in resolved:
            if self.filesystem.last_modified(source) > target_mtime:
                logger.debug("%s is newer than %s", source, target_file)
                return False
        return True
