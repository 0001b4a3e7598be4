""" The file access capability that the staleness evaluator and file based tasks work against. """

from __future__ import annotations

import abc
import logging
import os
from collections.abc import Iterator
from pathlib import Path, PurePath

logger = logging.getLogger(__name__)


class FileSystem(abc.ABC):
    """
    Abstract file access. Paths are absolute. Timestamps are seconds since the epoch, as a float.
    """

    @abc.abstractmethod
    def exists(self, path: PurePath) -> bool:
        ...

    @abc.abstractmethod
    def is_dir(self, path: PurePath) -> bool:
        ...

    @abc.abstractmethod
    def last_modified(self, path: PurePath) -> float:
        """:raise FileNotFoundError: If *path* does not exist."""

    @abc.abstractmethod
    def list(self, path: PurePath) -> list[PurePath]:
        """Return the direct children of the directory *path*, sorted by name."""

    @abc.abstractmethod
    def delete(self, path: PurePath) -> None:
        """Delete a file or an empty directory. :raise OSError: If the path can not be deleted."""

    @abc.abstractmethod
    def read(self, path: PurePath) -> bytes:
        ...

    @abc.abstractmethod
    def write(self, path: PurePath, data: bytes) -> None:
        """Write *data* to the file at *path*, creating parent directories as needed."""

    @abc.abstractmethod
    def touch(self, path: PurePath, mtime: float | None = None) -> None:
        """Create *path* if needed and set its modification time (to now if *mtime* is not specified)."""

    def walk(self, path: PurePath) -> Iterator[PurePath]:
        """Yield all files and directories below *path*, children before their parent directory."""

        for child in self.list(path):
            if self.is_dir(child):
                yield from self.walk(child)
            yield child


class LocalFileSystem(FileSystem):
    """The file system of the machine, based on :mod:`pathlib`."""

    def exists(self, path: PurePath) -> bool:
        return Path(path).exists()

    def is_dir(self, path: PurePath) -> bool:
        return Path(path).is_dir()

    def last_modified(self, path: PurePath) -> float:
        return Path(path).stat().st_mtime

    def list(self, path: PurePath) -> list[PurePath]:
        return sorted(Path(path).iterdir())

    def delete(self, path: PurePath) -> None:
        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()

    def read(self, path: PurePath) -> bytes:
        return Path(path).read_bytes()

    def write(self, path: PurePath, data: bytes) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def touch(self, path: PurePath, mtime: float | None = None) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        if mtime is not None:
            os.utime(path, (mtime, mtime))


class MemoryFileSystem(FileSystem):
    """
    A file system that lives in memory, with a clock that only moves when told to. Directories are implied by
    the files in them, or created explicitly with :meth:`mkdir`.

    >>> fs = MemoryFileSystem()
    >>> fs.touch(PurePath("/src/a.c"), 10.0)
    >>> fs.is_dir(PurePath("/src")), fs.last_modified(PurePath("/src/a.c"))
    (True, 10.0)
    """

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self._files: dict[PurePath, tuple[bytes, float]] = {}
        self._dirs: set[PurePath] = set()

    def _add_parents(self, path: PurePath) -> None:
        for parent in path.parents:
            self._dirs.add(parent)

    def mkdir(self, path: PurePath) -> None:
        self._dirs.add(path)
        self._add_parents(path)

    def exists(self, path: PurePath) -> bool:
        return path in self._files or self.is_dir(path)

    def is_dir(self, path: PurePath) -> bool:
        return path in self._dirs

    def last_modified(self, path: PurePath) -> float:
        try:
            return self._files[path][1]
        except KeyError:
            if path in self._dirs:
                return 0.0
            raise FileNotFoundError(str(path))

    def list(self, path: PurePath) -> list[PurePath]:
        if path not in self._dirs:
            raise NotADirectoryError(str(path))
        children = {p for p in (*self._files, *self._dirs) if p.parent == path and p != path}
        return sorted(children)

    def delete(self, path: PurePath) -> None:
        if path in self._files:
            del self._files[path]
        elif path in self._dirs:
            if self.list(path):
                raise OSError(f"directory not empty: {path}")
            self._dirs.discard(path)
        else:
            raise FileNotFoundError(str(path))

    def read(self, path: PurePath) -> bytes:
        try:
            return self._files[path][0]
        except KeyError:
            raise FileNotFoundError(str(path))

    def write(self, path: PurePath, data: bytes) -> None:
        self._add_parents(path)
        self._files[path] = (data, self.now)

    def touch(self, path: PurePath, mtime: float | None = None) -> None:
        self._add_parents(path)
        data = self._files[path][0] if path in self._files else b""
        self._files[path] = (data, self.now if mtime is None else mtime)
