from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from anvil.core import ConfigurationError, DataType, Property, ProjectComponent, element

if TYPE_CHECKING:
    from anvil.core import Project

FILE_SEPARATOR = re.compile(r"[,\s]+")


class FileName(ProjectComponent):
    """A nested `<file name="..."/>` of a `<filelist>`."""

    name_: Property[str]


class FileList(DataType):
    """
    The `<filelist>` type: an explicit list of file names relative to a directory. The files do not have to
    exist. Names are given with the `files` attribute (separated by commas or whitespace), nested `<file>`
    elements, or a `listfile` with one name per line.
    """

    dir: Property[Path] = Property.required(help="The directory that the file names are relative to.")
    files: Property[str] = Property.required(help="File names separated by commas or whitespace.")
    listfile: Property[Path] = Property.required(help="A file with one file name per line.")

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self._names: list[FileName] = []

    @element("file")
    def add_file(self, name: FileName) -> None:
        self._names.append(name)

    def get_dir(self) -> Path:
        filelist = self.get_ref()
        if not filelist.dir.is_set():
            raise ConfigurationError("No directory specified for filelist.", filelist.location)
        return filelist.dir.get()

    def get_files(self) -> list[str]:
        """Return the file names, relative to :meth:`get_dir`."""

        filelist = self.get_ref()
        filelist.get_dir()

        names: list[str] = []
        if filelist.files.is_set():
            names += [name for name in FILE_SEPARATOR.split(filelist.files.get()) if name]
        names += [name.name_.get() for name in filelist._names]
        if filelist.listfile.is_set():
            names += filelist._read_listfile(filelist.listfile.get())
        if not names:
            raise ConfigurationError("No files specified for filelist.", filelist.location)
        return names

    def _read_listfile(self, path: Path) -> list[str]:
        try:
            data = self.project.context.filesystem.read(path)
        except OSError as exc:
            raise ConfigurationError(
                f"An error occurred while reading from list file {path}: {exc}", self.location
            ) from exc
        resolve = self.project.properties.resolve
        return [resolve(line.strip()) for line in data.decode("utf-8").splitlines() if line.strip()]
