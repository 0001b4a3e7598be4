""" The `<path>` data type, an ordered list of file system locations, and its attribute coercion. """

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from anvil.core.system.binder import Binder, element
from anvil.core.system.component import DataType, ProjectComponent
from anvil.core.system.errors import ReferenceCycleError
from anvil.core.system.property import Property

if TYPE_CHECKING:
    from anvil.core.system.project import Project


def split_path(value: str) -> list[str]:
    r"""
    Split a path-like string on `:` and `;`. A single drive letter followed by a colon and a slash is kept
    together with the rest of the path.

    >>> split_path("lib/a.jar:lib/b.jar;C:\\tools\\c.jar")
    ['lib/a.jar', 'lib/b.jar', 'C:\\tools\\c.jar']
    """

    result = []
    for chunk in value.split(";"):
        pieces = chunk.split(":")
        index = 0
        while index < len(pieces):
            piece = pieces[index]
            if len(piece) == 1 and piece.isalpha() and index + 1 < len(pieces) and pieces[index + 1][:1] in "\\/":
                piece = piece + ":" + pieces[index + 1]
                index += 1
            if piece.strip():
                result.append(piece.strip())
            index += 1
    return result


class PathElement(ProjectComponent):
    """The `<pathelement>` of a `<path>`."""

    location_: Property[Path] = Property.required(help="A single file or directory.")
    path: Property[str] = Property.required(help="A list of locations separated by `:` or `;`.")

    def entries(self) -> list[Path]:
        result = []
        if self.location_.is_set():
            result.append(self.location_.get())
        if self.path.is_set():
            result += [self.project.resolve_file(p) for p in split_path(self.path.get())]
        return result


class PathList(DataType):
    """
    The `<path>` type. Its entries are the `location` and the `path` attributes, followed by the nested
    `<pathelement>` and `<path>` elements in the order they were declared.
    """

    location_: Property[Path] = Property.required(help="A single file or directory.")
    path: Property[str] = Property.required(help="A list of locations separated by `:` or `;`.")

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self._elements: list[PathElement | PathList] = []

    def __iter__(self) -> Iterator[Path]:
        return iter(self.entries())

    @element("pathelement")
    def add_pathelement(self, item: PathElement) -> None:
        self._elements.append(item)

    @element("path")
    def add_path(self, path: PathList) -> None:
        self._elements.append(path)

    def entries(self) -> list[Path]:
        """Return the locations of the path without duplicates."""

        return list(dict.fromkeys(self._entries([], [])))

    def _entries(self, stack: list[PathList], names: list[str]) -> list[Path]:
        path = self.get_ref()
        names = [*names, self.reference_target() or self.describe()]
        if path in stack:
            raise ReferenceCycleError(names, self.location)

        result = []
        if path.location_.is_set():
            result.append(path.location_.get())
        if path.path.is_set():
            result += [path.project.resolve_file(p) for p in split_path(path.path.get())]
        for item in path._elements:
            if isinstance(item, PathList):
                result += item._entries([*stack, path], names)
            else:
                result += item.entries()
        return result


@Binder.coercion(PathList)
def _coerce_path_list(project: Project, value: str) -> PathList:
    path = PathList(project)
    path.path.set(value)
    return path
