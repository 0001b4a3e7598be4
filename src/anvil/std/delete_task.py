from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from anvil.common import pluralize
from anvil.core import ConfigurationError, FailurePolicyTask, Property, element

from .filelist import FileList

if TYPE_CHECKING:
    from anvil.core import Project


class DeleteTask(FailurePolicyTask):
    """
    Deletes a file, a directory with all of its contents, or the files of nested `<filelist>` elements. How
    errors are handled is up to the `quiet`, `failonerror` and `errorproperty` attributes.
    """

    description = "Deletes files and directories."

    file: Property[Path] = Property.required(help="The file to delete.")
    dir: Property[Path] = Property.required(help="The directory to delete, with all of its contents.")
    includeemptydirs: Property[bool] = Property.default(False)
    verbose: Property[bool] = Property.default(False)

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self._filelists: list[FileList] = []

    @element("filelist")
    def add_filelist(self, filelist: FileList) -> None:
        self._filelists.append(filelist)

    @property
    def _level(self) -> int:
        return logging.INFO if self.verbose.get() else logging.DEBUG

    def execute(self) -> None:
        if not (self.file.is_set() or self.dir.is_set() or self._filelists):
            raise ConfigurationError(
                "At least one of the file or dir attributes, or a filelist element must be set.", self.location
            )
        self.check_failure_policy()

        if self.file.is_set():
            self._delete_file_attribute(self.file.get())
        if self.dir.is_set():
            self._delete_dir_attribute(self.dir.get())
        for filelist in self._filelists:
            try:
                self._delete_files(filelist.get_dir(), filelist.get_files())
            except ConfigurationError as exc:
                self.handle_error(exc.message, exc)

    def _delete(self, path: PurePath, kind: str) -> bool:
        self.logger.log(self._level, "Deleting %s", path)
        try:
            self.project.context.filesystem.delete(path)
        except OSError as exc:
            self.handle_error(f"Unable to delete {kind} {path}: {exc}", exc)
            return False
        return True

    def _delete_file_attribute(self, path: Path) -> None:
        filesystem = self.project.context.filesystem
        if not filesystem.exists(path):
            self.handle_error(f"Could not find file {path.absolute()} to delete.")
        elif filesystem.is_dir(path):
            self.logger.info("Directory %s cannot be removed using the file attribute. Use dir instead.", path)
        else:
            self._delete(path, "file")

    def _delete_dir_attribute(self, path: Path) -> None:
        filesystem = self.project.context.filesystem
        if not filesystem.is_dir(path):
            self.handle_error(f"Directory {path.absolute()} does not exist or is not a directory.")
            return
        for child in filesystem.walk(path):
            self._delete(child, "directory" if filesystem.is_dir(child) else "file")
        self._delete(path, "directory")

    def _delete_files(self, base_dir: Path, names: list[str]) -> None:
        filesystem = self.project.context.filesystem
        self.logger.info("Deleting %d %s from %s", len(names), pluralize("file", names), base_dir)
        parents: dict[PurePath, None] = {}
        for name in names:
            path = base_dir / name
            if filesystem.exists(path) and not filesystem.is_dir(path):
                self._delete(path, "file")
            for parent in path.relative_to(base_dir).parents:
                if parent != PurePath("."):
                    parents[base_dir / parent] = None

        if not self.includeemptydirs.get():
            return
        count = 0
        for directory in sorted(parents, key=lambda p: len(p.parts), reverse=True):
            if filesystem.is_dir(directory) and not filesystem.list(directory):
                count += self._delete(directory, "directory")
        if count:
            self.logger.info("Deleted %d %s from %s", count, pluralize("directory", count, "directories"), base_dir)
