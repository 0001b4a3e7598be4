from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from anvil.core import ConfigurationError, Mapper, Property, StalenessEvaluator, Task, TaskStatus, element

from .filelist import FileList

if TYPE_CHECKING:
    from anvil.core import Project


class UpToDateTask(Task):
    """
    Sets a property if the target files are up to date with respect to their source files.

    The sources are either the `srcfile` or the files of the nested `<filelist>` elements. Without a nested
    `<mapper>`, every source is compared against the `targetfile`. With a mapper, the mapper produces the
    derived files of each source.
    """

    description = "Sets a property if the target files are up to date."

    property_: Property[str] = Property.required(help="The property to set.")
    value: Property[str] = Property.default("true", help="The value to set the property to.")
    srcfile: Property[Path] = Property.required(help="The source file.")
    targetfile: Property[Path] = Property.required(help="The file that is derived from the sources.")

    def __init__(self, project: Project) -> None:
        super().__init__(project)
        self._filelists: list[FileList] = []
        self._mapper: Mapper | None = None

    @element("filelist")
    def add_filelist(self, filelist: FileList) -> None:
        self._filelists.append(filelist)

    @element("mapper")
    def create_mapper(self) -> Mapper:
        if self._mapper is not None:
            raise ConfigurationError("Cannot define more than one mapper", self.location)
        self._mapper = Mapper(self.project)
        return self._mapper

    def evaluate(self) -> bool:
        """Returns `True` if the target files are up to date."""

        if not self._filelists and not self.srcfile.is_set():
            raise ConfigurationError("At least one srcfile or a nested <filelist> element must be set.", self.location)
        if self._filelists and self.srcfile.is_set():
            raise ConfigurationError(
                "Cannot specify both the srcfile attribute and a nested <filelist> element.", self.location
            )
        if not self.targetfile.is_set() and self._mapper is None:
            raise ConfigurationError("The targetfile attribute or a nested mapper element must be set.", self.location)

        filesystem = self.project.context.filesystem
        target_file = self.targetfile.get() if self.targetfile.is_set() else None
        if target_file is not None and not filesystem.exists(target_file):
            return False
        if self.srcfile.is_set() and not filesystem.exists(self.srcfile.get()):
            raise ConfigurationError(f"{self.srcfile.get().absolute()} not found.", self.location)

        evaluator = StalenessEvaluator(filesystem)
        mapper = self._mapper.get_implementation() if self._mapper is not None else None
        try:
            for filelist in self._filelists:
                if not evaluator.is_up_to_date(target_file, filelist.get_files(), mapper, filelist.get_dir()):
                    return False
            if self.srcfile.is_set():
                return evaluator.is_up_to_date(target_file, [self.srcfile.get()], mapper)
        except ConfigurationError as exc:
            raise exc.with_location(self.location)
        return True

    def execute(self) -> TaskStatus:
        name = self.property_.get()
        if not self.evaluate():
            return TaskStatus.succeeded()

        self.project.properties.set(name, self.value.get(), override=True)
        if self._mapper is None:
            self.logger.debug('File "%s" is up-to-date.', self.targetfile.get())
        else:
            self.logger.debug("All target files are up-to-date.")
        return TaskStatus.up_to_date()
