from __future__ import annotations

from pathlib import Path

from anvil.core import Property, Task


class TouchTask(Task):
    """Creates a file if it does not exist and sets its modification time."""

    description = "Touches a file."

    file: Property[Path] = Property.required(help="The file to touch.")
    millis: Property[int] = Property.required(help="The modification time in milliseconds since the epoch.")

    def execute(self) -> None:
        mtime = self.millis.get() / 1000 if self.millis.is_set() else None
        self.logger.debug("Touching %s", self.file.get())
        self.project.context.filesystem.touch(self.file.get(), mtime)
