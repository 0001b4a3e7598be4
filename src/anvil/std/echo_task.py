from __future__ import annotations

from pathlib import Path

from anvil.core import LogLevel, Property, Task, text_content


class EchoTask(Task):
    """Logs a message, or writes it to a file."""

    description = "Logs a message."

    message: Property[str] = Property.default("")
    level: Property[LogLevel] = Property.default(LogLevel.INFO)
    file: Property[Path] = Property.required(help="Write the message to this file instead of logging it.")
    append: Property[bool] = Property.default(False)

    @text_content
    def add_text(self, text: str) -> None:
        self.message.set(self.message.get() + text)

    def execute(self) -> None:
        message = self.message.get()
        if not self.file.is_set():
            self.logger.log(self.level.get().to_logging(), "%s", message)
            return

        filesystem = self.project.context.filesystem
        path = self.file.get()
        data = message.encode("utf-8")
        if self.append.get() and filesystem.exists(path):
            data = filesystem.read(path) + data
        filesystem.write(path, data)
