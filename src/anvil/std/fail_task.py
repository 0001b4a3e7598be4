from __future__ import annotations

from anvil.core import Property, Task, TaskError, TaskStatus, text_content


class FailTask(Task):
    """
    Fails the build. With `if` the build only fails if the property is set, with `unless` only if it is not.
    """

    description = "Fails the build."

    message: Property[str] = Property.default("")
    if_: Property[str] = Property.required(help="Fail only if this property is set.")
    unless: Property[str] = Property.required(help="Fail only if this property is not set.")

    @text_content
    def add_text(self, text: str) -> None:
        self.message.set(self.message.get() + text)

    def execute(self) -> TaskStatus:
        properties = self.project.properties
        if self.if_.is_set() and self.if_.get() not in properties:
            return TaskStatus.skipped(f"property {self.if_.get()!r} is not set")
        if self.unless.is_set() and self.unless.get() in properties:
            return TaskStatus.skipped(f"property {self.unless.get()!r} is set")
        raise TaskError(self.message.get().strip() or "No message", self.location)
