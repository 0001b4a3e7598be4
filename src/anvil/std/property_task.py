from __future__ import annotations

from pathlib import Path

from anvil.core import ConfigurationError, Property, Task, TaskStatus


class PropertyTask(Task):
    """
    Sets a build property. Properties can only be set once, unless `override` is set, and the properties that
    were given by the user can not be changed at all.
    """

    description = "Sets a property."

    name_: Property[str] = Property.required(help="The name of the property.")
    value: Property[str] = Property.required(help="The value of the property.")
    location_: Property[Path] = Property.required(help="A path that is stored as the value, as an absolute path.")
    override: Property[bool] = Property.default(False)

    def execute(self) -> TaskStatus:
        name = self.name_.get()
        if self.value.is_set() == self.location_.is_set():
            message = f"{self.describe()} requires either the 'value' or the 'location' attribute"
            raise ConfigurationError(message, self.location)
        value = self.value.get() if self.value.is_set() else str(self.location_.get().absolute())

        if self.project.properties.set(name, value, override=self.override.get()):
            self.logger.debug("Set property %s = %s", name, value)
            return TaskStatus.succeeded()
        return TaskStatus.skipped(f"property {name!r} is already set")
