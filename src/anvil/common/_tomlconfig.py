from collections.abc import Iterator, MutableMapping
from pathlib import Path
from typing import Any, Dict

import tomli
import tomli_w


class TomlConfigFile(MutableMapping[str, Any]):
    """
    A lazily loaded TOML file that can be modified and saved back. A file that does not exist reads as empty.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: "Dict[str, Any] | None" = None

    def __repr__(self) -> str:
        return f"TomlConfigFile({str(self.path)!r})"

    def _get_data(self) -> "Dict[str, Any]":
        if self._data is None:
            if self.path.is_file():
                try:
                    self._data = tomli.loads(self.path.read_text())
                except tomli.TOMLDecodeError as exc:
                    raise ValueError(f"{self.path}: {exc}") from exc
            else:
                self._data = {}
        return self._data

    def exists(self) -> bool:
        return self.path.is_file()

    def get_table(self, key: str) -> "Dict[str, Any]":
        """Return the table *key*, or an empty dictionary if it is not present."""

        value = self._get_data().get(key, {})
        if not isinstance(value, dict):
            raise ValueError(f"{self.path}: expected a table at {key!r}, got {type(value).__name__}")
        return value

    def __getitem__(self, key: str) -> Any:
        return self._get_data()[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._get_data()[key] = value

    def __delitem__(self, key: str) -> None:
        del self._get_data()[key]

    def __len__(self) -> int:
        return len(self._get_data())

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_data())

    def save(self) -> None:
        self.path.parent.mkdir(exist_ok=True, parents=True)
        self.path.write_text(tomli_w.dumps(self._get_data()))
