"""
File name mappers translate the name of a source file into the names of the files that are derived from it.
They are used by the staleness evaluator to find the outputs of a source file.
"""

from __future__ import annotations

import abc
import enum
import re

from anvil.core.system.component import DataType
from anvil.core.system.errors import ConfigurationError
from anvil.core.system.property import Property


class FileNameMapper(abc.ABC):
    @abc.abstractmethod
    def map(self, name: str) -> list[str]:
        """Return the names derived from *name*. An empty list means that the mapper does not apply to *name*."""


class IdentityMapper(FileNameMapper):
    def map(self, name: str) -> list[str]:
        return [name]


class FlattenMapper(FileNameMapper):
    """
    >>> FlattenMapper().map("src/main/App.java")
    ['App.java']
    """

    def map(self, name: str) -> list[str]:
        return [name.replace("\\", "/").rpartition("/")[2]]


class MergeMapper(FileNameMapper):
    def __init__(self, to: str) -> None:
        self.to = to

    def map(self, name: str) -> list[str]:
        return [self.to]


class GlobMapper(FileNameMapper):
    """
    Maps names that match the *from_* pattern, which may contain a single `*`. The part of the name that the `*`
    matched replaces the `*` in *to*.

    >>> GlobMapper("*.c", "build/*.o").map("lib/util.c")
    ['build/lib/util.o']
    >>> GlobMapper("*.c", "*.o").map("README")
    []
    """

    def __init__(self, from_: str, to: str, case_sensitive: bool = True) -> None:
        if from_.count("*") > 1 or to.count("*") > 1:
            raise ConfigurationError("the glob mapper supports at most one '*' in 'from' and 'to'")
        self.from_prefix, _, self.from_postfix = from_.partition("*")
        self.to = to
        self.to_prefix, _, self.to_postfix = to.partition("*")
        self.has_wildcard = "*" in from_
        self.case_sensitive = case_sensitive

    def _matches(self, name: str) -> bool:
        prefix, postfix = self.from_prefix, self.from_postfix
        if not self.case_sensitive:
            name, prefix, postfix = name.lower(), prefix.lower(), postfix.lower()
        if not self.has_wildcard:
            return name == prefix
        return len(name) >= len(prefix) + len(postfix) and name.startswith(prefix) and name.endswith(postfix)

    def map(self, name: str) -> list[str]:
        if not self._matches(name):
            return []
        if not self.has_wildcard or "*" not in self.to:
            return [self.to]
        middle = name[len(self.from_prefix) : len(name) - len(self.from_postfix)]
        return [self.to_prefix + middle + self.to_postfix]


class RegexpMapper(FileNameMapper):
    r"""
    Maps names that the regular expression *from_* matches. `\0` in *to* is replaced with the whole match and
    `\1` to `\9` with the groups of the match.

    >>> RegexpMapper(r"^(.*)\.java$", r"classes/\1.class").map("pkg/App.java")
    ['classes/pkg/App.class']
    """

    BACKREFERENCE = re.compile(r"\\(\d)")

    def __init__(self, from_: str, to: str, case_sensitive: bool = True) -> None:
        try:
            self.pattern = re.compile(from_, 0 if case_sensitive else re.IGNORECASE)
        except re.error as exc:
            raise ConfigurationError(f"invalid regular expression {from_!r}: {exc}") from exc
        self.to = to

    def map(self, name: str) -> list[str]:
        match = self.pattern.search(name)
        if match is None:
            return []

        def _replace(ref: re.Match[str]) -> str:
            index = int(ref.group(1))
            if index > self.pattern.groups:
                return ""
            return match.group(index) or ""

        return [self.BACKREFERENCE.sub(_replace, self.to)]


class MapperType(enum.Enum):
    IDENTITY = "identity"
    FLATTEN = "flatten"
    GLOB = "glob"
    MERGE = "merge"
    REGEXP = "regexp"


class Mapper(DataType):
    """The `<mapper>` type, which configures one of the file name mappers."""

    type_: Property[MapperType] = Property.required(help="The kind of mapper.")
    from_: Property[str] = Property.required(help="The pattern that source names are matched against.")
    to: Property[str] = Property.required(help="The pattern that produces the derived names.")
    casesensitive: Property[bool] = Property.default(True)

    def get_implementation(self) -> FileNameMapper:
        mapper = self.get_ref()
        if not mapper.type_.is_set():
            raise ConfigurationError("<mapper> requires the 'type' attribute", mapper.location)
        kind = mapper.type_.get()

        if kind == MapperType.IDENTITY:
            return IdentityMapper()
        if kind == MapperType.FLATTEN:
            return FlattenMapper()
        if not mapper.to.is_set():
            raise ConfigurationError(f"the {kind.value} mapper requires the 'to' attribute", mapper.location)
        if kind == MapperType.MERGE:
            return MergeMapper(mapper.to.get())
        if not mapper.from_.is_set():
            raise ConfigurationError(f"the {kind.value} mapper requires the 'from' attribute", mapper.location)
        try:
            if kind == MapperType.GLOB:
                return GlobMapper(mapper.from_.get(), mapper.to.get(), mapper.casesensitive.get())
            return RegexpMapper(mapper.from_.get(), mapper.to.get(), mapper.casesensitive.get())
        except ConfigurationError as exc:
            raise exc.with_location(mapper.location)

    def map(self, name: str) -> list[str]:
        return self.get_implementation().map(name)
