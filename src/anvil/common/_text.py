from typing_extensions import Protocol


class SupportsLen(Protocol):
    def __len__(self) -> int:
        ...


def pluralize(word: str, count: "int | SupportsLen", plural: "str | None" = None) -> str:
    """
    Very naive pluralization of english words. Appends an "s" unless a *plural* form is given.

    >>> pluralize("target", 1)
    'target'
    >>> pluralize("target", 3)
    'targets'
    >>> pluralize("property", [1, 2], "properties")
    'properties'
    """

    if not isinstance(count, int):
        count = len(count)
    if count == 1:
        return word
    return plural if plural is not None else f"{word}s"
