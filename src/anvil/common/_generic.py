from __future__ import annotations

import enum
from collections.abc import Callable
from typing import TypeVar

__all__ = [
    "not_none",
    "NotSet",
]

T = TypeVar("T")


def not_none(v: T | None, message: str | Callable[[], str] = "expected not-None") -> T:
    """
    Raise a :class:`RuntimeError` if *v* is `None`, otherwise return *v*.
    """

    if v is None:
        if callable(message):
            message = message()
        raise RuntimeError(message)
    return v


class NotSet(enum.Enum):
    """Sentinel for "no value given" where `None` is a legitimate value."""

    Value = 1
