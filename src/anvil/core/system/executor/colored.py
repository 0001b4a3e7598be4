from __future__ import annotations

from termcolor import colored as _colored

from anvil.core.system.graph import TargetState, TargetStatus

from .default import DefaultPrintingBuildObserver

COLORS_BY_STATE = {
    TargetState.PENDING: "magenta",
    TargetState.READY: "magenta",
    TargetState.RUNNING: "magenta",
    TargetState.SKIPPED: "yellow",
    TargetState.DONE: "green",
    TargetState.FAILED: "red",
    TargetState.ABORTED: "red",
}


def status_to_text(status: TargetStatus, colored: bool = True) -> str:
    if colored:
        message = _colored(status.state.name, COLORS_BY_STATE.get(status.state))
    else:
        message = status.state.name
    if status.message:
        message += f" ({status.message})"
    return message


class ColoredPrintingBuildObserver(DefaultPrintingBuildObserver):
    def __init__(self) -> None:
        super().__init__(
            status_to_text=status_to_text,
            format_header=lambda s: _colored(s, "cyan", attrs=["bold", "underline"]),
            format_duration=lambda s: _colored(s, "cyan"),
        )
