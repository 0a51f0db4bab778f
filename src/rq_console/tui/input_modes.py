"""Pure mode system for key dispatch and the legend bar.

All keyboard input routes through RqApp.on_key → Application.on_key.
Textual BINDINGS are not used for application keys; only ctrl+c is bound,
so Textual's own quit handling cannot bypass the router.

The input mode is derived from application state on demand, never stored.
"""

from __future__ import annotations

from enum import Enum, auto

from rich.text import Text

from rq_console.tui.palette import PALETTE


class FocusState(Enum):
    """Which pane owns un-popped key presses."""
    REQUESTS_LIST = auto()
    RESPONSE_BUFFER = auto()


class InputMode(Enum):
    """Input modes derived from focus + whichever popup is on top."""
    REQUESTS_LIST = auto()
    RESPONSE_BUFFER = auto()
    SAVE_MENU = auto()
    PATH_INPUT = auto()
    MESSAGE = auto()


# Quit keys; q/Q are typed instead when PATH_INPUT is capturing text.
QUIT_KEYS = frozenset({"q", "Q"})
FORCE_QUIT_KEY = "ctrl+c"


# [LAW:one-source-of-truth] Legend display per mode.
# Format: list of (key, description) tuples.
LEGEND_KEYS: dict[InputMode, list[tuple[str, str]]] = {
    InputMode.REQUESTS_LIST: [
        ("q", "quit"),
        ("j/k", "select"),
        ("enter", "open"),
    ],
    InputMode.RESPONSE_BUFFER: [
        ("q", "quit"),
        ("esc", "back"),
        ("enter", "send"),
        ("j/k", "scroll"),
        ("s", "save body"),
        ("S", "save all"),
    ],
    InputMode.SAVE_MENU: [
        ("j/k", "move"),
        ("enter", "choose"),
        ("esc", "cancel"),
    ],
    InputMode.PATH_INPUT: [
        ("enter", "save"),
        ("esc", "cancel"),
        ("^C", "quit"),
    ],
    InputMode.MESSAGE: [
        ("any", "dismiss"),
    ],
}


def render_legend(mode: InputMode) -> Text:
    """One-line legend for the keys valid in `mode`."""
    text = Text(no_wrap=True, overflow="ellipsis")
    for i, (key, description) in enumerate(LEGEND_KEYS[mode]):
        if i:
            text.append("  ")
        text.append(key, style=PALETTE.legend_key)
        text.append(" ")
        text.append(description, style=PALETTE.legend_text)
    return text
