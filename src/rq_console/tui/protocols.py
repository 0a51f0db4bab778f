"""Component contract for the console's key-routed widget tree.

Every piece of the tree (request list, response panel, menu, text input,
message dialog, popup) is a plain object that satisfies Component. Textual
widgets only paint what components render; they never own UI state.

The Component protocol enables the routing pattern:
1. The app offers a key to the active popup (if any)
2. A CONSUMED result stops routing
3. An IGNORED result lets the key fall through to the focused child,
   then to the app's global keys

Structural typing: components don't inherit from Component, and Popup
wraps any of them.
"""

from enum import Enum
from typing import Protocol

from rich.console import RenderableType


class HandleResult(Enum):
    CONSUMED = "consumed"
    IGNORED = "ignored"


class Component(Protocol):
    """Protocol for anything that can receive keys and render itself.

    Key names follow Textual's Key event: "j", "S", "down", "enter",
    "escape", "backspace", "ctrl+c". `character` is the printable character
    for the key, or None for non-printing keys.

    Example:
        class Counter:
            def __init__(self):
                self.count = 0

            def handle_key(self, key, character):
                if key == "up":
                    self.count += 1
                    return HandleResult.CONSUMED
                return HandleResult.IGNORED

            def update(self):
                pass

            def render(self, height):
                return str(self.count)
    """

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        """React to one key press. Raise RqError to report a user-facing failure."""
        ...

    def update(self) -> None:
        """Advance time-driven state. Called once per tick."""
        ...

    def render(self, height: int) -> RenderableType:
        """Build a Rich renderable for a viewport `height` rows tall."""
        ...
