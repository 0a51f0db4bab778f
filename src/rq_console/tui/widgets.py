"""Focus-less leaf widgets: selection, menu, text input and scroll primitives.

Pure state + Rich rendering. No networking, no Textual widgets, no message
queue access; containers decide what a key means beyond these primitives.

This module is STABLE. Safe for `from` imports everywhere.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from rich.console import Console, Group, RenderableType
from rich.text import Text

from rq_console.tui.palette import PALETTE
from rq_console.tui.protocols import HandleResult

T = TypeVar("T")

HIGHLIGHT_SYMBOL = "> "
_NAV_NEXT = ("j", "down")
_NAV_PREV = ("k", "up")


# ─── StatefulList ─────────────────────────────────────────────────────────────


class StatefulList(Generic[T]):
    """Ordered items with a cyclic selection cursor.

    For a non-empty list the cursor is always in [0, len). next() on the last
    item wraps to 0; previous() on 0 wraps to the last item.
    """

    def __init__(self, items: Sequence[T], selected: int = 0) -> None:
        self._items: tuple[T, ...] = tuple(items)
        self._index = selected % len(self._items) if self._items else 0

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def next(self) -> None:
        if self._items:
            self._index = (self._index + 1) % len(self._items)

    def previous(self) -> None:
        if self._items:
            self._index = (self._index - 1) % len(self._items)

    def select(self, index: int) -> None:
        if self._items:
            self._index = index % len(self._items)

    def selected_index(self) -> int:
        return self._index

    def selected(self) -> T:
        if not self._items:
            raise IndexError("selection on an empty list")
        return self._items[self._index]


# ─── Menu ─────────────────────────────────────────────────────────────────────


class Menu(Generic[T]):
    """Cyclic single-choice menu. Enter/Escape are left to the owner."""

    def __init__(
        self,
        items: Sequence[T],
        *,
        label: Callable[[T], str] = str,
        selected: int = 0,
    ) -> None:
        self._list: StatefulList[T] = StatefulList(items, selected)
        self._label = label

    def selected(self) -> T:
        return self._list.selected()

    def selected_index(self) -> int:
        return self._list.selected_index()

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        if key in _NAV_NEXT:
            self._list.next()
        elif key in _NAV_PREV:
            self._list.previous()
        else:
            return HandleResult.IGNORED
        return HandleResult.CONSUMED

    def update(self) -> None:
        pass

    def render(self, height: int) -> RenderableType:
        text = Text()
        for i, item in enumerate(self._list.items):
            if i:
                text.append("\n")
            if i == self._list.selected_index():
                text.append(HIGHLIGHT_SYMBOL + self._label(item), style=PALETTE.selected)
            else:
                text.append(" " * len(HIGHLIGHT_SYMBOL) + self._label(item))
        return text


# ─── TextInput ────────────────────────────────────────────────────────────────


class TextInput:
    """Single-line editable text with a cursor. Enter/Escape are left to the owner."""

    def __init__(self, value: str = "") -> None:
        self.value = value
        self.cursor_pos = len(value)

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        """Handle text editing keys: backspace, delete, arrows, home, end, printable."""
        pos = self.cursor_pos
        value = self.value

        # [LAW:dataflow-not-control-flow] Lookup table for cursor-only mutations
        _CURSOR_MOVES = {
            "left": lambda v, p: max(0, p - 1),
            "right": lambda v, p: min(len(v), p + 1),
            "home": lambda v, p: 0,
            "end": lambda v, p: len(v),
        }
        if key in _CURSOR_MOVES:
            self.cursor_pos = _CURSOR_MOVES[key](value, pos)
            return HandleResult.CONSUMED

        if key == "backspace":
            if pos > 0:
                self.value = value[:pos - 1] + value[pos:]
                self.cursor_pos = pos - 1
            return HandleResult.CONSUMED

        if key == "delete":
            if pos < len(value):
                self.value = value[:pos] + value[pos + 1:]
            return HandleResult.CONSUMED

        if character and len(character) == 1 and character.isprintable():
            self.value = value[:pos] + character + value[pos:]
            self.cursor_pos = pos + 1
            return HandleResult.CONSUMED

        return HandleResult.IGNORED

    def update(self) -> None:
        pass

    def render(self, height: int) -> RenderableType:
        text = Text(no_wrap=True, overflow="ellipsis")
        text.append(self.value[:self.cursor_pos])
        under_cursor = self.value[self.cursor_pos:self.cursor_pos + 1] or " "
        text.append(under_cursor, style="reverse")
        text.append(self.value[self.cursor_pos + 1:])
        return text


# ─── ScrollPanel ──────────────────────────────────────────────────────────────

# Console argument for Text.wrap; never printed to.
_WRAP_CONSOLE = Console(file=io.StringIO(), color_system=None)


def wrap_lines(lines: Sequence[Text], width: int | None) -> list[Text]:
    """Fold each logical line into screen rows at most `width` cells wide.

    A falsy or non-positive width leaves the lines as they are.
    """
    if not width or width <= 0:
        return list(lines)
    rows: list[Text] = []
    for line in lines:
        rows.extend(line.wrap(_WRAP_CONSOLE, width))
    return rows


class ScrollPanel:
    """Vertical scroll offset over wrapped screen rows.

    The offset counts rows after wrapping to the viewport width, so a single
    long line scrolls one row at a time. It saturates at 0 and has no upper
    clamp; the indicator reflects content rows vs. viewport height.
    """

    def __init__(self) -> None:
        self.offset = 0

    def scroll_down(self) -> None:
        self.offset += 1

    def scroll_up(self) -> None:
        self.offset = max(0, self.offset - 1)

    def reset(self) -> None:
        self.offset = 0

    def visible(self, lines: Sequence[Text], height: int, width: int | None = None) -> RenderableType:
        rows = wrap_lines(lines, width)
        window = rows[self.offset:self.offset + height] if height > 0 else rows[self.offset:]
        return Group(*window)

    def indicator(self, total: int, height: int) -> str:
        """Position label like '12-40/80', or '' when everything fits.

        `total` is a row count; callers wrap with wrap_lines() first.
        """
        if height <= 0 or total <= height:
            return ""
        first = min(self.offset + 1, total)
        last = min(self.offset + height, total)
        return "{}-{}/{}".format(first, last, total)
