"""Request list: cyclic selection over the parsed requests."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Group, RenderableType
from rich.text import Text

from rq_console.core.model import HttpRequest
from rq_console.tui.palette import PALETTE
from rq_console.tui.protocols import HandleResult
from rq_console.tui.widgets import HIGHLIGHT_SYMBOL, StatefulList, wrap_lines

EMPTY_PLACEHOLDER = "No requests found"


def request_lines(request: HttpRequest) -> list[Text]:
    """Request line, headers, then the body (if any), each block followed by a blank."""
    first = Text()
    first.append(request.method, style=PALETTE.method)
    first.append(" {} {}".format(request.url, request.version))
    lines = [first]
    lines.extend(Text("{}: {}".format(k, v)) for k, v in request.headers)
    lines.append(Text(""))
    if request.body:
        lines.extend(Text(line, style=PALETTE.request_body) for line in request.body.splitlines())
        lines.append(Text(""))
    return lines


class RequestList:
    def __init__(self, requests: Sequence[HttpRequest]) -> None:
        self._list: StatefulList[HttpRequest] = StatefulList(requests)
        self._top = 0

    def __len__(self) -> int:
        return len(self._list)

    @property
    def requests(self) -> tuple[HttpRequest, ...]:
        return self._list.items

    def next(self) -> None:
        self._list.next()

    def previous(self) -> None:
        self._list.previous()

    def selected(self) -> HttpRequest:
        return self._list.selected()

    def selected_index(self) -> int:
        return self._list.selected_index()

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        if key in ("j", "down"):
            self.next()
        elif key in ("k", "up"):
            self.previous()
        else:
            return HandleResult.IGNORED
        return HandleResult.CONSUMED

    def update(self) -> None:
        pass

    def _blocks(self, width: int | None) -> list[list[Text]]:
        """One list of screen rows per request; rows are wrapped after the marker column."""
        selected = self._list.selected_index()
        blocks = []
        indent = " " * len(HIGHLIGHT_SYMBOL)
        body_width = width - len(indent) if width else None
        for i, request in enumerate(self._list.items):
            first = HIGHLIGHT_SYMBOL if i == selected else indent
            rows = wrap_lines(request_lines(request), body_width)
            lines = [Text(first if n == 0 else indent) + row for n, row in enumerate(rows)]
            if i == selected:
                for line in lines:
                    line.stylize(PALETTE.selected)
            blocks.append(lines)
        return blocks

    def _scroll_into_view(self, blocks: list[list[Text]], height: int) -> None:
        selected = self._list.selected_index()
        if selected < self._top:
            self._top = selected
        while self._top < selected:
            used = sum(len(b) for b in blocks[self._top:selected + 1])
            if used <= height:
                break
            self._top += 1

    def render(self, height: int, width: int | None = None) -> RenderableType:
        if not self._list.items:
            return Text(EMPTY_PLACEHOLDER, style=PALETTE.placeholder)
        blocks = self._blocks(width)
        if height > 0:
            self._scroll_into_view(blocks, height)
        else:
            self._top = 0
        return Group(*(line for block in blocks[self._top:] for line in block))
