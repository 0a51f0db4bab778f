"""Response panel: one response's display state plus the save sub-flow.

State machine: VIEWING → CHOOSING_SAVE_MODE → ENTERING_PATH → VIEWING

    VIEWING             s / S   → CHOOSING_SAVE_MODE (body / entire preselected)
    CHOOSING_SAVE_MODE  enter   → ENTERING_PATH
    ENTERING_PATH       enter   → write file, Info message, VIEWING
                                  (empty path: EmptyFilenameError, stays)
                                  (write failure: FileWriteError, stays)
    any sub-state       escape  → VIEWING, nothing written

Scrolling (j/down, k/up) works in every phase for keys the open popup does
not consume; the offset saturates at 0.

// [LAW:one-source-of-truth] serialize_entire/serialize_body are the only
//   definitions of what lands on disk; the placeholder shown for bytes is
//   never written.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from rich.console import RenderableType
from rich.text import Text

from rq_console.app.message_queue import Message, MessageQueue
from rq_console.core.errors import EmptyFilenameError, FileWriteError, NoResponseError
from rq_console.core.model import BytesPayload, HttpResponse, TextPayload
from rq_console.tui.palette import PALETTE, status_style
from rq_console.tui.popup import Popup
from rq_console.tui.protocols import HandleResult
from rq_console.tui.widgets import Menu, ScrollPanel, TextInput, wrap_lines

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "<Empty>"
BYTES_PLACEHOLDER = "raw bytes"


class SavePhase(Enum):
    VIEWING = "viewing"
    CHOOSING_SAVE_MODE = "choosing_save_mode"
    ENTERING_PATH = "entering_path"


class SaveMode(Enum):
    ENTIRE = "entire"
    BODY = "body"

    @property
    def label(self) -> str:
        return _SAVE_MODE_LABELS[self]


_SAVE_MODE_LABELS = {
    SaveMode.ENTIRE: "Save entire response",
    SaveMode.BODY: "Save response body",
}
SAVE_MODES = (SaveMode.ENTIRE, SaveMode.BODY)


# ─── Serialization ────────────────────────────────────────────────────────────


def serialize_entire(response: HttpResponse) -> bytes:
    """`version status\\n` + `key: value\\n` per header + `\\n\\n` + body."""
    head = "{} {}\n".format(response.version, response.status)
    head += "".join("{}: {}\n".format(k, v) for k, v in response.headers)
    head += "\n\n"
    return head.encode("utf-8") + response.payload.to_bytes()


def serialize_body(response: HttpResponse) -> bytes:
    return response.payload.to_bytes()


_SERIALIZERS = {
    SaveMode.ENTIRE: serialize_entire,
    SaveMode.BODY: serialize_body,
}


# ─── Rendering ────────────────────────────────────────────────────────────────


def response_lines(response: HttpResponse | None) -> list[Text]:
    if response is None:
        return [Text(EMPTY_PLACEHOLDER, style=PALETTE.placeholder)]

    status_line = Text(response.version + " ")
    status_line.append(str(response.status), style=status_style(response.status))
    lines = [status_line]

    for key, value in response.headers:
        line = Text(key, style=PALETTE.header_key)
        line.append(": " + value)
        lines.append(line)

    lines.append(Text(""))

    payload = response.payload
    if isinstance(payload, TextPayload):
        lines.extend(Text(line) for line in payload.text.splitlines())
    elif isinstance(payload, BytesPayload):
        lines.append(Text(BYTES_PLACEHOLDER, style="italic"))
    return lines


# ─── Panel ────────────────────────────────────────────────────────────────────


class ResponsePanel:
    """Display + save state for the response slot of one request."""

    def __init__(self, messages: MessageQueue, content: HttpResponse | None = None) -> None:
        self._messages = messages
        self.content = content
        self._scroll = ScrollPanel()
        self.phase = SavePhase.VIEWING
        self.save_mode = SaveMode.ENTIRE
        self._menu_popup: Popup | None = None
        self._input_popup: Popup | None = None

    # ── Content ──

    @property
    def scroll(self) -> int:
        return self._scroll.offset

    def set_response(self, response: HttpResponse) -> None:
        self.content = response
        self._scroll.reset()

    def scroll_down(self) -> None:
        self._scroll.scroll_down()

    def scroll_up(self) -> None:
        self._scroll.scroll_up()

    def lines(self) -> list[Text]:
        return response_lines(self.content)

    # ── Save flow ──

    def active_popup(self) -> Popup | None:
        if self.phase is SavePhase.ENTERING_PATH:
            return self._input_popup
        if self.phase is SavePhase.CHOOSING_SAVE_MODE:
            return self._menu_popup
        return None

    @property
    def path_input(self) -> TextInput | None:
        return self._input_popup.component if self._input_popup is not None else None

    def open_save_menu(self, preselect: SaveMode) -> None:
        if self.content is None:
            raise NoResponseError()
        menu = Menu(SAVE_MODES, label=lambda mode: mode.label, selected=SAVE_MODES.index(preselect))
        self._menu_popup = Popup(
            menu,
            title=" save menu ",
            width_pct=30,
            height_pct=20,
            min_height=4,
            legend="Enter: choose  Esc: cancel",
        )
        self.phase = SavePhase.CHOOSING_SAVE_MODE

    def choose_save_mode(self) -> None:
        self.save_mode = self._menu_popup.component.selected()
        self._menu_popup = None
        self._input_popup = Popup(
            TextInput(""),
            title=" output path ",
            width_pct=50,
            height_pct=15,
            min_height=3,
            legend="Enter: save  Esc: cancel",
        )
        self.phase = SavePhase.ENTERING_PATH

    def cancel_save(self) -> None:
        self._menu_popup = None
        self._input_popup = None
        self.phase = SavePhase.VIEWING

    def save(self) -> Path:
        """Write the chosen serialization to the entered path.

        Raises:
            EmptyFilenameError: the path input is blank (popup stays open).
            FileWriteError: the write failed (popup stays open).
        """
        raw_path = self.path_input.value.strip()
        if not raw_path:
            raise EmptyFilenameError()
        if self.content is None:
            raise NoResponseError()

        data = _SERIALIZERS[self.save_mode](self.content)
        path = Path(raw_path).expanduser()
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.warning("save to %s failed: %s", path, e)
            raise FileWriteError("Failed to write {}: {}".format(raw_path, e.strerror or e)) from e

        logger.info("saved %s (%d bytes, mode=%s)", path, len(data), self.save_mode.value)
        self._messages.push(Message.info("Saved to {}".format(raw_path)))
        self.cancel_save()
        return path

    # ── Component ──

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        popup = self.active_popup()
        if popup is not None:
            if popup.handle_key(key, character) is HandleResult.CONSUMED:
                return HandleResult.CONSUMED
            if key == "escape":
                self.cancel_save()
                return HandleResult.CONSUMED
            if key == "enter":
                if self.phase is SavePhase.CHOOSING_SAVE_MODE:
                    self.choose_save_mode()
                else:
                    self.save()
                return HandleResult.CONSUMED
            return self._handle_scroll_key(key)

        if key == "s":
            self.open_save_menu(SaveMode.BODY)
            return HandleResult.CONSUMED
        if key == "S":
            self.open_save_menu(SaveMode.ENTIRE)
            return HandleResult.CONSUMED
        return self._handle_scroll_key(key)

    def _handle_scroll_key(self, key: str) -> HandleResult:
        if key in ("j", "down"):
            self.scroll_down()
        elif key in ("k", "up"):
            self.scroll_up()
        else:
            return HandleResult.IGNORED
        return HandleResult.CONSUMED

    def update(self) -> None:
        popup = self.active_popup()
        if popup is not None:
            popup.update()

    def title(self) -> str:
        payload = self.content.payload if self.content is not None else None
        if isinstance(payload, TextPayload):
            return " response ({}) ".format(payload.charset)
        if isinstance(payload, BytesPayload) and payload.extension:
            return " response ({}) ".format(payload.extension)
        return " response "

    def scroll_indicator(self, height: int, width: int | None = None) -> str:
        return self._scroll.indicator(len(wrap_lines(self.lines(), width)), height)

    def render(self, height: int, width: int | None = None) -> RenderableType:
        """Window of `height` rows, after wrapping lines to `width` cells."""
        return self._scroll.visible(self.lines(), height, width)
