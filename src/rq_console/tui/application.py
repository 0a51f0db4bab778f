"""Application: focus router and composition root of the component tree.

Pure state: no Textual imports. RqApp forwards every key press here and
asks the render_* helpers what to paint, so routing is testable without a
terminal.

Routing order for one key press:
    1. ctrl+c quits; q/Q quit unless the path input is capturing text
    2. an active message is dismissed by any key
    3. an open save popup on the selected panel takes the key (modal)
    4. the focused child (request list or selected response panel)
    5. global keys: enter / escape

// [LAW:single-enforcer] on_key is the only place a RqError raised while
//   handling input becomes a user-visible Error message.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich import box
from rich.console import RenderableType
from rich.panel import Panel
from rich.text import Text

from rq_console.app.dispatcher import RequestDispatcher
from rq_console.app.message_queue import Message, MessageQueue
from rq_console.core.errors import RqError
from rq_console.core.model import HttpRequest
from rq_console.tui.input_modes import (
    FORCE_QUIT_KEY,
    QUIT_KEYS,
    FocusState,
    InputMode,
    render_legend,
)
from rq_console.tui.message_dialog import MessageDialog, create_message_popup
from rq_console.tui.palette import PALETTE
from rq_console.tui.popup import Popup
from rq_console.tui.protocols import HandleResult
from rq_console.tui.request_list import RequestList
from rq_console.tui.response_panel import ResponsePanel, SavePhase

logger = logging.getLogger(__name__)

_BORDER_ROWS = 2
# Two border columns plus Panel's default one-cell padding on each side.
_BORDER_COLS = 4


def _inner_width(width: int) -> int | None:
    return width - _BORDER_COLS if width > _BORDER_COLS else None


class Application:
    def __init__(
        self,
        requests: Sequence[HttpRequest],
        dispatcher: RequestDispatcher,
        messages: MessageQueue,
        *,
        title: str = "requests",
    ) -> None:
        self.title = title
        self.messages = messages
        self.dispatcher = dispatcher
        self.focus = FocusState.REQUESTS_LIST
        self.should_exit = False
        self.request_list = RequestList(requests)
        # [LAW:one-source-of-truth] responses[i] belongs to request_list.requests[i].
        self.responses = [ResponsePanel(messages) for _ in requests]
        self.message_popup = create_message_popup(messages)

    # ─── State queries ─────────────────────────────────────────────────

    @property
    def message_dialog(self) -> MessageDialog:
        return self.message_popup.component

    def selected_panel(self) -> ResponsePanel | None:
        if not self.responses:
            return None
        return self.responses[self.request_list.selected_index()]

    def input_mode(self) -> InputMode:
        if self.message_dialog.active:
            return InputMode.MESSAGE
        panel = self.selected_panel()
        if panel is not None and panel.phase is SavePhase.ENTERING_PATH:
            return InputMode.PATH_INPUT
        if panel is not None and panel.phase is SavePhase.CHOOSING_SAVE_MODE:
            return InputMode.SAVE_MENU
        if self.focus is FocusState.RESPONSE_BUFFER:
            return InputMode.RESPONSE_BUFFER
        return InputMode.REQUESTS_LIST

    def active_popup(self) -> Popup | None:
        """Topmost popup: the message dialog, else the selected panel's save popup."""
        if self.message_dialog.active:
            return self.message_popup
        panel = self.selected_panel()
        return panel.active_popup() if panel is not None else None

    # ─── Input ─────────────────────────────────────────────────────────

    def on_key(self, key: str, character: str | None = None) -> None:
        """Route one key press. Never raises."""
        try:
            self._route_key(key, character)
        except RqError as e:
            logger.info("key %r rejected: %s", key, e)
            self.messages.push(Message.error(str(e)))
        except Exception as e:
            logger.exception("unhandled error while handling key %r", key)
            self.messages.push(Message.error("{}: {}".format(type(e).__name__, e)))

    def _route_key(self, key: str, character: str | None) -> None:
        if key == FORCE_QUIT_KEY:
            self.should_exit = True
            return

        panel = self.selected_panel()
        capturing_text = panel is not None and panel.phase is SavePhase.ENTERING_PATH
        if key in QUIT_KEYS and not capturing_text:
            self.should_exit = True
            return

        if self.message_popup.handle_key(key, character) is HandleResult.CONSUMED:
            return

        if panel is not None and panel.active_popup() is not None:
            panel.handle_key(key, character)
            return

        child = self.request_list if self.focus is FocusState.REQUESTS_LIST else panel
        if child is not None and child.handle_key(key, character) is HandleResult.CONSUMED:
            return

        self._handle_global_key(key)

    def _handle_global_key(self, key: str) -> None:
        if key == "enter":
            if self.focus is FocusState.REQUESTS_LIST:
                if self.responses:
                    self.focus = FocusState.RESPONSE_BUFFER
            else:
                self.send_selected()
        elif key == "escape" and self.focus is FocusState.RESPONSE_BUFFER:
            self.focus = FocusState.REQUESTS_LIST

    def send_selected(self) -> None:
        """Hand the selected request to the dispatcher; focus is unchanged."""
        index = self.request_list.selected_index()
        self.dispatcher.submit(self.request_list.selected(), index)

    # ─── Tick ──────────────────────────────────────────────────────────

    def update(self) -> None:
        result = self.dispatcher.poll()
        if result is not None:
            response, index = result
            if 0 <= index < len(self.responses):
                self.responses[index].set_response(response)
            else:
                logger.warning("dropping response for unknown request #%d", index)
        self.request_list.update()
        for panel in self.responses:
            panel.update()
        self.message_popup.update()

    # ─── Rendering ─────────────────────────────────────────────────────

    def _frame(self, body: RenderableType, title: str, subtitle: str, focused: bool, height: int) -> Panel:
        return Panel(
            body,
            title=Text(title, style="bold") if focused else title,
            subtitle=subtitle or None,
            subtitle_align="right",
            border_style=PALETTE.focus if focused else "",
            box=box.ROUNDED,
            height=height if height > 0 else None,
        )

    def render_requests(self, height: int, width: int = 0) -> RenderableType:
        inner = max(0, height - _BORDER_ROWS)
        focused = self.focus is FocusState.REQUESTS_LIST
        subtitle = ""
        if len(self.request_list):
            subtitle = "{}/{}".format(self.request_list.selected_index() + 1, len(self.request_list))
        return self._frame(
            self.request_list.render(inner, _inner_width(width)),
            " {} ".format(self.title), subtitle, focused, height,
        )

    def render_response(self, height: int, width: int = 0) -> RenderableType:
        """Framed response pane; `width` is the pane's outer width, 0 for unwrapped rows."""
        inner = max(0, height - _BORDER_ROWS)
        inner_width = _inner_width(width)
        focused = self.focus is FocusState.RESPONSE_BUFFER
        panel = self.selected_panel()
        if panel is None:
            panel = ResponsePanel(self.messages)
        return self._frame(
            panel.render(inner, inner_width),
            panel.title(), panel.scroll_indicator(inner, inner_width), focused, height,
        )

    def render_legend(self) -> Text:
        return render_legend(self.input_mode())
