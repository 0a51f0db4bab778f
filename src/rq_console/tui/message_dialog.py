"""Message dialog: shows queued notifications one at a time.

update() promotes the oldest queued message when nothing is showing.
Any key dismisses the active message; the next tick promotes the next one.
"""

from __future__ import annotations

from rich.console import RenderableType
from rich.text import Text

from rq_console.app.message_queue import Message, MessageKind, MessageQueue
from rq_console.tui.palette import PALETTE
from rq_console.tui.popup import Popup
from rq_console.tui.protocols import HandleResult

_FRAMES = {
    MessageKind.INFO: (" info ", PALETTE.info),
    MessageKind.ERROR: (" error ", PALETTE.error),
}


class MessageDialog:
    def __init__(self, messages: MessageQueue) -> None:
        self._messages = messages
        self.content: Message | None = None

    @property
    def active(self) -> bool:
        return self.content is not None

    @property
    def panel_title(self) -> str | None:
        return _FRAMES[self.content.kind][0] if self.content else None

    @property
    def panel_style(self) -> str | None:
        return _FRAMES[self.content.kind][1] if self.content else None

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        if self.content is None:
            return HandleResult.IGNORED
        self.content = None
        return HandleResult.CONSUMED

    def update(self) -> None:
        if self.content is None:
            self.content = self._messages.pop()

    def render(self, height: int) -> RenderableType:
        if self.content is None:
            return Text("")
        return Text(self.content.text, overflow="fold")


def create_message_popup(messages: MessageQueue) -> Popup:
    return Popup(MessageDialog(messages), width_pct=40, height_pct=25, legend="Any: Dismiss")
