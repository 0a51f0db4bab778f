"""Textual front end: event loop, terminal backend and popup overlay.

RqApp owns no application state. Every key press goes to
Application.on_key and every tick to Application.update; after either the
whole screen is redrawn from Application's render_* helpers.

// [LAW:single-enforcer] on_key is the sole key dispatcher. The only binding
//   is a priority ctrl+c, so Textual's own quit/copy handling never runs.
"""

from __future__ import annotations

import logging
import traceback

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Static

from rq_console.app.message_queue import Message
from rq_console.tui.application import Application

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.25


class PopupLayer(Static):
    """Opaque overlay painted at the region the active popup asks for."""

    DEFAULT_CSS = """
    PopupLayer {
        layer: popup;
        position: absolute;
        display: none;
        background: $surface;
    }
    """


class RqApp(App):
    """TUI application for rq."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layers: base popup;
    }

    #panes {
        height: 1fr;
    }

    #requests, #response {
        width: 1fr;
        height: 100%;
    }

    #legend {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, application: Application, *, tick_seconds: float = DEFAULT_TICK_SECONDS) -> None:
        super().__init__()
        self.application = application
        self._tick_seconds = tick_seconds

    def compose(self) -> ComposeResult:
        with Horizontal(id="panes"):
            yield Static(id="requests")
            yield Static(id="response")
        yield Static(id="legend")
        yield PopupLayer(id="popup")

    def on_mount(self) -> None:
        self.title = self.application.title
        self.set_interval(self._tick_seconds, self._tick)
        self.redraw()
        logger.info("tui mounted tick=%.3fs", self._tick_seconds)

    def on_unmount(self) -> None:
        logger.info("tui shutting down")
        self.application.dispatcher.stop(timeout=0)

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self.redraw)

    # ─── Input ─────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.application.on_key(event.key, event.character)
        self._sync()

    def action_quit(self) -> None:
        self.application.should_exit = True
        self._sync()

    # ─── Tick ──────────────────────────────────────────────────────────

    def _tick(self) -> None:
        self.application.update()
        self._sync()

    def _sync(self) -> None:
        if self.application.should_exit:
            self.exit()
            return
        self.redraw()

    # ─── Rendering ─────────────────────────────────────────────────────

    def redraw(self) -> None:
        requests = self.query_one("#requests", Static)
        response = self.query_one("#response", Static)
        application = self.application
        requests.update(application.render_requests(requests.size.height, requests.size.width))
        response.update(application.render_response(response.size.height, response.size.width))
        self.query_one("#legend", Static).update(application.render_legend())
        self._draw_popup()

    def _draw_popup(self) -> None:
        layer = self.query_one(PopupLayer)
        popup = self.application.active_popup()
        if popup is None:
            layer.display = False
            return
        region = popup.region(self.size.width, self.size.height)
        layer.styles.offset = (region.x, region.y)
        layer.styles.width = region.width
        layer.styles.height = region.height
        layer.update(popup.render(region.height))
        layer.display = True

    # ─── Errors ────────────────────────────────────────────────────────

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the console running.

        Logs the traceback to the log file and surfaces the error as an Error
        message instead of tearing the terminal down.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        logger.error("unhandled exception in TUI callback\n%s", tb)
        self.application.messages.push(Message.error("{}: {}".format(type(error).__name__, error)))
