"""Focus router tests against the pure Application (no Textual).

A real dispatcher worker runs against a FakeTransport; update() is called
in a loop to stand in for the UI tick.
"""

import time

import pytest

from rq_console.app.message_queue import Message, MessageKind
from rq_console.core.errors import TransportError
from rq_console.tui.application import Application
from rq_console.tui.input_modes import FocusState, InputMode
from rq_console.tui.response_panel import SaveMode, SavePhase
from tests.harness import (
    FakeTransport,
    legend_text,
    make_request,
    make_response,
    popup_text,
    requests_text,
    response_text,
)


def _tick_until(app, predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.update()
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _press(app, *keys):
    for key in keys:
        app.on_key(key, key if len(key) == 1 else None)


def _type(app, text):
    for ch in text:
        app.on_key(ch, ch)


THREE = [
    make_request(url="http://x/0"),
    make_request(method="POST", url="http://x/1", body="{}"),
    make_request(url="http://x/2"),
]


@pytest.fixture
def build(make_dispatcher, messages):
    def _build(requests=THREE, execute=None):
        return Application(requests, make_dispatcher(execute), messages, title="t.http")
    return _build


class TestFocus:
    def test_starts_on_request_list(self, build):
        app = build()
        assert app.focus is FocusState.REQUESTS_LIST
        assert app.input_mode() is InputMode.REQUESTS_LIST

    def test_enter_then_escape_round_trip(self, build):
        app = build()
        _press(app, "enter")
        assert app.focus is FocusState.RESPONSE_BUFFER
        _press(app, "escape")
        assert app.focus is FocusState.REQUESTS_LIST

    def test_escape_on_list_is_a_no_op(self, build):
        app = build()
        _press(app, "escape")
        assert app.focus is FocusState.REQUESTS_LIST
        assert app.should_exit is False

    def test_j_k_move_selection_only_when_list_focused(self, build):
        app = build()
        _press(app, "j", "j")
        assert app.request_list.selected_index() == 2
        _press(app, "j")
        assert app.request_list.selected_index() == 0
        _press(app, "k")
        assert app.request_list.selected_index() == 2

        _press(app, "enter", "j")
        assert app.request_list.selected_index() == 2
        assert app.selected_panel().scroll == 1


class TestQuit:
    @pytest.mark.parametrize("key", ["q", "Q", "ctrl+c"])
    def test_quit_keys_from_list(self, build, key):
        app = build()
        _press(app, key)
        assert app.should_exit is True

    @pytest.mark.parametrize("key", ["q", "Q", "ctrl+c"])
    def test_quit_keys_from_response(self, build, key):
        app = build()
        _press(app, "enter", key)
        assert app.should_exit is True

    def test_quit_from_save_menu(self, build):
        app = build()
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)
        _press(app, "s", "Q")
        assert app.should_exit is True

    def test_q_is_typed_into_path_input_but_ctrl_c_quits(self, build):
        app = build()
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)
        _press(app, "s", "enter", "q", "Q")
        assert app.should_exit is False
        assert app.selected_panel().path_input.value == "qQ"
        _press(app, "ctrl+c")
        assert app.should_exit is True


class TestSend:
    def test_example_scenario_get_ok(self, build):
        app = build([make_request(url="http://x")], FakeTransport(default=make_response(text="ok")))

        _press(app, "enter", "enter")

        assert _tick_until(app, lambda: app.selected_panel().content is not None)
        assert app.focus is FocusState.RESPONSE_BUFFER
        assert [line.plain for line in app.selected_panel().lines()] == ["HTTP/1.1 200", "", "ok"]
        assert len(app.messages) == 0

    def test_response_lands_on_originating_panel(self, build):
        fake = FakeTransport({
            "http://x/0": make_response(text="zero"),
            "http://x/2": make_response(text="two"),
        })
        app = build(execute=fake)

        _press(app, "j", "j", "enter", "enter")
        assert _tick_until(app, lambda: app.responses[2].content is not None)
        assert app.responses[0].content is None
        assert app.responses[2].content.payload.text == "two"

    def test_response_replaces_content_and_resets_scroll(self, build):
        fake = FakeTransport(default=make_response(text="first"))
        app = build([make_request()], fake)
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)

        _press(app, "j", "j")
        assert app.selected_panel().scroll == 2
        fake.default = make_response(text="second")
        _press(app, "enter")
        assert _tick_until(app, lambda: app.selected_panel().content.payload.text == "second")
        assert app.selected_panel().scroll == 0

    def test_send_while_in_flight_reports_busy(self, build, gate):
        fake = FakeTransport(gate=gate)
        app = build(execute=fake)

        _press(app, "enter", "enter")
        assert fake.started.wait(2.0)
        _press(app, "enter")

        app.update()
        assert app.message_dialog.content == Message.error("A request is already in flight")
        gate.set()
        assert _tick_until(app, lambda: app.responses[0].content is not None)
        assert len(fake.calls) == 1

    def test_ui_keeps_routing_while_request_in_flight(self, build, gate):
        fake = FakeTransport(gate=gate)
        app = build(execute=fake)

        _press(app, "enter", "enter")
        assert fake.started.wait(2.0)
        _press(app, "escape", "j")
        assert app.request_list.selected_index() == 1

        gate.set()
        assert _tick_until(app, lambda: app.responses[0].content is not None)
        assert app.responses[1].content is None

    def test_transport_failure_leaves_panel_unchanged(self, build):
        fake = FakeTransport({"http://x/0": TransportError("GET http://x/0: connection refused")})
        app = build(execute=fake)

        _press(app, "enter", "enter")

        assert _tick_until(app, lambda: app.message_dialog.active)
        assert app.message_dialog.content.kind is MessageKind.ERROR
        assert "connection refused" in app.message_dialog.content.text
        assert app.responses[0].content is None


class TestMessages:
    def test_message_popup_swallows_next_key(self, build, messages):
        app = build()
        messages.push(Message.info("hello"))
        app.update()
        assert app.input_mode() is InputMode.MESSAGE
        assert "hello" in popup_text(app)

        _press(app, "j")
        assert app.message_dialog.active is False
        assert app.request_list.selected_index() == 0

    def test_quit_beats_message_popup(self, build, messages):
        app = build()
        messages.push(Message.info("hello"))
        app.update()
        _press(app, "q")
        assert app.should_exit is True

    def test_one_message_per_dismissal(self, build, messages):
        app = build()
        messages.push(Message.info("a"))
        messages.push(Message.info("b"))
        app.update()
        app.update()
        assert app.message_dialog.content.text == "a"
        _press(app, "x")
        app.update()
        assert app.message_dialog.content.text == "b"

    def test_save_on_empty_panel_becomes_error_message(self, build):
        app = build()
        _press(app, "enter", "s")
        app.update()
        assert app.message_dialog.content == Message.error("Request not sent")
        assert app.selected_panel().phase is SavePhase.VIEWING


class TestSaveFlow:
    def test_save_body_end_to_end(self, build, in_tmp_dir):
        app = build([make_request()], FakeTransport(default=make_response(text="ok")))
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)

        _press(app, "s")
        assert app.input_mode() is InputMode.SAVE_MENU
        _press(app, "enter")
        assert app.input_mode() is InputMode.PATH_INPUT
        _type(app, "out.txt")
        _press(app, "enter")

        assert (in_tmp_dir / "out.txt").read_bytes() == b"ok"
        app.update()
        assert app.message_dialog.content == Message.info("Saved to out.txt")
        assert app.focus is FocusState.RESPONSE_BUFFER

    def test_popup_is_modal_enter_does_not_send(self, build):
        fake = FakeTransport(default=make_response(text="ok"))
        app = build([make_request()], fake)
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)

        _press(app, "S")
        assert app.selected_panel().active_popup().component.selected() is SaveMode.ENTIRE
        _press(app, "enter")
        assert len(fake.calls) == 1
        _press(app, "escape")
        assert app.focus is FocusState.RESPONSE_BUFFER
        assert app.selected_panel().phase is SavePhase.VIEWING

    def test_empty_filename_shows_error_and_keeps_input(self, build):
        app = build([make_request()])
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)

        _press(app, "s", "enter", "enter")
        app.update()
        assert app.message_dialog.content == Message.error("File name cannot be empty")
        _press(app, "x")  # dismiss
        assert app.selected_panel().phase is SavePhase.ENTERING_PATH
        assert app.selected_panel().path_input.value == ""


class TestRendering:
    def test_requests_pane_lists_every_request(self, build):
        app = build()
        text = requests_text(app, height=30)
        assert "> GET http://x/0 HTTP/1.1" in text
        assert "POST http://x/1 HTTP/1.1" in text
        assert "t.http" in text

    def test_response_pane_placeholder_before_send(self, build):
        assert "<Empty>" in response_text(build())

    def test_empty_request_file_still_runs(self, build):
        app = build([])
        assert "No requests found" in requests_text(app)
        _press(app, "j", "enter", "s")
        app.update()
        assert app.focus is FocusState.REQUESTS_LIST
        assert app.should_exit is False
        assert not app.message_dialog.active

    @pytest.mark.parametrize("keys, expected", [
        ([], "enter open"),
        (["enter"], "esc back"),
    ])
    def test_legend_follows_focus(self, build, keys, expected):
        app = build()
        _press(app, *keys)
        assert expected in legend_text(app)

    def test_long_single_line_body_scrolls_in_pane(self, build):
        body = "".join("{:04d}".format(i) for i in range(600))
        app = build([make_request()], FakeTransport(default=make_response(text=body)))
        _press(app, "enter", "enter")
        assert _tick_until(app, lambda: app.selected_panel().content is not None)

        assert "1-10/62" in response_text(app, height=12, width=44)
        _press(app, *["j"] * 5)
        text = response_text(app, height=12, width=44)
        assert "6-15/62" in text
        assert body[120:160] in text
        assert body[:40] not in text
