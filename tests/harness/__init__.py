"""Textual in-process test harness for rq.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, render_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    resize_and_settle,
    wait_until,
)
from tests.harness.content import (
    render_text,
    requests_text,
    response_text,
    popup_text,
    legend_text,
)
from tests.harness.builders import (
    FakeTransport,
    make_request,
    make_response,
    make_bytes_response,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "wait_until",
    "render_text",
    "requests_text",
    "response_text",
    "popup_text",
    "legend_text",
    "FakeTransport",
    "make_request",
    "make_response",
    "make_bytes_response",
]
