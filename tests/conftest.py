"""Pytest configuration and shared fixtures for rq tests."""

import threading
from pathlib import Path

import pytest

import rq_console.io.logging_setup
from rq_console.app.dispatcher import RequestDispatcher
from rq_console.app.message_queue import MessageQueue
from tests.harness.builders import FakeTransport


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    """Keep log files out of the home directory and reset logger wiring."""
    monkeypatch.setenv("RQ_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("RQ_LOG_FILE", raising=False)
    monkeypatch.delenv("RQ_LOG_STDERR", raising=False)
    yield
    rq_console.io.logging_setup.reset()


@pytest.fixture
def in_tmp_dir(tmp_path, monkeypatch):
    """Run the test with tmp_path as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Core objects
# ---------------------------------------------------------------------------

@pytest.fixture
def messages():
    return MessageQueue()


@pytest.fixture
def gate():
    """Event that holds a FakeTransport call open until set()."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def make_dispatcher(messages):
    """Factory for started dispatchers; every one is stopped at teardown."""
    created = []

    def _make(execute=None):
        dispatcher = RequestDispatcher(execute or FakeTransport(), messages)
        dispatcher.start()
        created.append(dispatcher)
        return dispatcher

    yield _make

    for dispatcher in created:
        dispatcher.stop()


# ---------------------------------------------------------------------------
# Request files
# ---------------------------------------------------------------------------

EXAMPLE_HTTP = """\
# Example requests
GET https://httpbin.org/get HTTP/1.1
Accept: application/json

###

POST https://httpbin.org/post
Content-Type: application/json

{"hello": "world"}

###
// trailing comment
DELETE https://httpbin.org/delete HTTP/1
"""


@pytest.fixture
def example_http_file(tmp_path) -> Path:
    path = tmp_path / "example.http"
    path.write_text(EXAMPLE_HTTP, encoding="utf-8")
    return path
