"""CLI entry point for rq."""

from __future__ import annotations

import argparse
import functools
import logging
import os
import sys

import rq_console.io.logging_setup
import rq_console.io.settings
from rq_console.app.dispatcher import RequestDispatcher
from rq_console.app.message_queue import MessageQueue
from rq_console.core import http_file
from rq_console.core.errors import ParseError
from rq_console.pipeline import transport
from rq_console.tui.app import RqApp
from rq_console.tui.application import Application

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 rather than argparse's 2."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="rq",
        description="Browse, send and save the requests of an .http file",
    )
    parser.add_argument("file", help="Path to the .http request file")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        requests = http_file.load(args.file)
    except OSError as e:
        print(f"error: cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"error: {args.file} is not valid UTF-8: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        print(f"error: {args.file}: {e}", file=sys.stderr)
        return 1

    runtime = rq_console.io.logging_setup.configure(session_name=os.path.basename(args.file))
    settings = rq_console.io.settings.load_settings()
    logger.info(
        "loaded %d request(s) from %s timeout=%.1fs log=%s",
        len(requests), args.file, settings.timeout, runtime.file_path,
    )

    messages = MessageQueue()
    dispatcher = RequestDispatcher(
        functools.partial(transport.execute, timeout=settings.timeout),
        messages,
    )
    application = Application(requests, dispatcher, messages, title=os.path.basename(args.file))
    app = RqApp(application, tick_seconds=settings.tick_seconds)

    dispatcher.start()
    try:
        app.run()
    finally:
        dispatcher.stop()
        logger.info("rq exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
