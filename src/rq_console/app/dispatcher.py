"""Request dispatcher: the single background worker for network I/O.

Decouples "user asked to send request N" (UI thread) from "network call
completed" (worker thread). The UI drains results with poll() once per tick.

// [LAW:single-enforcer] One worker thread + one in-flight permit is the sole
//   enforcement of "at most one request in flight", globally.
// [LAW:locality-or-seam] Transport is injected as a callable; the
//   dispatcher never imports the network stack.

Lifecycle of the permit:
    submit() acquires → worker executes →
        success: result queued, permit held until poll() drains it
        failure: Error message pushed, permit released, no result
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable

from rq_console.app.message_queue import Message, MessageQueue
from rq_console.core.errors import DispatcherBusyError, RqError
from rq_console.core.model import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

ExecuteFn = Callable[[HttpRequest], HttpResponse]


class RequestDispatcher:
    """Capacity-1 request mailbox serviced by exactly one worker thread."""

    def __init__(
        self,
        execute: ExecuteFn,
        messages: MessageQueue,
        *,
        name: str = "rq-dispatcher",
    ) -> None:
        self._execute = execute
        self._messages = messages
        self._name = name
        self._inbound: queue.Queue[tuple[HttpRequest, int] | None] = queue.Queue(maxsize=1)
        self._results: queue.Queue[tuple[HttpResponse, int]] = queue.Queue(maxsize=1)
        self._in_flight = threading.BoundedSemaphore(1)
        self._idle = threading.Event()
        self._idle.set()
        self._thread: threading.Thread | None = None
        self._closed = False
        self._sentinel_sent = False

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("dispatcher worker started")

    def stop(self, timeout: float = 1.0) -> None:
        """Close the inbound channel and wait up to `timeout` for the worker.

        The worker exits after its current request. `stop(timeout=0)` never
        blocks; a later `stop()` still waits for the worker to finish.
        """
        self._closed = True
        if self._thread is None:
            return
        if not self._sentinel_sent:
            try:
                self._inbound.put(None, timeout=timeout)
            except queue.Full:
                logger.warning("dispatcher inbound channel still full at shutdown")
                return
            self._sentinel_sent = True
        self._thread.join(timeout)
        logger.debug("dispatcher worker stopped alive=%s", self._thread.is_alive())

    @property
    def busy(self) -> bool:
        """True while a submitted request is running or its result is undrained."""
        return not self._idle.is_set()

    # ─── UI side ───────────────────────────────────────────────────────

    def submit(
        self,
        request: HttpRequest,
        index: int,
        *,
        block: bool = False,
        timeout: float | None = None,
    ) -> None:
        """Enqueue `request` for panel `index`.

        Raises:
            DispatcherBusyError: a previous request is still in flight or its
                result has not been drained (after `timeout` when blocking).
        """
        if self._closed:
            raise RuntimeError("dispatcher is stopped")
        acquired = self._in_flight.acquire(blocking=block, timeout=timeout if block else None)
        if not acquired:
            raise DispatcherBusyError()
        self._idle.clear()
        logger.info("submit #%d %s", index, request.request_line())
        # The permit guarantees the mailbox is empty.
        self._inbound.put_nowait((request, index))

    def poll(self) -> tuple[HttpResponse, int] | None:
        """Non-blocking: return the next (response, index) or None."""
        try:
            result = self._results.get_nowait()
        except queue.Empty:
            return None
        self._release()
        return result

    # ─── Worker side ───────────────────────────────────────────────────

    def _release(self) -> None:
        self._idle.set()
        self._in_flight.release()

    def _run(self) -> None:
        while True:
            item = self._inbound.get()
            if item is None:
                break
            request, index = item
            try:
                response = self._execute(request)
            except RqError as e:
                logger.warning("request #%d failed: %s", index, e)
                self._messages.push(Message.error(str(e)))
                self._release()
                continue
            except Exception as e:
                logger.exception("request #%d crashed", index)
                self._messages.push(Message.error("{}: {}".format(type(e).__name__, e)))
                self._release()
                continue
            logger.info("result #%d status=%s", index, response.status)
            self._results.put((response, index))
