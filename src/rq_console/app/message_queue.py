"""Shared FIFO of user-facing notifications.

Written from the UI thread (save flow, routing errors) and from the
dispatcher worker (transport failures). Read by the UI tick, one message at
a time.

// [LAW:no-shared-mutable-globals] Constructed once by the CLI and passed
//   explicitly to every writer; there is no module-level queue.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum


class MessageKind(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    text: str

    @classmethod
    def info(cls, text: str) -> "Message":
        return cls(MessageKind.INFO, text)

    @classmethod
    def error(cls, text: str) -> "Message":
        return cls(MessageKind.ERROR, text)


class MessageQueue:
    """Thread-safe, insertion-ordered message queue."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: deque[Message] = deque()

    def push(self, message: Message) -> None:
        with self._lock:
            self._items.append(message)

    def pop(self) -> Message | None:
        """Remove and return the oldest message, or None when empty."""
        with self._lock:
            return self._items.popleft() if self._items else None

    def snapshot(self) -> list[Message]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
