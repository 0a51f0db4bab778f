"""Value types for requests, responses and payloads.

// [LAW:one-source-of-truth] The class IS the type: payload kind is the
//   class (TextPayload / BytesPayload), never a string tag.

This module is STABLE. Safe for `from` imports everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass


Headers = tuple[tuple[str, str], ...]


# ─── Request ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HttpRequest:
    """One parsed request definition. Never mutated after parsing."""

    method: str
    url: str
    version: str = "HTTP/1.1"
    headers: Headers = ()
    body: str = ""

    def request_line(self) -> str:
        return "{} {} {}".format(self.method, self.url, self.version)

    def header_dict(self) -> dict[str, str]:
        """Fold duplicate header names into one comma-joined value."""
        folded: dict[str, str] = {}
        for key, value in self.headers:
            folded[key] = "{}, {}".format(folded[key], value) if key in folded else value
        return folded


# ─── Payload ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextPayload:
    charset: str
    text: str

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class BytesPayload:
    data: bytes
    extension: str | None = None

    def to_bytes(self) -> bytes:
        return self.data


Payload = TextPayload | BytesPayload


# ─── Response ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: Headers = ()
    version: str = "HTTP/1.1"
    payload: Payload = TextPayload(charset="utf-8", text="")

    def status_class(self) -> int:
        """Hundreds digit of the status code: 2 for 2xx, 4 for 4xx, ..."""
        return self.status // 100
