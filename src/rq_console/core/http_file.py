"""Request-definition file parser (.http files).

    GET https://example.com/users HTTP/1.1
    accept: application/json

    POST https://example.com/users
    content-type: application/json

    {"name": "rq"}
    ###
    DELETE https://example.com/users/1

State machine: EXPECT_REQUEST → HEADERS → BODY → (next request line or ###)

A blank line ends the header block. Body text runs until a `###` separator
or the next line that is itself a request line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from rq_console.core.errors import ParseError
from rq_console.core.model import HttpRequest


METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
SEPARATOR = "###"
DEFAULT_VERSION = "HTTP/1.1"

_REQUEST_LINE_RE = re.compile(r"^(?P<method>[A-Z]+)\s+(?P<url>\S+)(?:\s+(?P<version>\S+))?$")
_VERSION_RE = re.compile(r"^(?:HTTP/)?(?P<number>\d(?:\.\d)?)$", re.IGNORECASE)
_HEADER_RE = re.compile(r"^(?P<name>[!#$%&'*+\-.^_`|~0-9A-Za-z]+)\s*:\s*(?P<value>.*)$")


class _Phase(Enum):
    EXPECT_REQUEST = "expect_request"
    HEADERS = "headers"
    BODY = "body"


@dataclass
class _Draft:
    method: str
    url: str
    version: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body_lines: list[str] = field(default_factory=list)

    def build(self) -> HttpRequest:
        lines = list(self.body_lines)
        while lines and not lines[-1].strip():
            lines.pop()
        return HttpRequest(
            method=self.method,
            url=self.url,
            version=self.version,
            headers=tuple(self.headers),
            body="\n".join(lines),
        )


def _normalize_version(raw: str | None) -> str | None:
    if raw is None:
        return DEFAULT_VERSION
    m = _VERSION_RE.match(raw)
    if m is None:
        return None
    return "HTTP/{}".format(m.group("number"))


def _match_request_line(line: str) -> _Draft | None:
    """Return a draft request if `line` is `METHOD URL [VERSION]`, else None."""
    m = _REQUEST_LINE_RE.match(line.strip())
    if m is None or m.group("method") not in METHODS:
        return None
    version = _normalize_version(m.group("version"))
    if version is None:
        return None
    return _Draft(method=m.group("method"), url=m.group("url"), version=version)


def _is_comment(stripped: str) -> bool:
    return stripped.startswith("//") or (
        stripped.startswith("#") and not stripped.startswith(SEPARATOR)
    )


def parse(text: str) -> list[HttpRequest]:
    """Parse the contents of a request file into an ordered request list.

    Raises:
        ParseError: on a line that is neither a request line where one is
            expected nor a well-formed header line.
    """
    requests: list[HttpRequest] = []
    draft: _Draft | None = None
    phase = _Phase.EXPECT_REQUEST

    def flush() -> None:
        nonlocal draft
        if draft is not None:
            requests.append(draft.build())
        draft = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()

        if stripped.startswith(SEPARATOR):
            flush()
            phase = _Phase.EXPECT_REQUEST
            continue

        if phase is _Phase.BODY:
            next_request = _match_request_line(stripped)
            if next_request is not None:
                flush()
                draft = next_request
                phase = _Phase.HEADERS
            else:
                draft.body_lines.append(line)
            continue

        if not stripped:
            if phase is _Phase.HEADERS:
                phase = _Phase.BODY
            continue

        if _is_comment(stripped):
            continue

        next_request = _match_request_line(stripped)
        if next_request is not None:
            flush()
            draft = next_request
            phase = _Phase.HEADERS
            continue

        if phase is _Phase.EXPECT_REQUEST:
            raise ParseError(
                "expected a request line 'METHOD URL [HTTP/x.y]', got {!r}".format(stripped),
                lineno,
            )

        header = _HEADER_RE.match(stripped)
        if header is None:
            raise ParseError("malformed header line {!r}".format(stripped), lineno)
        draft.headers.append((header.group("name"), header.group("value").strip()))

    flush()
    return requests


def load(path: str) -> list[HttpRequest]:
    """Read and parse a request file. OSError propagates to the caller."""
    with open(path, "r", encoding="utf-8") as f:
        return parse(f.read())
