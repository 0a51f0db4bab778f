"""HTTP transport: executes one HttpRequest and decodes the payload.

Called only from the dispatcher worker thread. Blocking; the UI
never calls execute() directly.

// [LAW:single-enforcer] decode_payload is the sole text-vs-bytes decision.
"""

from __future__ import annotations

import codecs
import logging
import mimetypes
import ssl
import urllib.error
import urllib.request
from email.message import Message as _MimeHeader

import truststore

from rq_console.core.errors import TransportError
from rq_console.core.model import BytesPayload, HttpRequest, HttpResponse, Payload, TextPayload

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_CHARSET = "utf-8"

# Request headers override these (case-insensitive).
DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (("Accept", "application/json"),)
DEFAULT_BODY_HEADERS: tuple[tuple[str, str], ...] = (("Content-Type", "application/json"),)

_TEXTUAL_APPLICATION_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-www-form-urlencoded",
})

_HTTP_VERSIONS = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1"}


def _parse_content_type(content_type: str | None) -> tuple[str, dict[str, str]]:
    if not content_type:
        return "", {}
    header = _MimeHeader()
    header["content-type"] = content_type
    params = {k.lower(): v for k, v in header.get_params()[1:]}
    return header.get_content_type().lower(), params


def _is_textual(mime_type: str) -> bool:
    if mime_type.startswith("text/"):
        return True
    if mime_type in _TEXTUAL_APPLICATION_TYPES:
        return True
    return mime_type.endswith("+json") or mime_type.endswith("+xml")


def _resolve_charset(label: str | None) -> str:
    try:
        return codecs.lookup(label or DEFAULT_CHARSET).name
    except LookupError:
        return codecs.lookup(DEFAULT_CHARSET).name


def decode_payload(content_type: str | None, data: bytes) -> Payload:
    """Decide text vs bytes from the Content-Type header and decode text.

    Without a Content-Type the body is opaque bytes.
    """
    mime_type, params = _parse_content_type(content_type)
    if not mime_type or not _is_textual(mime_type):
        extension = mimetypes.guess_extension(mime_type) if mime_type else None
        return BytesPayload(data=data, extension=extension)
    charset = _resolve_charset(params.get("charset"))
    return TextPayload(charset=charset, text=data.decode(charset, errors="replace"))


def _build_headers(request: HttpRequest) -> dict[str, str]:
    defaults = DEFAULT_HEADERS + (DEFAULT_BODY_HEADERS if request.body else ())
    supplied = request.header_dict()
    supplied_lower = {k.lower() for k in supplied}
    headers = {k: v for k, v in defaults if k.lower() not in supplied_lower}
    headers.update(supplied)
    return headers


def _ssl_context() -> ssl.SSLContext:
    return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)


def _to_response(resp) -> HttpResponse:
    data = resp.read()
    headers = tuple((k, v) for k, v in resp.headers.items())
    # HTTPError forwards attribute lookups to the HTTPResponse it wraps.
    version = _HTTP_VERSIONS.get(getattr(resp, "version", 11), "HTTP/1.1")
    return HttpResponse(
        status=int(resp.status),
        headers=headers,
        version=version,
        payload=decode_payload(resp.headers.get("content-type"), data),
    )


def execute(request: HttpRequest, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> HttpResponse:
    """Send `request` and return the response, including non-2xx statuses.

    Raises:
        TransportError: invalid URL, connection failure, TLS failure, timeout.
    """
    body = request.body.encode("utf-8") if request.body else None
    try:
        req = urllib.request.Request(
            request.url,
            data=body,
            headers=_build_headers(request),
            method=request.method,
        )
    except ValueError as e:
        raise TransportError("Invalid URL {!r}: {}".format(request.url, e)) from e

    logger.info("sending %s %s", request.method, request.url)
    try:
        with urllib.request.urlopen(req, context=_ssl_context(), timeout=timeout) as resp:
            response = _to_response(resp)
    except urllib.error.HTTPError as e:
        # Non-2xx is still a response worth showing.
        with e:
            response = _to_response(e)
    except urllib.error.URLError as e:
        raise TransportError("{} {}: {}".format(request.method, request.url, e.reason)) from e
    except (OSError, ValueError) as e:
        raise TransportError("{} {}: {}".format(request.method, request.url, e)) from e

    logger.info("received %s for %s %s", response.status, request.method, request.url)
    return response
