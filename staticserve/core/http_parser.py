"""
Strict line-based HTTP/1.1 request parser.

This module turns the lines produced by a ``LineReader`` into a validated
``Request``:
- Exactly three space-separated fields on the start line
- Only ``GET`` and ``HTTP/1.1`` are accepted, the target must start with ``/``
- ``Host`` and ``Connection`` are promoted to dedicated fields
- Remaining header keys are checked for forbidden characters and stored in
  canonical form
"""

from dataclasses import dataclass, field
from typing import Tuple

from .errors import (
    InvalidHeaderKey, InvalidHeaderLine, InvalidRequestLine,
    MalformedStartLine, MissingHost,
)
from .headers import HeaderMap
from .line_reader import LineReader

SUPPORTED_METHOD = "GET"
SUPPORTED_PROTO = "HTTP/1.1"

# Characters that may never appear in a generic header key
INVALID_KEY_CHARS = frozenset(" !#$%&'*+@{}[]:;.^_`|~")


@dataclass(frozen=True)
class Request:
    """A complete, validated client request."""
    method: str
    url: str
    proto: str
    host: str
    close: bool = False
    headers: HeaderMap = field(default_factory=HeaderMap)


def parse_start_line(line: str) -> Tuple[str, str, str]:
    """Split and validate the request line.

    Raises:
        MalformedStartLine: If the line does not have exactly three fields
        InvalidRequestLine: If method, version or target is not acceptable
    """
    fields = line.split(" ")
    if len(fields) != 3:
        raise MalformedStartLine(f"Could not parse the request line: {line!r}")

    method, url, proto = fields
    if method != SUPPORTED_METHOD:
        raise InvalidRequestLine(f"Invalid method: {method!r}")
    if proto != SUPPORTED_PROTO:
        raise InvalidRequestLine(f"Invalid protocol version: {proto!r}")
    if not url.startswith("/"):
        raise InvalidRequestLine(f"Invalid URL: {url!r}")
    return method, url, proto


def split_header_line(line: str) -> Tuple[str, str]:
    """Split a generic ``Key: Value`` line on its first colon."""
    key, sep, value = line.partition(":")
    if not sep:
        raise InvalidHeaderLine(f"Could not parse the header line: {line!r}")

    key = key.strip()
    if not key or any(ch in INVALID_KEY_CHARS for ch in key):
        raise InvalidHeaderKey(f"Header key contains invalid characters: {key!r}")
    return key, value.strip()


def _after_first_space(line: str) -> str:
    _, _, rest = line.partition(" ")
    return rest


async def read_request(lines: LineReader) -> Request:
    """Read the next request from ``lines``.

    Transport failures (end of stream, timeouts, resets) propagate from the
    line reader; the caller consults ``lines.bytes_received`` to tell an idle
    connection from an interrupted request.

    Raises:
        RequestError: If the received bytes do not form a valid request
    """
    method, url, proto = parse_start_line(await lines.read_line())

    headers = HeaderMap()
    host = ""
    close = False
    while True:
        line = (await lines.read_line()).strip()
        if not line:
            break

        # Host and Connection drive protocol behaviour, matched on the raw line
        if line.startswith("Host"):
            host = _after_first_space(line)
            continue
        if line.startswith("Connection"):
            close = _after_first_space(line) == "close"
            continue

        key, value = split_header_line(line)
        if key == "Host":
            host = value
        elif key == "Connection":
            close = value == "close"
        else:
            headers[key] = value

    if not host:
        raise MissingHost("Missing Host header")

    return Request(
        method=method,
        url=url,
        proto=proto,
        host=host,
        close=close,
        headers=headers,
    )
