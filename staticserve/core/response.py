"""
Response construction and serialization.

This module provides:
- The immutable status-code and MIME-type tables
- Constructors for the three outcomes the server produces (200, 404, 400)
- A writer that serializes a response in three flushed phases: status
  line, sorted headers, raw file body
"""

"""
Copyright 2026 Chris Bunting
File: response.py | Purpose: Response tables, builders and writer
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-18 - Chris Bunting: Initial implementation
"""

import asyncio
import time
from dataclasses import dataclass, field
from email.utils import formatdate
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from .errors import BodyReadError
from .headers import HeaderMap
from .http_parser import Request, SUPPORTED_PROTO
from .resolver import Resolution

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404

STATUS_TEXT = MappingProxyType({
    STATUS_OK: "OK",
    STATUS_BAD_REQUEST: "Bad Request",
    STATUS_NOT_FOUND: "Not Found",
})

DEFAULT_CONTENT_TYPE = "application/octet-stream"

MIME_TYPES = MappingProxyType({
    ".avif": "image/avif",
    ".css": "text/css; charset=utf-8",
    ".csv": "text/csv; charset=utf-8",
    ".gif": "image/gif",
    ".htm": "text/html; charset=utf-8",
    ".html": "text/html; charset=utf-8",
    ".ico": "image/x-icon",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".js": "text/javascript; charset=utf-8",
    ".json": "application/json",
    ".mjs": "text/javascript; charset=utf-8",
    ".mp4": "video/mp4",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".txt": "text/plain; charset=utf-8",
    ".wasm": "application/wasm",
    ".webp": "image/webp",
    ".woff2": "font/woff2",
    ".xml": "text/xml; charset=utf-8",
    ".zip": "application/zip",
})


def format_http_time(timestamp: Optional[float] = None) -> str:
    """Format a POSIX timestamp as an HTTP date (``Mon, 02 Jan 2006 15:04:05 GMT``)."""
    if timestamp is None:
        timestamp = time.time()
    return formatdate(timestamp, usegmt=True)


def mime_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


@dataclass
class Response:
    status_code: int
    headers: HeaderMap = field(default_factory=HeaderMap)
    file_path: Optional[Path] = None
    request: Optional[Request] = None
    proto: str = SUPPORTED_PROTO

    @property
    def reason(self) -> str:
        return STATUS_TEXT[self.status_code]


def ok_response(request: Request, resolution: Resolution) -> Response:
    """Build a 200 response serving the resolved file."""
    st = resolution.stat
    headers = HeaderMap({
        "Date": format_http_time(),
        "Last-Modified": format_http_time(st.st_mtime),
        "Content-Type": mime_type_for(resolution.path),
        "Content-Length": str(st.st_size),
    })
    if request.close:
        headers["Connection"] = "close"
    return Response(STATUS_OK, headers, resolution.path, request)


def not_found_response(request: Request) -> Response:
    headers = HeaderMap({"Date": format_http_time()})
    if request.close:
        headers["Connection"] = "close"
    return Response(STATUS_NOT_FOUND, headers, None, request)


def bad_request_response() -> Response:
    """Build a 400 response.

    The connection is always closed afterwards: once framing is in doubt
    nothing else on the stream can be trusted.
    """
    headers = HeaderMap({
        "Connection": "close",
        "Date": format_http_time(),
    })
    return Response(STATUS_BAD_REQUEST, headers)


def serialize_status_line(response: Response) -> bytes:
    return f"{response.proto} {response.status_code} {response.reason}\r\n".encode("latin-1")


def serialize_headers(headers: HeaderMap) -> bytes:
    """Serialize headers in sorted key order followed by the blank line."""
    lines = [f"{key}: {value}\r\n" for key, value in headers.items()]
    lines.append("\r\n")
    return "".join(lines).encode("latin-1")


async def read_body(path: Path) -> bytes:
    """Read a file's bytes without blocking the event loop."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, path.read_bytes)
    except OSError as e:
        raise BodyReadError(f"Failed to read {path}: {e}") from e


async def write_response(writer: asyncio.StreamWriter, response: Response) -> int:
    """Write ``response`` to ``writer``.

    Status line, headers and body are each written and drained in turn; a
    failure in any phase aborts the rest and propagates.

    Returns:
        Number of body bytes written
    """
    writer.write(serialize_status_line(response))
    await writer.drain()

    writer.write(serialize_headers(response.headers))
    await writer.drain()

    if response.file_path is None:
        return 0

    body = await read_body(response.file_path)
    writer.write(body)
    await writer.drain()
    return len(body)
