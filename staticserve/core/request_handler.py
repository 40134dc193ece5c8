"""
Per-connection request handling for persistent HTTP/1.1 connections.

This module implements the connection lifecycle state machine:
- A fresh read timeout is armed before every request
- Idle connections (timeout or peer close before any byte) close silently
- Interrupted or invalid requests get a 400 and the connection closes
- Valid requests are resolved against the document root and answered
  with a 200 or 404; the connection stays open unless the client asked
  to close it
"""

"""
Copyright 2026 Chris Bunting
File: request_handler.py | Purpose: Persistent connection state machine
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-18 - Chris Bunting: Initial implementation
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import EndOfStream, IncompleteLine, RequestError, ResponseWriteError
from .http_parser import Request, read_request
from .line_reader import LineReader
from .resolver import resolve
from .response import (
    Response, bad_request_response, not_found_response, ok_response, write_response,
)
from ..features import metrics

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    AWAITING_REQUEST = "awaiting_request"
    RESPONDING = "responding"
    CLOSING = "closing"


class ConnectionHandler:
    """Drives a single client connection until it closes.

    Constants:
        READ_TIMEOUT: Seconds to wait for each complete request (5s)
    """
    READ_TIMEOUT = 5.0

    def __init__(
        self,
        doc_root: Union[str, Path],
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        read_timeout: float = READ_TIMEOUT,
    ):
        self.doc_root = Path(doc_root)
        self.writer = writer
        self.read_timeout = read_timeout
        self.lines = LineReader(reader)
        self.state = ConnectionState.AWAITING_REQUEST
        self.requests_handled = 0

        peer = writer.get_extra_info("peername")
        self.client = f"{peer[0]}:{peer[1]}" if peer else "unknown"

    async def handle_connection(self) -> int:
        """Serve requests until the connection reaches ``CLOSING``.

        Returns:
            Number of requests answered with a 200 or 404
        """
        metrics.CONNECTIONS_ACTIVE.inc()
        logger.debug("Connection opened from %s", self.client)
        try:
            while self.state is not ConnectionState.CLOSING:
                request = await self._await_request()
                if request is not None:
                    await self._handle_request(request)
        except ConnectionError as e:
            logger.debug("Connection to %s lost: %s", self.client, e)
        except ResponseWriteError as e:
            logger.warning("Aborting connection to %s: %s", self.client, e)
        finally:
            self.state = ConnectionState.CLOSING
            await self._close()
            metrics.CONNECTIONS_ACTIVE.dec()
        return self.requests_handled

    async def _await_request(self) -> Optional[Request]:
        """Read the next request under a fresh timeout.

        Returns ``None`` after moving to ``CLOSING`` when no valid request
        could be read; a 400 has been written if bytes were received.
        """
        self.lines.begin_message()
        try:
            return await asyncio.wait_for(read_request(self.lines), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            partial = self.lines.bytes_received
            metrics.record_timeout(partial)
            logger.info("Read timeout on %s (partial request: %s)", self.client, partial)
            if partial:
                await self._respond(bad_request_response())
        except (EndOfStream, IncompleteLine):
            if self.lines.bytes_received:
                logger.info("Connection from %s closed mid-request", self.client)
                await self._respond(bad_request_response())
            else:
                logger.debug("Connection closed by client %s", self.client)
        except RequestError as e:
            logger.info("Bad request from %s: %s", self.client, e)
            await self._respond(bad_request_response())

        self.state = ConnectionState.CLOSING
        return None

    async def _handle_request(self, request: Request) -> None:
        self.state = ConnectionState.RESPONDING

        resolution = resolve(self.doc_root, request.url)
        if resolution.found:
            response = ok_response(request, resolution)
        else:
            response = not_found_response(request)

        await self._respond(response)
        self.requests_handled += 1

        if request.close:
            self.state = ConnectionState.CLOSING
        else:
            self.state = ConnectionState.AWAITING_REQUEST

    async def _respond(self, response: Response) -> None:
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        length = await write_response(self.writer, response)

        duration = loop.time() - start_time
        metrics.record_response(response.status_code, duration)

        request = response.request
        payload = {
            "method": request.method if request else "-",
            "path": request.url if request else "-",
            "status": response.status_code,
            "length": length,
            "duration_s": round(duration, 6),
            "client": self.client,
        }
        logger.info(
            "%s %s %s", payload["method"], payload["path"], payload["status"],
            extra=payload,
        )

    async def _close(self) -> None:
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            logger.debug("Error closing connection to %s", self.client, exc_info=True)
