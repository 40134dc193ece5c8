"""
CRLF line reader over an asyncio stream.

The reader keeps its own buffer so that bytes following a line (for example
the next pipelined request) are retained between calls, and so that partial
data survives a cancelled read when the connection's read timeout fires.
"""

import asyncio

from .errors import EndOfStream, IncompleteLine, LineTooLong

CRLF = b"\r\n"


class LineReader:
    """Reads CRLF-terminated lines from an ``asyncio.StreamReader``.

    Constants:
        MAX_LINE: Maximum line length accepted without a CRLF (8KB)
        CHUNK_SIZE: Upper bound for a single read from the stream
    """
    MAX_LINE = 8192
    CHUNK_SIZE = 4096

    def __init__(self, stream: asyncio.StreamReader, max_line: int = MAX_LINE):
        self._stream = stream
        self._buffer = bytearray()
        self._received = False
        self.max_line = max_line

    def begin_message(self) -> None:
        """Start tracking a new request.

        Bytes still buffered from the previous cycle belong to the new
        request and count as received.
        """
        self._received = bool(self._buffer)

    @property
    def bytes_received(self) -> bool:
        """Whether any byte of the current request has arrived."""
        return self._received

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    async def read_line(self) -> str:
        """Return the next line without its CRLF.

        Raises:
            EndOfStream: The stream ended with nothing buffered
            IncompleteLine: The stream ended in the middle of a line
            LineTooLong: No CRLF within ``max_line`` bytes

        Any other error raised by the stream, including cancellation by a
        timeout, propagates unchanged.
        """
        search_from = 0
        while True:
            end = self._buffer.find(CRLF, search_from)
            if end >= 0:
                line = bytes(self._buffer[:end])
                del self._buffer[:end + len(CRLF)]
                return line.decode("latin-1")

            if len(self._buffer) > self.max_line:
                raise LineTooLong(f"Line exceeds {self.max_line} bytes")

            # A CR at the very end may pair with an LF in the next chunk
            search_from = max(len(self._buffer) - 1, 0)

            chunk = await self._stream.read(self.CHUNK_SIZE)
            if not chunk:
                if self._buffer:
                    partial = bytes(self._buffer)
                    self._buffer.clear()
                    raise IncompleteLine(partial)
                raise EndOfStream("Connection closed by peer")

            self._buffer += chunk
            self._received = True
