"""
Exception hierarchy for the static file server.

Errors fall into three groups:
- Transport errors raised while reading lines off a connection
- Request errors: the bytes arrived but do not form a valid request
- Response errors raised while writing a response back to the client
"""


class StaticServerError(Exception):
    """Base class for all server errors."""
    pass


class ServerConfigError(StaticServerError):
    """Custom exception for server configuration errors"""
    pass


class EndOfStream(StaticServerError, EOFError):
    """The peer closed the stream with no partial line buffered."""
    pass


class IncompleteLine(StaticServerError):
    """The stream ended before a CRLF terminated the current line."""

    def __init__(self, partial: bytes):
        super().__init__(f"Stream ended mid-line after {len(partial)} bytes")
        self.partial = partial


class RequestError(StaticServerError):
    """Base class for malformed or invalid requests.

    A request error is only raised once at least one line was read, so
    bytes were always received.
    """
    bytes_received = True


class LineTooLong(RequestError):
    """A line exceeded the reader's limit without a CRLF."""
    pass


class MalformedStartLine(RequestError):
    pass


class InvalidRequestLine(RequestError):
    pass


class InvalidHeaderLine(RequestError):
    pass


class InvalidHeaderKey(RequestError):
    pass


class MissingHost(RequestError):
    pass


class ResponseWriteError(StaticServerError):
    """Writing a response to the client failed."""
    pass


class BodyReadError(ResponseWriteError):
    """The file backing a 200 response could not be read."""
    pass
