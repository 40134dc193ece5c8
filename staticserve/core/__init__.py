"""
Core server components
"""

from .config import ServerConfig
from .headers import HeaderMap, canonical_header_key
from .http_parser import Request, read_request
from .line_reader import LineReader
from .request_handler import ConnectionHandler, ConnectionState
from .resolver import Resolution, resolve
from .response import (
    Response, bad_request_response, not_found_response, ok_response, write_response,
)
from .server_core import StaticFileServer

# Expose public interface
__all__ = [
    "ServerConfig",
    "HeaderMap",
    "canonical_header_key",
    "Request",
    "read_request",
    "LineReader",
    "ConnectionHandler",
    "ConnectionState",
    "Resolution",
    "resolve",
    "Response",
    "bad_request_response",
    "not_found_response",
    "ok_response",
    "write_response",
    "StaticFileServer",
]
