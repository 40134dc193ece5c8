from .core import (
    ServerConfig, StaticFileServer, ConnectionHandler, HeaderMap, Request, Response
)
from .core.errors import ServerConfigError, StaticServerError

__version__ = '1.0.0'

__all__ = [
    # Server
    'StaticFileServer',
    'ServerConfig',

    # Protocol engine
    'ConnectionHandler',
    'HeaderMap',
    'Request',
    'Response',

    # Errors
    'StaticServerError',
    'ServerConfigError',
]
