"""
Utility functions for server configuration and operation.

This module provides core functionality for:
- Logging setup with plain or JSON (python-json-logger) output
- Event loop setup with uvloop
- Listener kwargs and per-connection socket tuning

The utilities in this module focus on performance optimization
and proper error handling for production environments.
"""

import asyncio
import logging
import socket
import sys
from typing import Any, Awaitable, Dict, Optional, TypeVar

import uvloop
from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "staticserve"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

T = TypeVar("T")

logger = logging.getLogger(__name__)


def configure_logging(level=logging.INFO, json_format: bool = False,
                      log_file: Optional[str] = None) -> logging.Logger:
    """Configure logging for the server.

    Args:
        level: Logging level (default: INFO)
        json_format: Emit one JSON object per record instead of plain text
        log_file: Optional path to log file

    Returns:
        Configured logger instance
    """
    server_logger = logging.getLogger(LOGGER_NAME)
    server_logger.setLevel(level)

    if json_format:
        formatter = JsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # Replace handlers from a previous call
    for handler in list(server_logger.handlers):
        server_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    server_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        server_logger.addHandler(file_handler)

    server_logger.propagate = False
    return server_logger


def run_with_uvloop(main: Awaitable[T]) -> T:
    """Run ``main`` to completion on a uvloop event loop."""
    logger.debug("Using uvloop event loop")
    return uvloop.run(main)


def get_server_kwargs() -> Dict[str, Any]:
    """Get ``asyncio.start_server`` kwargs for the listener."""
    return {
        "reuse_address": True,
        "backlog": 2048,
        "start_serving": True,
    }


def configure_client_socket(writer: asyncio.StreamWriter) -> None:
    """Disable Nagle on an accepted connection so small responses go out at once."""
    sock = writer.get_extra_info("socket")
    if sock is None:
        return
    try:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    except OSError as e:
        logger.warning(f"Failed to set TCP_NODELAY: {e}")
