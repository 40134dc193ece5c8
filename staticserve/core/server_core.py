"""
Static file server listener.

This module accepts TCP connections and hands each one to its own
``ConnectionHandler`` task:
- The document root is validated once, before binding
- Connections run independently; one slow client never blocks another
- Graceful shutdown stops accepting and drains in-flight connections
"""

"""
Copyright 2026 Chris Bunting
File: server_core.py | Purpose: Listener and graceful shutdown
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-18 - Chris Bunting: Initial implementation
"""

import asyncio
import logging
import signal
import sys
from typing import Optional, Set, Tuple

from .config import ServerConfig
from .errors import ServerConfigError
from .request_handler import ConnectionHandler
from .server_utils import configure_client_socket, get_server_kwargs, run_with_uvloop
from ..features import metrics

logger = logging.getLogger(__name__)


class StaticFileServer:
    """Serves files under ``config.doc_root`` over persistent HTTP/1.1 connections.

    Attributes:
        config: Immutable server configuration
    """
    def __init__(self, config: ServerConfig):
        self.config = config
        self._server: Optional[asyncio.AbstractServer] = None
        self._active_connections: Set[asyncio.Task] = set()
        self._shutdown_event: Optional[asyncio.Event] = None
        self._shutdown_task: Optional[asyncio.Task] = None

    def validate_doc_root(self) -> None:
        """Ensure the document root exists and is a directory.

        Raises:
            ServerConfigError: If the document root is unusable
        """
        doc_root = self.config.doc_root
        if not doc_root.exists():
            raise ServerConfigError(f"Doc root {str(doc_root)!r} does not exist")
        if not doc_root.is_dir():
            raise ServerConfigError(f"Doc root {str(doc_root)!r} is not a directory")

    @property
    def bound_address(self) -> Tuple[str, int]:
        """Address the listener is actually bound to."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("Server is not listening")
        return self._server.sockets[0].getsockname()[:2]

    @property
    def active_connections(self) -> int:
        return len(self._active_connections)

    async def start(self) -> None:
        """Validate the document root and start listening.

        Raises:
            ServerConfigError: If the document root is unusable
            OSError: If the server fails to bind to the configured address
        """
        self.validate_doc_root()
        self._shutdown_event = asyncio.Event()

        self._server = await asyncio.start_server(
            self._handle_client,
            self.config.host,
            self.config.port,
            **get_server_kwargs(),
        )
        host, port = self.bound_address
        logger.info("Serving %s on %s:%s", self.config.doc_root, host, port)

        if self.config.metrics_port:
            metrics.start_metrics_server(self.config.metrics_port)
            logger.info("Metrics exported on port %s", self.config.metrics_port)

    async def serve_forever(self) -> None:
        """Accept connections until ``shutdown`` is called."""
        if self._server is None:
            await self.start()
        await self._shutdown_event.wait()

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Initiate graceful server shutdown.

        Stops accepting new connections and waits for existing connections
        to complete, cancelling any still running after ``timeout`` seconds.
        """
        logger.info("Initiating graceful shutdown...")

        if self._server is not None:
            self._server.close()

        tasks = list(self._active_connections)
        if tasks:
            logger.info("Waiting for %d active connections to complete...", len(tasks))
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            if pending:
                logger.warning("Force closing %d connections that didn't complete in time", len(pending))
                for task in pending:
                    task.cancel()
                await asyncio.wait(pending, timeout=5.0)

        if self._server is not None:
            await self._server.wait_closed()

        if self._shutdown_event is not None:
            self._shutdown_event.set()
        logger.info("Server shutdown complete")

    async def _handle_client(self,
                             reader: asyncio.StreamReader,
                             writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._active_connections.add(task)
        metrics.CONNECTIONS_TOTAL.inc()
        configure_client_socket(writer)

        handler = ConnectionHandler(
            self.config.doc_root,
            reader,
            writer,
            read_timeout=self.config.read_timeout,
        )
        try:
            served = await handler.handle_connection()
            logger.debug("Connection %s closed after %d requests", handler.client, served)
        except Exception:
            logger.exception("Connection handler raised an unexpected exception")
        finally:
            self._active_connections.discard(task)
            if not writer.is_closing():
                writer.close()

    async def _main(self) -> None:
        await self.start()

        if sys.platform != "win32":
            loop = asyncio.get_running_loop()

            def _handle_signal():
                if self._shutdown_task is None:
                    logger.info("Signal received, initiating graceful shutdown")
                    self._shutdown_task = loop.create_task(self.shutdown())

            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, _handle_signal)

        await self.serve_forever()

    def run(self) -> None:
        """Run the server on a uvloop event loop until interrupted."""
        run_with_uvloop(self._main())
