"""
Command-line entry point for the static file server.
"""

import argparse
import logging
import sys

from .core.config import DEFAULT_ADDR, DEFAULT_READ_TIMEOUT, ServerConfig
from .core.errors import ServerConfigError
from .core.server_core import StaticFileServer
from .core.server_utils import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserve",
        description="Serve static files over persistent HTTP/1.1 connections",
    )
    parser.add_argument(
        "--addr",
        default=DEFAULT_ADDR,
        help=f"Listen address as host:port (default: {DEFAULT_ADDR})",
    )
    parser.add_argument(
        "--doc-root",
        required=True,
        help="Directory to serve files from",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=DEFAULT_READ_TIMEOUT,
        help=f"Seconds to wait for each request (default: {DEFAULT_READ_TIMEOUT})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON log records",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(
        level=getattr(logging, args.log_level),
        json_format=args.json_logs,
        log_file=args.log_file,
    )

    try:
        config = ServerConfig(
            addr=args.addr,
            doc_root=args.doc_root,
            read_timeout=args.read_timeout,
            metrics_port=args.metrics_port,
        )
        server = StaticFileServer(config)
        server.validate_doc_root()
    except ServerConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except OSError as e:
        logger.error("Server error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
