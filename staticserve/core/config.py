"""
Immutable server configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from .errors import ServerConfigError

DEFAULT_ADDR = ":8080"
DEFAULT_READ_TIMEOUT = 5.0


def parse_addr(addr: str) -> Tuple[str, int]:
    """Split a ``host:port`` listen address.

    An empty host means all interfaces; IPv6 hosts may be bracketed.

    Raises:
        ServerConfigError: If the port is missing, not an integer or out of range
    """
    host, sep, port_str = addr.rpartition(":")
    if not sep:
        raise ServerConfigError(f"Listen address {addr!r} must be in the form host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ServerConfigError(f"Port must be an integer, got {port_str!r}")
    if port < 0 or port > 65535:
        raise ServerConfigError("Port number must be between 0 and 65535")
    return host, port


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide settings, fixed at construction.

    Attributes:
        addr: Listen address as ``host:port``
        doc_root: Directory static files are served from
        read_timeout: Seconds to wait for each request on a connection
        metrics_port: Port for the Prometheus exporter, disabled when None
    """
    addr: str = DEFAULT_ADDR
    doc_root: Union[str, Path] = "."
    read_timeout: float = DEFAULT_READ_TIMEOUT
    metrics_port: Optional[int] = None

    def __post_init__(self):
        parse_addr(self.addr)
        if self.read_timeout <= 0:
            raise ServerConfigError("Read timeout must be positive")
        if self.metrics_port is not None and not 0 < self.metrics_port <= 65535:
            raise ServerConfigError("Metrics port must be between 1 and 65535")
        object.__setattr__(self, "doc_root", Path(self.doc_root))

    @property
    def host(self) -> Optional[str]:
        """Bind host, ``None`` for all interfaces."""
        host, _ = parse_addr(self.addr)
        return host or None

    @property
    def port(self) -> int:
        return parse_addr(self.addr)[1]
