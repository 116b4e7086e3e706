"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One immutable ServerConfig is created at startup and shared by every
request task. Because it is frozen, concurrent handlers read it without
any locking.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │   1. Command-line arguments      basic-http-server ./site -a ... -x │
    │   2. Environment variables       HTTP_ADDR=0.0.0.0:8000 ...         │
    │   3. Defaults                    127.0.0.1:4000, root ".", no -x    │
    └─────────────────────────────────────────────────────────────────────┘

Everything is validated eagerly. A bad listen address or a missing root
directory raises ConfigError before any socket is bound.

=============================================================================
"""

import ipaddress
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .errors import ConfigError


DEFAULT_ADDR = "127.0.0.1:4000"
DEFAULT_ROOT = "."
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
ACCESS_LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the server.

    NETWORK
    - host, port: where to listen (an IP literal, not a hostname)
    - keep_alive_timeout: idle seconds before a kept-alive connection closes

    CONTENT
    - root_dir: document root, every served path lives under it
    - use_extensions: enable the development extensions hook (-x)

    LIMITS / IDENTITY / LOGGING
    - max_request_size, server_name, log_level
    - access_log_format: "text" (Apache-like) or "json" access log lines
    """

    host: str = "127.0.0.1"
    port: int = 4000
    root_dir: Path = Path(DEFAULT_ROOT)
    use_extensions: bool = False

    keep_alive_timeout: float = 5.0
    max_request_size: int = 1024 * 1024
    server_name: str = "basic-http-server"
    log_level: str = "INFO"
    access_log_format: str = "text"

    @property
    def url(self) -> str:
        """http:// URL of the listen address, IPv6 hosts bracketed."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"

    @classmethod
    def from_args(
        cls,
        root: str = DEFAULT_ROOT,
        addr: str = DEFAULT_ADDR,
        use_extensions: bool = False,
        **kwargs,
    ) -> "ServerConfig":
        """
        Build a config from the command-line shaped values.

        Raises:
            ConfigError: The address does not parse.
        """
        host, port = parse_addr(addr)
        return cls(
            host=host,
            port=port,
            root_dir=Path(root),
            use_extensions=use_extensions,
            **kwargs,
        )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_ADDR        IP:PORT to listen on (default: 127.0.0.1:4000)
        HTTP_ROOT        Document root (default: .)
        HTTP_EXTENSIONS  "1"/"true"/"yes" enables development extensions
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_ACCESS_LOG  Access log format, "text" or "json" (default: text)
        """
        return cls.from_args(
            root=os.getenv("HTTP_ROOT", DEFAULT_ROOT),
            addr=os.getenv("HTTP_ADDR", DEFAULT_ADDR),
            use_extensions=os.getenv("HTTP_EXTENSIONS", "").lower() in ("1", "true", "yes"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            access_log_format=os.getenv("HTTP_ACCESS_LOG", "text").lower(),
        )

    def validate(self) -> None:
        """
        Fail fast on values the server cannot run with.

        Raises:
            ConfigError: Describing the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not self.root_dir.is_dir():
            raise ConfigError(f"Root directory does not exist: {self.root_dir}")

        if self.keep_alive_timeout <= 0:
            raise ConfigError("keep_alive_timeout must be > 0")

        if self.max_request_size < 1024:
            raise ConfigError("max_request_size must be >= 1024")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

        if self.access_log_format not in ACCESS_LOG_FORMATS:
            raise ConfigError(f"Unknown access log format: {self.access_log_format}")

    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def parse_addr(addr: str) -> Tuple[str, int]:
    """
    Parse "IP:PORT" into (host, port).

    IPv6 addresses must be bracketed: "[::1]:4000". Hostnames are
    rejected; the listen address is a socket address, not a name.

    Raises:
        ConfigError: If the address is malformed.
    """
    host, sep, port_text = addr.rpartition(":")
    if not sep or not host or not port_text.isdigit():
        raise ConfigError(f"invalid socket address syntax: {addr!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        expected_version = 6
    else:
        expected_version = 4

    try:
        ip = ipaddress.ip_address(host)
    except ValueError as e:
        raise ConfigError(f"invalid socket address syntax: {addr!r}") from e
    if ip.version != expected_version:
        raise ConfigError(f"invalid socket address syntax: {addr!r}")

    port = int(port_text)
    if port > 65535:
        raise ConfigError(f"invalid socket address syntax: {addr!r}")

    return str(ip), port
