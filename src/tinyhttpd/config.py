"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. Values come from, highest priority
first:

    1. Command-line arguments    python -m tinyhttpd --directory /tmp/data
    2. Environment variables     TINYHTTPD_DIRECTORY=/tmp/data
    3. Defaults below

validate() runs when the server is constructed so a bad port or a missing
directory fails at startup, not on the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "TINYHTTPD_"


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(directory="/tmp/data", log_level="DEBUG")

    Tests:
        ServerConfig(port=0, directory=str(tmp_path))  # OS picks a port
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "localhost"
    port: int = 4221
    """0 asks the OS for a free port; read it back from HTTPServer.address."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing new ones."""

    buffer_size: int = 4096
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Seconds to wait for a client to finish sending its request.
    None waits forever: an idle client holds a worker until it disconnects.
    """

    max_request_size: int = 10 * 1024 * 1024
    """Largest request (head + body) accepted, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """Base directory for /files/. The route is not mounted when None."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 8
    """Worker threads; each handles one connection at a time."""

    queue_size: int = 100
    """Accepted connections waiting for a worker before 503s are sent."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerConfig":
        """
        Build a configuration from environment variables.

            TINYHTTPD_HOST        host (default: localhost)
            TINYHTTPD_PORT        port (default: 4221)
            TINYHTTPD_DIRECTORY   files directory (default: unset)
            TINYHTTPD_TIMEOUT     read timeout in seconds (default: unset)
            TINYHTTPD_WORKERS     worker threads (default: 8)
            TINYHTTPD_LOG_LEVEL   logging level (default: INFO)
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: Optional[str] = None) -> Optional[str]:
            return env.get(ENV_PREFIX + name, default)

        timeout = get("TIMEOUT")
        return cls(
            host=get("HOST", cls.host),
            port=int(get("PORT", str(cls.port))),
            directory=get("DIRECTORY"),
            timeout=float(timeout) if timeout else None,
            workers=int(get("WORKERS", str(cls.workers))),
            log_level=get("LOG_LEVEL", cls.log_level),
        )

    def validate(self) -> None:
        """
        Raise ValueError describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"Directory does not exist: {self.directory}")
