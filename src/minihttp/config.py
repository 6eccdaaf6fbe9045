"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One dataclass holds every tunable. Components receive it explicitly;
nothing reads process-wide globals.

    NETWORK     host, port, backlog, buffer_size, timeout
    REQUESTS    max_request_size, accumulate
    WORKERS     min_workers, max_workers, queue_size
    FILES       directory
    LOGGING     log_level, log_format

Defaults reproduce the classic setup: localhost:4221 serving ./files.

=============================================================================
ENVIRONMENT VARIABLES (ServerConfig.from_env)
=============================================================================

    MINIHTTP_HOST          bind address          (default: localhost)
    MINIHTTP_PORT          listen port           (default: 4221)
    MINIHTTP_DIRECTORY     served directory      (default: ./files)
    MINIHTTP_TIMEOUT       socket timeout, secs  (default: 30; 0/none = off)
    MINIHTTP_ACCUMULATE    multi-read requests   (default: true)
    MINIHTTP_WORKERS       max worker threads    (default: 16)
    MINIHTTP_LOG_LEVEL     logging level         (default: INFO)
    MINIHTTP_LOG_FORMAT    text | json           (default: text)

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DIRECTORY = "./files"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

        # Development, verbose
        ServerConfig(directory="/tmp/files", log_level="DEBUG")

        # Original single-read behavior, no socket deadline
        ServerConfig(accumulate=False, timeout=None)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "localhost"
    port: int = 4221

    backlog: int = 128
    """Accept queue length passed to listen()."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Read/write deadline per connection, in seconds.
    None blocks forever, which lets a silent client pin a worker.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """Requests larger than this are answered with 413."""

    accumulate: bool = True
    """
    True: keep reading until the head and any Content-Length body arrived.
    False: one recv() per request, whatever it returns.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Connections waiting for a worker. Beyond this the server sends 503."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = DEFAULT_DIRECTORY
    """Directory exposed through /files/*."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a configuration from MINIHTTP_* environment variables.

            MINIHTTP_PORT=8080 MINIHTTP_LOG_LEVEL=DEBUG minihttp /tmp/files
        """
        return cls(
            host=os.getenv("MINIHTTP_HOST", "localhost"),
            port=int(os.getenv("MINIHTTP_PORT", "4221")),
            directory=os.getenv("MINIHTTP_DIRECTORY", DEFAULT_DIRECTORY),
            timeout=_parse_timeout(os.getenv("MINIHTTP_TIMEOUT", "30")),
            accumulate=_parse_bool(os.getenv("MINIHTTP_ACCUMULATE", "true")),
            max_workers=int(os.getenv("MINIHTTP_WORKERS", "16")),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("MINIHTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Check values at startup, before anything binds a socket.

        Raises:
            ValueError: On the first invalid setting.
        """
        # Port 0 asks the OS for a free port (used by the test suite)
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 (or None to disable)")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")


def _parse_timeout(value: str) -> Optional[float]:
    """"30" → 30.0; "0", "none", "" → None (no deadline)."""
    if value.strip().lower() in ("", "0", "none"):
        return None
    return float(value)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")
