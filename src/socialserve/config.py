"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the social server in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m socialserve --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── SOCIAL_PORT=3000 python -m socialserve                     │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    SOCIAL_HOST        host          127.0.0.1
    SOCIAL_PORT        port          8000
    SOCIAL_WORKERS     max_workers   16
    SOCIAL_TIMEOUT     timeout       30 (seconds)
    SOCIAL_LOG_LEVEL   log_level     INFO

=============================================================================
INTERVIEW QUESTIONS ABOUT CONFIGURATION
=============================================================================

Q: "When should configuration be validated?"
A: "At startup, before binding the socket. A typo in SOCIAL_PORT should
   stop the process with a clear message, not surface as a strange bind
   error or a pool that never starts."

Q: "Why does port 0 pass validation?"
A: "Port 0 asks the kernel for any free port. Tests rely on it to run
   several servers side by side; the real port is read back after bind."

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the social server.

    Development:
        ServerConfig(port=8000, log_level="DEBUG")

    Container:
        ServerConfig(host="0.0.0.0", port=80, max_workers=32)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Bind address. 127.0.0.1 is local only; 0.0.0.0 is every interface."""

    port: int = 8000
    """TCP port; 0 lets the OS pick a free one."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = 30.0
    """Seconds a client has to deliver its first request. None = no limit."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Reuse connections for several requests (HTTP/1.1 default)."""

    keep_alive_timeout: float = 5.0
    """Seconds an idle keep-alive connection is held open."""

    max_request_size: int = 1024 * 1024
    """Requests above this are answered with 413. Routes take no bodies."""

    # ─────────────────────────────────────────────────────────────────────
    # THREADING SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Connections waiting for a worker; beyond this clients get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log style: "text" (Apache-like) or "json" (one object per line)."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "socialserve/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Defaults overridden by SOCIAL_* environment variables.

            SOCIAL_PORT=3000 SOCIAL_LOG_LEVEL=DEBUG python -m socialserve

        Raises:
            ValueError: A numeric variable does not parse.
        """
        return cls(
            host=os.getenv("SOCIAL_HOST", "127.0.0.1"),
            port=int(os.getenv("SOCIAL_PORT", "8000")),
            max_workers=int(os.getenv("SOCIAL_WORKERS", "16")),
            timeout=float(os.getenv("SOCIAL_TIMEOUT", "30")),
            log_level=os.getenv("SOCIAL_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """
        Raise ValueError on the first invalid setting.

        Called by HTTPServer.__init__, so a bad config never binds a socket.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
