"""
=============================================================================
HEALTH CHECK ENDPOINTS
=============================================================================

    /health        status, uptime, store counts, worker pool stats
    /health/live   {"status": "alive"}; only proves the process answers

Both are JSON and never cached. /health takes the store's read lock for
the counts, so a wedged writer shows up as a health check that hangs.

    {
        "status": "healthy",
        "uptime_seconds": 3600,
        "store": {"users": 3, "posts": 12},
        "workers": {"total": 4, "busy": 1, ...},
        "tasks": {"queued": 0, "completed": 250, "failed": 0}
    }

=============================================================================
"""

import time
from typing import Optional, Callable, Dict, Any

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..store import SharedStore


# Returns extra sections merged into the /health document
StatsSource = Callable[[], Dict[str, Any]]


class HealthHandler:
    """
    Health endpoints for one SharedStore.

        health = HealthHandler(shared, stats=lambda: server.thread_pool.stats)
        router.get("/health", health.handle)
        router.get("/health/live", health.liveness)
    """

    def __init__(
        self,
        shared: SharedStore,
        stats: Optional[StatsSource] = None,
    ):
        """
        Args:
            shared: Store whose counts are reported.
            stats: Extra sections for the document (the server's pool stats).
        """
        self.shared = shared
        self.stats = stats
        self._start_time = time.time()

    @property
    def uptime(self) -> float:
        return time.time() - self._start_time

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        with self.shared.read() as store:
            counts = {"users": store.user_count, "posts": store.post_count}

        document: Dict[str, Any] = {
            "status": "healthy",
            "uptime_seconds": int(self.uptime),
            "store": counts,
        }

        if self.stats is not None:
            document.update(self.stats())

        return (ResponseBuilder()
            .json(document)
            .header("Cache-Control", "no-store")
            .build())

    def liveness(self, request: HTTPRequest) -> HTTPResponse:
        return (ResponseBuilder()
            .json({"status": "alive"})
            .header("Cache-Control", "no-store")
            .build())
