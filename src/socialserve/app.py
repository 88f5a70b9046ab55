"""
=============================================================================
APPLICATION FACTORY
=============================================================================

create_app() builds a ready-to-run HTTPServer with the social routes, the
access log and the health endpoints, around one SharedStore.

    app = create_app(ServerConfig(port=8000))
    app.run()

The store is created here unless one is passed in, so two apps never share
state by accident and tests can inspect the store they handed over:

    shared = SharedStore()
    app = create_app(config, store=shared)
    ...
    with shared.read() as store:
        assert store.user_count == 1

=============================================================================
"""

from typing import Optional

from .config import ServerConfig
from .handlers import HealthHandler, SocialHandler
from .middleware import LoggingMiddleware
from .server import HTTPServer
from .store import SharedStore


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[SharedStore] = None,
) -> HTTPServer:
    """
    Args:
        config: Server settings; ServerConfig() defaults when omitted.
        store: Shared store to serve; a fresh, empty one when omitted.

    Returns:
        The configured server, not yet running.
    """
    server = HTTPServer(config)
    shared = store if store is not None else SharedStore()

    server.use(LoggingMiddleware(log_format=server.config.log_format))

    social = SocialHandler(shared)
    health = HealthHandler(shared, stats=lambda: server.thread_pool.stats)

    router = server.router
    router.get("/")(social.index)
    router.get("/feed")(social.feed)
    router.get("/post/:username/:id")(social.post_page)
    router.get("/register/:username")(social.register)
    router.get("/new-post/:username/:content")(social.new_post)
    router.get("/add-comment")(social.add_comment)
    router.get("/like")(social.like)
    router.get("/dislike")(social.dislike)
    router.get("/unlike")(social.unlike)

    router.get("/health")(health.handle)
    router.get("/health/live")(health.liveness)

    return server
