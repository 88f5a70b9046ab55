"""
=============================================================================
SOCIALSERVE: A TINY SOCIAL SITE ON A HAND-BUILT HTTP SERVER
=============================================================================

Users register, write posts, comment, and like or dislike each other's
posts. Everything lives in memory; every page is server-rendered HTML and
every action is a plain GET link or form.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   browser ──► SocketServer ──► ThreadPool ──► LoggingMiddleware      │
    │                                                    │                 │
    │                                                    ▼                 │
    │                                                 Router               │
    │                                                    │                 │
    │                                                    ▼                 │
    │                      SharedStore ◄──────── SocialHandler             │
    │                 (Store + ReadWriteLock)            │                 │
    │                                                    ▼                 │
    │                                               pages (HTML)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    store/        users, posts, interactions; no I/O
    core/         sockets, connections, worker pool, reader-writer lock
    http/         request parsing, responses, routing
    middleware/   access logging
    handlers/     social routes, HTML pages, health checks
    app.py        create_app(): wires all of the above
    __main__.py   python -m socialserve

=============================================================================
QUICK START
=============================================================================

    $ python -m socialserve --port 8000
    $ curl -i http://127.0.0.1:8000/register/alice          # 302 → /feed
    $ curl -i http://127.0.0.1:8000/new-post/alice/hello    # 302 → /post/alice/1
    $ curl    http://127.0.0.1:8000/feed

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
