"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Everything that turns a routed HTTPRequest into an HTTPResponse.

    social.py    SocialHandler: feed, post page, register, new post,
                 comment, like, dislike, unlike, / redirect
    pages.py     HTML rendering for the feed and post pages
    health.py    HealthHandler: /health and /health/live

=============================================================================
"""

from .social import SocialHandler, BadParameter
from .health import HealthHandler
from .pages import render_feed, render_post_page, post_url

__all__ = [
    "SocialHandler",
    "BadParameter",
    "HealthHandler",
    "render_feed",
    "render_post_page",
    "post_url",
]
