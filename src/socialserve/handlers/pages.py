"""
=============================================================================
HTML PAGES
=============================================================================

Builds the two pages of the site as strings. Every function here reads the
store but never locks it: callers render inside `shared.read()`, so the
post generators are walked against one consistent state.

    ┌──────────────────────────────┐      ┌──────────────────────────────┐
    │ Social                       │      │ Social                       │
    │ ┌──────────────────────────┐ │      │ Post by @alice               │
    │ │ Post by @bob   (post 2)  │ │      │ hello                        │
    │ └──────────────────────────┘ │      │ Liked by "bob"               │
    │ ┌──────────────────────────┐ │      │ Disliked by "carol"          │
    │ │ Post by @alice (post 1)  │ │      │ Comments                     │
    │ └──────────────────────────┘ │      │  • @carol says: nice         │
    │                              │      │  [username][comment][Add]    │
    │       render_feed()          │      │  [username][Like] ...        │
    └──────────────────────────────┘      │ Back to Feed                 │
                                          │       render_post_page()     │
                                          └──────────────────────────────┘

Usernames, post content and comments are user input and always pass
through html.escape(). Links are built with percent-encoded segments so a
username containing "/" or "?" still routes back to the same post.

=============================================================================
"""

from html import escape
from typing import Iterable, List
from urllib.parse import quote

from ..store import Store, Post


PAGE_HEADER = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Social</title>
</head>
<body>
    <h1>Social</h1>
"""

PAGE_FOOTER = """</body>
</html>
"""

ACTIONS = (
    ("/like", "Like"),
    ("/dislike", "Dislike"),
    ("/unlike", "Unlike"),
)


def post_url(username: str, post_id: int) -> str:
    """/post/{username}/{id} with the username percent-encoded."""
    return f"/post/{quote(username, safe='')}/{post_id}"


def _quoted_names(usernames: Iterable[str]) -> str:
    """alice, bob → ' "alice" "bob"' (the Liked by / Disliked by lists)."""
    return "".join(f' "{escape(name)}"' for name in usernames)


def _hidden_fields(author: str, post_id: int) -> str:
    return (
        f'<input hidden name="post_username" value="{escape(author)}"/>\n'
        f'                <input hidden name="post_id" value="{post_id}"/>'
    )


def render_post_body(author: str, post_id: int, post: Post) -> str:
    """
    The block shared by the post page and each feed entry: author, content,
    reactions, comments and the action forms.
    """
    comments = "".join(
        f"<li><b>@{escape(username)} says:</b> {escape(comment)}</li>\n"
        for username, comment in post.comments()
    )
    hidden = _hidden_fields(author, post_id)

    parts: List[str] = [
        f"<h2>Post by @{escape(author)}</h2>",
        f"<h4>{escape(post.content)}</h4>",
        f"<p>Liked by{_quoted_names(post.likers())}</p>",
        f"<p>Disliked by{_quoted_names(post.dislikers())}</p>",
        "<h4>Comments</h4>",
        "<ul>",
        comments + "<li>",
        f"""            <form action="/add-comment" method="GET">
                {hidden}
                <input name="username" placeholder="Username"/>
                <input name="comment" placeholder="Your Comment"/>
                <input type="submit" value="Add Comment"/>
            </form>""",
        "</li>",
        "</ul>",
    ]

    for action, label in ACTIONS:
        parts.append(
            f"""<form action="{action}" method="GET">
                {hidden}
                <input name="username" placeholder="Username"/>
                <input type="submit" value="{label}"/>
            </form>"""
        )

    return "\n".join(parts) + "\n"


def render_post_page(author: str, post_id: int, post: Post) -> str:
    """Full document for GET /post/{author}/{post_id}."""
    return (
        PAGE_HEADER
        + render_post_body(author, post_id, post)
        + '<h5><a href="/feed">Back to Feed</a></h5>\n'
        + PAGE_FOOTER
    )


def render_feed(store: Store) -> str:
    """
    Full document for GET /feed: every post, newest first, each one a link
    to its own page.
    """
    entries = sorted(store.posts(), key=lambda entry: entry[1], reverse=True)

    chunks = ['<div id="posts">\n']
    for username, post_id in entries:
        post = store.get_post(post_id)
        if post is None:
            continue
        chunks.append(f'<a href="{post_url(username, post_id)}"><div class="post">\n')
        chunks.append(render_post_body(username, post_id, post))
        chunks.append("</div></a>\n")
    chunks.append("</div>\n")

    return PAGE_HEADER + "".join(chunks) + PAGE_FOOTER
