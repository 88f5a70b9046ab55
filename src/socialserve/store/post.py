"""
=============================================================================
POST MODEL
=============================================================================

A single post: immutable text content plus the reactions other users left
on it.

=============================================================================
INTERACTION STATE
=============================================================================

Every (post, user) pair is in exactly one of three states. The Post only
stores the first two; NONE is "no entry in the map".

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   PER-USER INTERACTION STATE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ┌─────────┐  like()   ┌─────────┐  dislike()  ┌──────────┐       │
    │   │  NONE   │─────────►│  LIKED  │────────────►│ DISLIKED │       │
    │   └─────────┘          └─────────┘◄────────────└──────────┘       │
    │     ▲    │                  │         like()         ▲  │         │
    │     │    └──────────────────┼──── dislike() ─────────┘  │         │
    │     └──────── unlike() ─────┴───────────────────────────┘         │
    │                                                                      │
    │   Every transition is total: nothing is ever rejected.              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    _interactions: {"bob": True, "dave": False}
                            │              │
                         LIKED         DISLIKED

=============================================================================
COMMENTS
=============================================================================

Comments are grouped per author. Each author's list keeps append order;
authors themselves come out in dict order, which callers must not rely on.

    _comments: {"carol": ["hi", "nice post"], "bob": ["+1"]}

=============================================================================
"""

from enum import Enum
from typing import Dict, Iterator, List, Tuple


class Interaction(Enum):
    """Tri-state value of one user's reaction to one post."""
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"


class Post:
    """
    A post and its interactions.

    Mutators (like, dislike, unlike, add_comment) must only be called while
    holding exclusive access to the owning store. The query methods return
    generators over the live maps: consume them while the store is locked
    and call again to see fresh state.

    Attributes:
        content: Text of the post, fixed at creation.
    """

    __slots__ = ("_content", "_interactions", "_comments")

    def __init__(self, content: str):
        self._content = content
        # username → True (liked) / False (disliked)
        self._interactions: Dict[str, bool] = {}
        # username → comments in the order they were made
        self._comments: Dict[str, List[str]] = {}

    @property
    def content(self) -> str:
        return self._content

    # =========================================================================
    # MUTATORS
    # =========================================================================

    def like(self, username: str) -> None:
        """Mark the post as liked by username (replaces a dislike)."""
        self._interactions[username] = True

    def dislike(self, username: str) -> None:
        """Mark the post as disliked by username (replaces a like)."""
        self._interactions[username] = False

    def unlike(self, username: str) -> None:
        """Forget username's like or dislike entirely."""
        self._interactions.pop(username, None)

    def add_comment(self, username: str, content: str) -> None:
        """Append a comment; earlier comments by the same user are kept."""
        self._comments.setdefault(username, []).append(content)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def interaction(self, username: str) -> Interaction:
        flag = self._interactions.get(username)
        if flag is None:
            return Interaction.NONE
        return Interaction.LIKED if flag else Interaction.DISLIKED

    def likers(self) -> Iterator[str]:
        """Yield usernames that currently like the post."""
        return (username for username, liked in self._interactions.items() if liked)

    def dislikers(self) -> Iterator[str]:
        """Yield usernames that currently dislike the post."""
        return (username for username, liked in self._interactions.items() if not liked)

    def comments(self) -> Iterator[Tuple[str, str]]:
        """
        Yield (username, comment) pairs.

        Comments by the same user come out in the order they were added.
        """
        for username, user_comments in self._comments.items():
            for comment in user_comments:
                yield username, comment

    def __repr__(self) -> str:
        return (
            f"Post(content={self._content!r}, "
            f"interactions={len(self._interactions)}, "
            f"comments={sum(len(c) for c in self._comments.values())})"
        )
