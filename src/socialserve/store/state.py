"""
=============================================================================
STORE - THE AGGREGATE ROOT
=============================================================================

Owns every user and every post of one application instance. Two maps, kept
consistent with each other:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           STORE LAYOUT                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   _users: username → set of post ids                                │
    │   ┌──────────┬──────────┐                                           │
    │   │ "alice"  │ {1, 3}   │──────┐                                    │
    │   │ "bob"    │ {2}      │────┐ │                                    │
    │   │ "carol"  │ {}       │    │ │                                    │
    │   └──────────┴──────────┘    │ │                                    │
    │                              ▼ ▼                                    │
    │   _posts: post id → Post                                            │
    │   ┌────┬───────────────────────┐                                    │
    │   │ 1  │ Post("hello")         │                                    │
    │   │ 2  │ Post("hi all")        │                                    │
    │   │ 3  │ Post("second post")   │                                    │
    │   └────┴───────────────────────┘                                    │
    │                                                                      │
    │   Every id in _users is a key of _posts; every post has one owner.  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
POST IDENTIFIERS
=============================================================================

Ids come from a per-store counter (1, 2, 3, ...). They cannot collide no
matter how fast posts are created, they fit in 64 bits for any realistic
lifetime, and sorting by id sorts by creation time. The counter is only
advanced after validation succeeds, so a rejected create_post() does not
burn an id.

=============================================================================
THREAD SAFETY
=============================================================================

None. The Store is plain data; SharedStore (shared.py) supplies the lock.
Generators returned by posts() walk the live maps and must be consumed
while the caller still holds the lock.

=============================================================================
"""

import itertools
from typing import Dict, Iterator, Optional, Set, Tuple

from .errors import AlreadyRegistered, PostNotFound, UnknownUser
from .post import Post


class Store:
    """
    In-memory users and posts.

    Usage:
        store = Store()
        store.register_user("alice")
        post_id = store.create_post("alice", "hello")
        store.get_post_mut(post_id).like("bob")
        store.create_comment(post_id, "carol", "hi")

        for username, post_id in store.posts():
            ...
    """

    def __init__(self):
        self._users: Dict[str, Set[int]] = {}
        self._posts: Dict[int, Post] = {}
        self._ids = itertools.count(1)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def register_user(self, username: str) -> None:
        """
        Register a new username with no posts.

        Raises:
            AlreadyRegistered: If the username exists.
        """
        if username in self._users:
            raise AlreadyRegistered(username)
        self._users[username] = set()

    def create_post(self, username: str, content: str) -> int:
        """
        Create a post authored by username.

        Args:
            username: Registered author.
            content: Text of the post.

        Returns:
            The new post's identifier.

        Raises:
            UnknownUser: If username was never registered.
        """
        user_posts = self._users.get(username)
        if user_posts is None:
            raise UnknownUser(username)

        post_id = next(self._ids)
        self._posts[post_id] = Post(content)
        user_posts.add(post_id)
        return post_id

    def create_comment(self, post_id: int, author_username: str, content: str) -> None:
        """
        Append a comment to a post.

        The author is not checked against the registry: anyone may comment
        under any name.

        Raises:
            PostNotFound: If no post has this id.
        """
        self.require_post(post_id).add_comment(author_username, content)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_post(self, post_id: int) -> Optional[Post]:
        """Return the post, or None if it doesn't exist."""
        return self._posts.get(post_id)

    def get_post_mut(self, post_id: int) -> Optional[Post]:
        """
        Return the post for in-place mutation, or None.

        Same object as get_post(); the separate name marks call sites that
        must hold the write lock.
        """
        return self._posts.get(post_id)

    def require_post(self, post_id: int) -> Post:
        """Like get_post_mut() but raises PostNotFound instead of returning None."""
        post = self._posts.get(post_id)
        if post is None:
            raise PostNotFound(post_id)
        return post

    def is_registered(self, username: str) -> bool:
        return username in self._users

    def posts(self) -> Iterator[Tuple[str, int]]:
        """
        Yield (username, post_id) for every post.

        Order is unspecified. Each call starts a fresh walk over the current
        state.
        """
        for username, post_ids in self._users.items():
            for post_id in post_ids:
                yield username, post_id

    @property
    def user_count(self) -> int:
        return len(self._users)

    @property
    def post_count(self) -> int:
        return len(self._posts)

    def __repr__(self) -> str:
        return f"Store(users={self.user_count}, posts={self.post_count})"
