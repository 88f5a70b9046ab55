"""
=============================================================================
STORE PACKAGE - APPLICATION DATA
=============================================================================

Everything the social app knows lives here, in memory:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ post.py    Post: content, likes/dislikes, comments                  │
    │ state.py   Store: users → post ids, post id → Post                  │
    │ shared.py  SharedStore: Store + reader-writer lock                  │
    │ errors.py  StoreError and its three kinds                           │
    └─────────────────────────────────────────────────────────────────────┘

No I/O happens in this package. Restarting the process empties the store.

=============================================================================
"""

from .errors import StoreError, AlreadyRegistered, UnknownUser, PostNotFound
from .post import Post, Interaction
from .state import Store
from .shared import SharedStore

__all__ = [
    # Data
    "Store",
    "Post",
    "Interaction",
    "SharedStore",

    # Errors
    "StoreError",
    "AlreadyRegistered",
    "UnknownUser",
    "PostNotFound",
]
