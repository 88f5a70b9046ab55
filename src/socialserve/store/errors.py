"""
=============================================================================
STORE ERRORS
=============================================================================

Validation failures raised by the Store. Every one of them is detected
BEFORE the store is touched, so a raised error always means "nothing
changed".

    StoreError
    ├── AlreadyRegistered   register_user() with a taken username
    ├── UnknownUser         create_post() by a username never registered
    └── PostNotFound        any operation on a post id that doesn't exist

The HTTP layer catches StoreError and sends str(error) back as a plain-text
body.

=============================================================================
"""


class StoreError(Exception):
    """
    Base class for all store validation failures.

    Attributes:
        message: Human-readable description (also str(error)).
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AlreadyRegistered(StoreError):
    """The username is already present in the registry."""

    def __init__(self, username: str):
        super().__init__(f"User `{username}` already registered")
        self.username = username


class UnknownUser(StoreError):
    """The username was never registered."""

    def __init__(self, username: str):
        super().__init__(f"user `{username}` not registered")
        self.username = username


class PostNotFound(StoreError):
    """No post carries the given identifier."""

    def __init__(self, post_id: int):
        super().__init__(f"post with id `{post_id}` doesn't exist")
        self.post_id = post_id
