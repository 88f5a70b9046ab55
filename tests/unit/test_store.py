"""
Unit tests for the in-memory store and posts.
"""

import pytest

from socialserve.store import (
    AlreadyRegistered,
    Interaction,
    Post,
    PostNotFound,
    SharedStore,
    Store,
    StoreError,
    UnknownUser,
)


class TestRegistration:
    """Tests for Store.register_user."""

    def test_register_new_user(self, store: Store):
        store.register_user("alice")

        assert store.is_registered("alice")
        assert store.user_count == 1
        assert list(store.posts()) == []

    def test_register_twice_fails(self, store: Store):
        store.register_user("alice")

        with pytest.raises(AlreadyRegistered) as exc_info:
            store.register_user("alice")

        assert str(exc_info.value) == "User `alice` already registered"
        assert exc_info.value.username == "alice"
        assert store.user_count == 1

    def test_usernames_are_case_sensitive(self, store: Store):
        store.register_user("alice")
        store.register_user("Alice")

        assert store.user_count == 2

    def test_errors_share_a_base(self):
        assert issubclass(AlreadyRegistered, StoreError)
        assert issubclass(UnknownUser, StoreError)
        assert issubclass(PostNotFound, StoreError)


class TestPosts:
    """Tests for Store.create_post and lookups."""

    def test_create_post(self, store: Store):
        store.register_user("alice")
        post_id = store.create_post("alice", "hello")

        post = store.get_post(post_id)
        assert post is not None
        assert post.content == "hello"
        assert list(store.posts()) == [("alice", post_id)]
        assert store.post_count == 1

    def test_create_post_unknown_user(self, store: Store):
        with pytest.raises(UnknownUser) as exc_info:
            store.create_post("ghost", "boo")

        assert str(exc_info.value) == "user `ghost` not registered"
        assert store.post_count == 0

    def test_failed_create_consumes_no_id(self, store: Store):
        store.register_user("alice")
        first = store.create_post("alice", "one")

        with pytest.raises(UnknownUser):
            store.create_post("ghost", "boo")

        assert store.create_post("alice", "two") == first + 1

    def test_ids_are_distinct_across_users(self, store: Store):
        for name in ("alice", "bob", "carol"):
            store.register_user(name)

        ids = [store.create_post(name, f"post {i}")
               for i in range(4) for name in ("alice", "bob", "carol")]

        assert len(set(ids)) == 12

        pairs = list(store.posts())
        assert len(pairs) == 12
        assert {post_id for _, post_id in pairs} == set(ids)
        assert all(store.get_post(post_id) is not None for _, post_id in pairs)

    def test_posts_is_restartable(self, store: Store):
        store.register_user("alice")
        store.create_post("alice", "one")

        first_walk = list(store.posts())
        store.create_post("alice", "two")
        second_walk = list(store.posts())

        assert len(first_walk) == 1
        assert len(second_walk) == 2

    def test_posts_belong_to_their_author(self, store: Store):
        store.register_user("alice")
        store.register_user("bob")
        alice_post = store.create_post("alice", "a")
        bob_post = store.create_post("bob", "b")

        assert set(store.posts()) == {("alice", alice_post), ("bob", bob_post)}

    def test_get_post_missing(self, store: Store):
        assert store.get_post(99) is None
        assert store.get_post_mut(99) is None

    def test_get_post_mut_is_same_object(self, store: Store):
        store.register_user("alice")
        post_id = store.create_post("alice", "x")

        assert store.get_post_mut(post_id) is store.get_post(post_id)

    def test_require_post(self, store: Store):
        with pytest.raises(PostNotFound) as exc_info:
            store.require_post(7)

        assert str(exc_info.value) == "post with id `7` doesn't exist"
        assert exc_info.value.post_id == 7


class TestComments:
    """Tests for Store.create_comment and Post.add_comment."""

    def test_comment_on_missing_post(self, store: Store):
        with pytest.raises(PostNotFound):
            store.create_comment(1, "bob", "hi")

    def test_comments_are_cumulative_and_ordered(self, store: Store):
        store.register_user("alice")
        post_id = store.create_post("alice", "hello")

        store.create_comment(post_id, "bob", "first")
        store.create_comment(post_id, "bob", "second")
        store.create_comment(post_id, "bob", "third")

        post = store.get_post(post_id)
        assert [c for user, c in post.comments() if user == "bob"] == ["first", "second", "third"]

    def test_commenter_need_not_be_registered(self, store: Store):
        store.register_user("alice")
        post_id = store.create_post("alice", "hello")

        store.create_comment(post_id, "stranger", "hi")

        assert list(store.get_post(post_id).comments()) == [("stranger", "hi")]


class TestPostInteractions:
    """Tests for the like / dislike / unlike state of one user on one post."""

    def test_new_post_has_no_interactions(self):
        post = Post("x")

        assert list(post.likers()) == []
        assert list(post.dislikers()) == []
        assert list(post.comments()) == []
        assert post.interaction("bob") is Interaction.NONE

    def test_like(self):
        post = Post("x")
        post.like("bob")

        assert list(post.likers()) == ["bob"]
        assert post.interaction("bob") is Interaction.LIKED

    def test_dislike_replaces_like(self):
        post = Post("x")
        post.like("bob")
        post.dislike("bob")

        assert list(post.likers()) == []
        assert list(post.dislikers()) == ["bob"]

    def test_like_replaces_dislike(self):
        post = Post("x")
        post.dislike("bob")
        post.like("bob")

        assert list(post.likers()) == ["bob"]
        assert list(post.dislikers()) == []

    def test_unlike_clears_either(self):
        post = Post("x")
        post.like("bob")
        post.dislike("carol")
        post.unlike("bob")
        post.unlike("carol")

        assert post.interaction("bob") is Interaction.NONE
        assert post.interaction("carol") is Interaction.NONE

    def test_unlike_without_interaction_is_noop(self):
        post = Post("x")
        post.unlike("bob")

        assert post.interaction("bob") is Interaction.NONE

    def test_repeated_like_is_idempotent(self):
        post = Post("x")
        post.like("bob")
        post.like("bob")

        assert list(post.likers()) == ["bob"]

    @pytest.mark.parametrize("actions, expected", [
        (["like"], Interaction.LIKED),
        (["dislike"], Interaction.DISLIKED),
        (["like", "unlike"], Interaction.NONE),
        (["like", "dislike", "like"], Interaction.LIKED),
        (["dislike", "unlike", "dislike"], Interaction.DISLIKED),
        (["unlike", "unlike"], Interaction.NONE),
    ])
    def test_last_action_wins(self, actions, expected):
        post = Post("x")
        for action in actions:
            getattr(post, action)("bob")

        assert post.interaction("bob") is expected
        in_likers = "bob" in post.likers()
        in_dislikers = "bob" in post.dislikers()
        assert (in_likers, in_dislikers) == (
            expected is Interaction.LIKED,
            expected is Interaction.DISLIKED,
        )

    def test_users_are_independent(self):
        post = Post("x")
        post.like("bob")
        post.dislike("carol")

        assert set(post.likers()) == {"bob"}
        assert set(post.dislikers()) == {"carol"}


class TestScenario:
    """alice posts, bob and carol react."""

    def test_end_to_end(self, store: Store):
        store.register_user("alice")
        store.register_user("bob")
        store.register_user("carol")

        post_id = store.create_post("alice", "hello world")

        store.get_post_mut(post_id).like("bob")
        store.get_post_mut(post_id).dislike("carol")
        store.create_comment(post_id, "carol", "meh")
        store.create_comment(post_id, "bob", "great")

        post = store.get_post(post_id)
        assert list(post.likers()) == ["bob"]
        assert list(post.dislikers()) == ["carol"]
        assert set(post.comments()) == {("carol", "meh"), ("bob", "great")}

        store.get_post_mut(post_id).unlike("carol")
        assert list(post.dislikers()) == []

        with pytest.raises(AlreadyRegistered):
            store.register_user("bob")
        with pytest.raises(UnknownUser):
            store.create_post("dave", "hi")
        with pytest.raises(PostNotFound):
            store.create_comment(post_id + 1, "bob", "?")


class TestSharedStore:
    """Tests for the lock-guarded wrapper."""

    def test_read_and_write_yield_the_same_store(self):
        inner = Store()
        shared = SharedStore(inner)

        with shared.write() as store:
            assert store is inner
            store.register_user("alice")

        with shared.read() as store:
            assert store is inner
            assert store.is_registered("alice")

    def test_lock_is_released_after_error(self):
        shared = SharedStore()

        with pytest.raises(UnknownUser):
            with shared.write() as store:
                store.create_post("ghost", "x")

        assert not shared.lock.write_locked_now
        with shared.write() as store:
            store.register_user("alice")

    def test_each_shared_store_owns_its_state(self):
        first, second = SharedStore(), SharedStore()

        with first.write() as store:
            store.register_user("alice")

        with second.read() as store:
            assert store.user_count == 0
