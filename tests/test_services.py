"""
Tests for the user and post services over in-memory storage.
"""

from datetime import timedelta

import pytest

from quill.auth.roles import Role
from quill.core.utils import utc_now
from quill.seed import seed_demo_data
from quill.services import EmailTakenError
from quill.storage import Collections


# =============================================================================
# UserService Tests
# =============================================================================


class TestUserService:
    @pytest.mark.asyncio
    async def test_create_and_authenticate(self, user_service):
        user = await user_service.create("Ada", "Ada@Example.com", "password123")

        assert user.id == 1
        assert user.email == "ada@example.com"
        assert user.role == "viewer"
        assert user.password_hash != "password123"

        assert (await user_service.authenticate("ada@example.com", "password123")).id == user.id
        assert await user_service.authenticate("ada@example.com", "wrong") is None
        assert await user_service.authenticate("nobody@example.com", "password123") is None

    @pytest.mark.asyncio
    async def test_ids_increment(self, user_service):
        first = await user_service.create("A", "a@example.com", "password123")
        second = await user_service.create("B", "b@example.com", "password123")
        assert second.id == first.id + 1

    @pytest.mark.asyncio
    async def test_duplicate_email(self, user_service):
        await user_service.create("A", "a@example.com", "password123")
        with pytest.raises(EmailTakenError, match="has already been taken"):
            await user_service.create("B", "A@example.com", "password123")

    @pytest.mark.asyncio
    async def test_update_rejects_taken_email(self, user_service):
        await user_service.create("A", "a@example.com", "password123")
        b = await user_service.create("B", "b@example.com", "password123")

        with pytest.raises(EmailTakenError):
            await user_service.update(b, email="a@example.com")

        # Keeping your own email is not a conflict
        same = await user_service.update(b, email="b@example.com", name="Bee")
        assert same.name == "Bee"

    @pytest.mark.asyncio
    async def test_update_password(self, user_service):
        user = await user_service.create("A", "a@example.com", "password123")
        await user_service.update(user, password="new-password")

        assert await user_service.authenticate("a@example.com", "new-password")
        assert await user_service.authenticate("a@example.com", "password123") is None

    @pytest.mark.asyncio
    async def test_unknown_stored_role_reads_as_regular(self, user_service, storage):
        user = await user_service.create("A", "a@example.com", "password123", role="superuser")
        assert user.role == "regular"

        await storage.metadata.update(Collections.USERS, user.id, {"role": ""})
        reloaded = await user_service.get(user.id)
        assert reloaded.resolved_role == Role.REGULAR

    @pytest.mark.asyncio
    async def test_change_role(self, user_service):
        user = await user_service.create("A", "a@example.com", "password123")
        updated = await user_service.change_role(user, Role.EDITOR)

        assert updated.role == "editor"
        assert (await user_service.get(user.id)).role == "editor"

    @pytest.mark.asyncio
    async def test_revoke_tokens(self, user_service):
        user = await user_service.create("A", "a@example.com", "password123")
        revoked = await user_service.revoke_tokens(user)

        assert revoked.token_version == user.token_version + 1
        assert (await user_service.get(user.id)).token_version == revoked.token_version

    @pytest.mark.asyncio
    async def test_delete_cascades_posts(self, user_service, post_service):
        a = await user_service.create("A", "a@example.com", "password123")
        b = await user_service.create("B", "b@example.com", "password123")
        await post_service.create(a.id, "One", "Body")
        await post_service.create(a.id, "Two", "Body")
        kept = await post_service.create(b.id, "Three", "Body")

        assert await user_service.delete(a)
        assert await user_service.get(a.id) is None
        assert [p.id for p in await post_service.list_all()] == [kept.id]

    @pytest.mark.asyncio
    async def test_list_with_posts_limits_each_user(self, user_service, post_service):
        a = await user_service.create("A", "a@example.com", "password123")
        await user_service.create("B", "b@example.com", "password123")
        for i in range(7):
            await post_service.create(a.id, f"Post {i}", "Body")

        rows = await user_service.list_with_posts(posts_per_user=5)
        by_id = {user.id: posts for user, posts in rows}

        assert len(by_id[a.id]) == 5
        assert [p.title for p in by_id[a.id]] == [f"Post {i}" for i in (6, 5, 4, 3, 2)]
        assert len(rows) == 2


# =============================================================================
# PostService Tests
# =============================================================================


class TestPostService:
    @pytest.mark.asyncio
    async def test_update_keeps_owner(self, post_service):
        post = await post_service.create(5, "Title", "Body")
        updated = await post_service.update(post, title="New title")

        assert updated.owner_id == 5
        assert updated.title == "New title"
        assert updated.body == "Body"
        assert (await post_service.get(post.id)).title == "New title"

    @pytest.mark.asyncio
    async def test_list_by_owner_newest_first(self, post_service, storage):
        old = await post_service.create(5, "Old", "Body")
        new = await post_service.create(5, "New", "Body")
        await post_service.create(6, "Other", "Body")

        earlier = utc_now() - timedelta(days=1)
        await storage.metadata.update(Collections.POSTS, old.id, {"created_at": earlier})

        posts = await post_service.list_by_owner(5)
        assert [p.id for p in posts] == [new.id, old.id]

    @pytest.mark.asyncio
    async def test_delete(self, post_service):
        post = await post_service.create(5, "Title", "Body")
        assert await post_service.delete(post)
        assert await post_service.get(post.id) is None
        assert not await post_service.delete(post)


# =============================================================================
# Demo Seed Tests
# =============================================================================


class TestSeed:
    @pytest.mark.asyncio
    async def test_seeds_once(self, storage, user_service, post_service):
        await seed_demo_data(storage)
        await seed_demo_data(storage)

        users = await user_service.list_all()
        assert sorted(u.role for u in users) == ["admin", "editor", "viewer"]

        admin = await user_service.authenticate("admin@quill.dev", "admin123")
        assert admin is not None
        assert len(await post_service.list_by_owner(admin.id)) == 3
        assert len(await post_service.list_all()) == 3
