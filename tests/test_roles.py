"""
Tests for roles and coarse permission checks.

Core principle: roles match exactly, there is no hierarchy.
"""

import pytest

from quill.auth.context import Principal
from quill.auth.roles import (
    ResourceType,
    Role,
    can_create_posts,
    can_perform,
    can_view_users,
    has_role,
    is_admin,
    is_editor,
    is_viewer,
)


ALL_ROLES = list(Role)


def principal(role, id=1):
    return Principal(id=id, role=role)


# =============================================================================
# Role Tests
# =============================================================================


class TestRole:
    def test_known_values(self):
        assert Role.from_value("admin") == Role.ADMIN
        assert Role.from_value("editor") == Role.EDITOR
        assert Role.from_value(Role.VIEWER) == Role.VIEWER

    @pytest.mark.parametrize("value", [None, "", "superuser", "ADMIN", 3])
    def test_unknown_values_are_regular(self, value):
        assert Role.from_value(value) == Role.REGULAR

    def test_principal_normalises_role(self):
        assert Principal(id=1, role="legacy").role == Role.REGULAR
        assert Principal(id=1, role="editor").role == Role.EDITOR
        assert Principal(id=1).role == Role.REGULAR


# =============================================================================
# has_role Tests
# =============================================================================


class TestHasRole:
    def test_exact_match(self):
        for role in ALL_ROLES:
            assert has_role(principal(role), role)
            assert has_role(principal(role), role.value)

    def test_admin_only_matches_admin(self):
        for role in (Role.EDITOR, Role.VIEWER, Role.REGULAR):
            assert not has_role(principal(role), "admin")

    def test_admin_does_not_satisfy_lower_roles(self):
        admin = principal(Role.ADMIN)
        assert not has_role(admin, Role.EDITOR)
        assert not has_role(admin, Role.VIEWER)
        assert not has_role(admin, Role.REGULAR)

    def test_unknown_role_never_matches(self):
        for role in ALL_ROLES:
            assert not has_role(principal(role), "superuser")

    def test_shorthands(self):
        assert is_admin(principal(Role.ADMIN))
        assert is_editor(principal(Role.EDITOR))
        assert is_viewer(principal(Role.VIEWER))
        assert not is_admin(principal(Role.EDITOR))
        assert not is_editor(principal(Role.ADMIN))
        assert not is_viewer(principal(Role.REGULAR))

    def test_principal_properties_agree(self):
        for role in ALL_ROLES:
            p = principal(role)
            assert p.is_admin == is_admin(p)
            assert p.is_editor == is_editor(p)
            assert p.is_viewer == is_viewer(p)


# =============================================================================
# can_perform Tests
# =============================================================================


class TestCanPerform:
    def test_admin_can_do_anything(self):
        admin = principal(Role.ADMIN)
        for action in ("create", "read", "update", "delete", "promote", "anything"):
            assert can_perform(admin, action)
            assert can_perform(admin, action, ResourceType.USER)

    def test_editor_manages_posts(self):
        editor = principal(Role.EDITOR)
        for action in ("create", "read", "update", "delete"):
            assert can_perform(editor, action)
        assert not can_perform(editor, "promote")

    def test_editor_reads_users_only(self):
        editor = principal(Role.EDITOR)
        assert can_perform(editor, "read", ResourceType.USER)
        assert not can_perform(editor, "delete", "user")

    def test_viewer_reads_only(self):
        viewer = principal(Role.VIEWER)
        assert can_perform(viewer, "read")
        assert can_perform(viewer, "read", ResourceType.USER)
        for action in ("create", "update", "delete"):
            assert not can_perform(viewer, action)

    def test_unknown_resource_hint_allows_nothing(self):
        for role in (Role.EDITOR, Role.VIEWER, Role.REGULAR):
            assert not can_perform(principal(role), "read", "comment")
        assert can_perform(principal(Role.ADMIN), "read", "comment")

    def test_regular_gets_nothing(self):
        regular = principal(Role.REGULAR)
        for action in ("create", "read", "update", "delete"):
            assert not can_perform(regular, action)
            assert not can_perform(regular, action, ResourceType.USER)


# =============================================================================
# Independent Gates
# =============================================================================


class TestIndependentGates:
    def test_viewer_may_author_posts_despite_matrix(self):
        viewer = principal(Role.VIEWER)
        assert can_create_posts(viewer)
        assert not can_perform(viewer, "create")

    def test_regular_may_not_author_posts(self):
        assert not can_create_posts(principal(Role.REGULAR))

    def test_user_directory(self):
        for role in (Role.ADMIN, Role.EDITOR, Role.VIEWER):
            assert can_view_users(principal(role))
        assert not can_view_users(principal(Role.REGULAR))


class TestPrincipal:
    def test_is_same_compares_ids_only(self):
        a = Principal(id=1, role=Role.VIEWER, name="Sam", email="sam@example.com")
        b = Principal(id=2, role=Role.VIEWER, name="Sam", email="sam@example.com")
        assert a.is_same(Principal(id=1, role=Role.ADMIN))
        assert not a.is_same(b)
        assert a.is_same(1)
