"""
Tests for user administration and self-protection rules.
"""

import pytest

from quill.auth import user_policy
from quill.auth.context import Principal
from quill.auth.roles import Role


NON_ADMIN_ROLES = [Role.EDITOR, Role.VIEWER, Role.REGULAR]


@pytest.fixture
def admin():
    return Principal(id=1, role=Role.ADMIN)


@pytest.fixture
def target():
    return Principal(id=2, role=Role.VIEWER)


class TestCreate:
    def test_admin_only(self, admin):
        assert user_policy.create(admin).allowed
        for role in NON_ADMIN_ROLES:
            decision = user_policy.create(Principal(id=3, role=role))
            assert decision.reason == "Forbidden: Only admins can create users"


class TestUpdate:
    def test_admin_updates_anyone(self, admin, target):
        assert user_policy.update(admin, target).allowed
        assert user_policy.update(admin, target, changes_role=True).allowed

    @pytest.mark.parametrize("role", NON_ADMIN_ROLES)
    def test_non_admin_updates_only_self(self, role, target):
        actor = Principal(id=3, role=role)
        assert user_policy.update(actor, actor).allowed

        decision = user_policy.update(actor, target)
        assert decision.reason == "You can only update your own profile"

    @pytest.mark.parametrize("role", list(Role))
    def test_never_change_own_role(self, role):
        actor = Principal(id=3, role=role)
        decision = user_policy.update(actor, actor, changes_role=True)
        assert decision.denied
        assert decision.reason == "You cannot change your own role"


class TestDelete:
    def test_admin_deletes_others(self, admin, target):
        assert user_policy.delete(admin, target).allowed

    def test_admin_never_deletes_self(self, admin):
        decision = user_policy.delete(admin, admin)
        assert decision.reason == "You cannot delete your own account"

    @pytest.mark.parametrize("role", NON_ADMIN_ROLES)
    def test_non_admin_denied(self, role, target):
        decision = user_policy.delete(Principal(id=3, role=role), target)
        assert decision.reason == "Forbidden: Only admins can delete users"


class TestPromote:
    def test_admin_promotes_others(self, admin, target):
        assert user_policy.promote(admin, target).allowed

    def test_admin_never_promotes_self(self, admin):
        for _ in range(3):
            decision = user_policy.promote(admin, admin)
            assert decision.denied
            assert decision.reason == "You cannot change your own role"

    @pytest.mark.parametrize("role", NON_ADMIN_ROLES)
    def test_non_admin_denied(self, role, target):
        decision = user_policy.promote(Principal(id=3, role=role), target)
        assert decision.reason == "Forbidden: Only admins can promote users"

    def test_self_is_identity_not_email(self, admin):
        twin = Principal(id=99, role=Role.ADMIN, email=admin.email, name=admin.name)
        assert user_policy.promote(admin, twin).allowed
        assert user_policy.delete(admin, twin).allowed
