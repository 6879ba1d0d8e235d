"""Tests for identity-related functionality."""

import pytest

from country_accounts.common import Identity, Role
from country_accounts.common.user import DEFAULT_ROLE


def test_check_permission_requires_exact_role() -> None:
    """Roles are tags: only the same role passes."""
    assert Role.USER.check_permission(Role.USER)
    assert Role.ADMIN.check_permission(Role.ADMIN)

    assert not Role.ADMIN.check_permission(Role.USER)
    assert not Role.USER.check_permission(Role.ADMIN)


def test_default_role_is_user() -> None:
    assert DEFAULT_ROLE is Role.USER
    assert str(DEFAULT_ROLE) == "user"


def test_unknown_role_tag_is_rejected() -> None:
    with pytest.raises(ValueError):
        Role("owner")


def test_identity_is_immutable() -> None:
    identity = Identity(subject_id="abc", role=Role.USER)

    with pytest.raises(AttributeError):
        identity.role = Role.ADMIN  # type: ignore[misc]
