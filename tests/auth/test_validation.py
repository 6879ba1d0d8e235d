"""Tests for the authentication and role gate."""

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from country_accounts.auth import SecurityManager, Validate
from country_accounts.common import Identity, Role
from country_accounts.errors import AuthenticationError, AuthorizationError


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.fixture
def validate(security_manager: SecurityManager) -> Validate:
    return Validate(security_manager)


def test_valid_token_yields_identity(
    validate: Validate,
    security_manager: SecurityManager,
) -> None:
    identity = Identity(subject_id="u1", role=Role.USER)
    token = security_manager.create_access_token(identity)

    assert validate.jwt_token(_bearer(token)) == identity


def test_missing_token_is_rejected(validate: Validate) -> None:
    with pytest.raises(AuthenticationError) as exc_info:
        validate.jwt_token(None)

    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


def test_invalid_token_is_rejected(validate: Validate) -> None:
    with pytest.raises(AuthenticationError):
        validate.jwt_token(_bearer("garbage"))


def test_matching_role_passes(validate: Validate) -> None:
    identity = Identity(subject_id="u1", role=Role.USER)

    assert validate.role(Role.USER)(identity) == identity


def test_mismatched_role_is_forbidden(validate: Validate) -> None:
    validator = validate.role(Role.USER)

    with pytest.raises(AuthorizationError) as exc_info:
        validator(Identity(subject_id="u1", role=Role.ADMIN))

    assert exc_info.value.status_code == 403
