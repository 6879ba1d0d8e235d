"""Tests for the account service operations."""

import pytest

from country_accounts.accounts import AccountService
from country_accounts.common import Identity, Role
from country_accounts.errors import (
    ConflictError,
    EmailTakenError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)


async def _register_and_login(
    service: AccountService,
    email: str = "a@x.com",
    password: str = "secret1",
) -> Identity:
    await service.register("A", email, password)
    token = await service.login(email, password)
    identity = service.security_manager.verify_token(token)
    assert identity is not None
    return identity


@pytest.mark.asyncio
class TestRegisterAndLogin:
    """Registration and credential checks."""

    async def test_login_token_carries_default_role(
        self,
        service: AccountService,
    ) -> None:
        await service.register("A", "a@x.com", "secret1", requested_role="admin")

        token = await service.login("a@x.com", "secret1")
        identity = service.security_manager.verify_token(token)

        assert identity is not None
        assert identity.role is Role.USER
        user = await service.get_self(identity)
        assert user.role == "user"

    async def test_password_is_stored_hashed(self, service: AccountService) -> None:
        identity = await _register_and_login(service)

        user = await service.get_self(identity)

        assert user.password_hash != "secret1"
        assert await service.password_hasher.verify("secret1", user.password_hash)

    async def test_duplicate_email_creates_no_second_record(
        self,
        service: AccountService,
    ) -> None:
        await service.register("A", "a@x.com", "secret1")

        with pytest.raises(EmailTakenError):
            await service.register("B", "a@x.com", "secret2")

        cursor = await service.queries.connection.execute(
            "SELECT COUNT(*) FROM users WHERE email = ?",
            ("a@x.com",),
        )
        assert (await cursor.fetchone())[0] == 1

    @pytest.mark.parametrize(
        ("name", "email", "password"),
        [
            (None, "a@x.com", "secret1"),
            ("A", "", "secret1"),
            ("A", "a@x.com", None),
        ],
    )
    async def test_missing_fields_are_rejected(
        self,
        service: AccountService,
        name: str | None,
        email: str | None,
        password: str | None,
    ) -> None:
        with pytest.raises(ValidationError):
            await service.register(name, email, password)

    async def test_wrong_password_and_unknown_email_look_the_same(
        self,
        service: AccountService,
    ) -> None:
        await service.register("A", "a@x.com", "secret1")

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.login("a@x.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await service.login("nobody@x.com", "secret1")

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.status_code == unknown_email.value.status_code


@pytest.mark.asyncio
class TestSelfService:
    """Operations scoped to the caller's identity."""

    async def test_update_name_only(self, service: AccountService) -> None:
        identity = await _register_and_login(service)
        before = await service.get_self(identity)

        after = await service.update_self(identity, name="B")

        assert after.name == "B"
        assert after.email == before.email
        assert after.password_hash == before.password_hash

    async def test_update_ignores_empty_fields(self, service: AccountService) -> None:
        identity = await _register_and_login(service)

        after = await service.update_self(identity, name="", email="", password="")

        assert after.name == "A"
        assert after.email == "a@x.com"

    async def test_update_password_is_rehashed(self, service: AccountService) -> None:
        identity = await _register_and_login(service)

        await service.update_self(identity, password="secret2")

        with pytest.raises(InvalidCredentialsError):
            await service.login("a@x.com", "secret1")
        assert await service.login("a@x.com", "secret2")

    async def test_update_email_to_taken_one(self, service: AccountService) -> None:
        await service.register("Other", "b@x.com", "secret1")
        identity = await _register_and_login(service)

        with pytest.raises(EmailTakenError):
            await service.update_self(identity, email="b@x.com")

    async def test_delete_makes_stale_token_not_found(
        self,
        service: AccountService,
    ) -> None:
        identity = await _register_and_login(service)

        await service.delete_self(identity)

        with pytest.raises(NotFoundError, match="User not found"):
            await service.get_self(identity)
        with pytest.raises(NotFoundError):
            await service.update_self(identity, name="B")
        with pytest.raises(NotFoundError):
            await service.delete_self(identity)
        with pytest.raises(NotFoundError):
            await service.get_favorites(identity)


@pytest.mark.asyncio
class TestFavorites:
    """Favorites mutation contract."""

    async def test_add_twice_is_rejected(self, service: AccountService) -> None:
        identity = await _register_and_login(service)

        await service.add_favorite(identity, "USA")
        assert await service.get_favorites(identity) == ["USA"]

        with pytest.raises(ConflictError, match="already in favorites") as exc_info:
            await service.add_favorite(identity, "USA")

        assert exc_info.value.status_code == 400
        assert await service.get_favorites(identity) == ["USA"]

    async def test_missing_country_id(self, service: AccountService) -> None:
        identity = await _register_and_login(service)

        with pytest.raises(ValidationError, match="countryId is required"):
            await service.add_favorite(identity, None)
        with pytest.raises(ValidationError, match="countryId is required"):
            await service.remove_favorite(identity, "")

    async def test_remove_absent_favorite(self, service: AccountService) -> None:
        identity = await _register_and_login(service)
        await service.add_favorite(identity, "USA")

        with pytest.raises(NotFoundError, match="Country not in favorites"):
            await service.remove_favorite(identity, "CAN")

        assert await service.get_favorites(identity) == ["USA"]

    async def test_remove_present_favorite(self, service: AccountService) -> None:
        identity = await _register_and_login(service)
        await service.add_favorite(identity, "USA")
        await service.add_favorite(identity, "CAN")

        await service.remove_favorite(identity, "USA")

        assert await service.get_favorites(identity) == ["CAN"]

    async def test_add_for_deleted_user(self, service: AccountService) -> None:
        identity = await _register_and_login(service)
        await service.delete_self(identity)

        with pytest.raises(NotFoundError, match="User not found"):
            await service.add_favorite(identity, "USA")
        with pytest.raises(NotFoundError, match="User not found"):
            await service.remove_favorite(identity, "USA")
