"""Business logic for user accounts and their favorite countries.

Every operation after login is scoped to the identity taken from the
caller's verified access token; no operation accepts a target user id from
the request body.
"""

import logging

from country_accounts.auth import PasswordHasher, SecurityManager
from country_accounts.common import Identity, Role
from country_accounts.common.user import DEFAULT_ROLE
from country_accounts.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)

from .models import StoredUser
from .queries import AccountQueries

LOGGER = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
FAVORITE_NOT_FOUND = "Country not in favorites"
FAVORITE_EXISTS = "Country already in favorites"
COUNTRY_ID_REQUIRED = "countryId is required"


def _require(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        msg = f"{field_name} is required"
        raise ValidationError(msg)
    return value


class AccountService:
    """Register, authenticate and manage the caller's own account."""

    def __init__(
        self,
        queries: AccountQueries,
        security_manager: SecurityManager,
        password_hasher: PasswordHasher,
    ) -> None:
        """Create the service.

        :param queries: Credential store repository
        :param security_manager: Token issuer/verifier
        :param password_hasher: Password hasher
        """
        self.queries = queries
        self.security_manager = security_manager
        self.password_hasher = password_hasher

    async def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        requested_role: str | None = None,
    ) -> str:
        """Create a new account with an empty favorites list.

        The role is always the default role; ``requested_role`` is only logged.

        :return: The id of the new user
        :raises ValidationError: If a field is missing or the password is invalid
        :raises EmailTakenError: If the email is already registered
        """
        name = _require(name, "name")
        email = _require(email, "email")
        password_hash = await self.password_hasher.hash(password)

        if requested_role and requested_role != DEFAULT_ROLE:
            LOGGER.debug(
                "Ignoring requested role %r at registration of %s",
                requested_role,
                email,
            )

        user_id = await self.queries.create_user(
            name,
            email,
            password_hash,
            str(DEFAULT_ROLE),
        )
        LOGGER.info("Registered user %s", user_id)
        return user_id

    async def login(self, email: str | None, password: str | None) -> str:
        """Check credentials and issue an access token.

        An unknown email and a wrong password raise the same error.

        :return: A signed access token
        :raises InvalidCredentialsError: If the credentials do not match
        """
        user = await self.queries.get_user_by_email(email) if email else None
        digest = user.password_hash if user else None

        if not await self.password_hasher.verify(password or "", digest):
            LOGGER.debug("Failed login attempt")
            raise InvalidCredentialsError

        try:
            role = Role(user.role)
        except ValueError:
            LOGGER.error("User %s has unknown role %r", user.id, user.role)
            raise InvalidCredentialsError from None

        return self.security_manager.create_access_token(
            Identity(subject_id=user.id, role=role),
        )

    async def get_self(self, identity: Identity) -> StoredUser:
        """Return the caller's record.

        :raises NotFoundError: If the user no longer exists
        """
        user = await self.queries.get_user(identity.subject_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def update_self(
        self,
        identity: Identity,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> StoredUser:
        """Overwrite the provided fields of the caller's record.

        Empty values count as not provided. A new password is re-hashed.

        :return: The updated record
        :raises NotFoundError: If the user no longer exists
        :raises EmailTakenError: If ``email`` belongs to another user
        """
        password_hash = await self.password_hasher.hash(password) if password else None

        updated = await self.queries.update_user(
            identity.subject_id,
            name=name or None,
            email=email or None,
            password_hash=password_hash,
        )
        if not updated:
            raise NotFoundError(USER_NOT_FOUND)
        return await self.get_self(identity)

    async def delete_self(self, identity: Identity) -> None:
        """Permanently remove the caller's record and favorites.

        :raises NotFoundError: If the user no longer exists
        """
        if not await self.queries.delete_user(identity.subject_id):
            raise NotFoundError(USER_NOT_FOUND)
        LOGGER.info("Deleted user %s", identity.subject_id)

    async def get_favorites(self, identity: Identity) -> list[str]:
        """Return the caller's favorites in insertion order.

        :raises NotFoundError: If the user no longer exists
        """
        if not await self.queries.user_exists(identity.subject_id):
            raise NotFoundError(USER_NOT_FOUND)
        return await self.queries.list_favorites(identity.subject_id)

    async def add_favorite(self, identity: Identity, country_id: str | None) -> None:
        """Add a country code to the caller's favorites.

        :raises ValidationError: If ``country_id`` is missing
        :raises ConflictError: If the country is already a favorite
        :raises NotFoundError: If the user no longer exists
        """
        if not country_id:
            raise ValidationError(COUNTRY_ID_REQUIRED)

        if await self.queries.add_favorite(identity.subject_id, country_id):
            LOGGER.debug("User %s added favorite %s", identity.subject_id, country_id)
            return

        if not await self.queries.user_exists(identity.subject_id):
            raise NotFoundError(USER_NOT_FOUND)
        raise ConflictError(FAVORITE_EXISTS)

    async def remove_favorite(
        self,
        identity: Identity,
        country_id: str | None,
    ) -> None:
        """Remove a country code from the caller's favorites.

        :raises ValidationError: If ``country_id`` is missing
        :raises NotFoundError: If the user or the favorite does not exist
        """
        if not country_id:
            raise ValidationError(COUNTRY_ID_REQUIRED)

        if await self.queries.remove_favorite(identity.subject_id, country_id):
            LOGGER.debug(
                "User %s removed favorite %s",
                identity.subject_id,
                country_id,
            )
            return

        if not await self.queries.user_exists(identity.subject_id):
            raise NotFoundError(USER_NOT_FOUND)
        raise NotFoundError(FAVORITE_NOT_FOUND)
