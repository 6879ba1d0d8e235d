"""JWT access token issuing and verification."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt

from country_accounts.common import Identity, Role

LOGGER = logging.getLogger(__name__)

TOKEN_TYPE = "access_token"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class SecurityManager:
    """Signs and verifies access tokens with a process-wide secret key.

    :param str secret_key: Secret key for JWT signing (generated if not provided)
    :param str algorithm: JWT signing algorithm
    :param int expire_minutes: Token lifetime in minutes, absolute and not renewable
    :param clock: Source of the current time used when issuing tokens only;
        verification always checks against the real current time

    Token times are whole seconds, so a token issued at T may stop verifying
    up to one second before T + expire_minutes.
    """

    DEFAULT_JWT_ALGORITHM = "HS256"
    DEFAULT_TOKEN_EXPIRE_MINUTES = 60
    MINIMUM_JWT_SECRET_KEY_LENGTH = 32

    secret_key: str | None = None
    algorithm: str = DEFAULT_JWT_ALGORITHM
    expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)

    def __post_init__(self) -> None:
        """Generate secret key if not provided."""
        if (
            self.secret_key is None
            or len(self.secret_key) < self.MINIMUM_JWT_SECRET_KEY_LENGTH
        ):
            LOGGER.warning(
                "No usable secret key configured, tokens will not survive a restart",
            )
            self.secret_key = os.urandom(64).hex()

    def create_access_token(self, identity: Identity) -> str:
        """Create a new JWT access token for the caller.

        :param identity: Subject id and role to encode
        :return: A JWT access token as a string
        """
        issued_at = self.clock()
        expire = issued_at + timedelta(minutes=self.expire_minutes)

        payload = {
            "sub": identity.subject_id,
            "role": str(identity.role),
            "exp": expire,
            "iat": issued_at,
            "type": TOKEN_TYPE,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Identity | None:
        """Verify and decode a JWT token, returning the caller identity.

        Fails for a bad signature, a malformed token, or once the current time
        reaches the encoded expiry.

        :param token: The JWT token string to verify
        :return: The Identity if the token is valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            LOGGER.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError as e:
            LOGGER.debug("Rejected invalid token: %s", e)
            return None

        if payload.get("type") != TOKEN_TYPE:
            return None

        subject_id = payload.get("sub")
        role_tag = payload.get("role")

        if not subject_id or role_tag is None:
            return None

        try:
            role = Role(role_tag)
        except ValueError:
            LOGGER.debug("Rejected token with unknown role: %s", role_tag)
            return None

        return Identity(subject_id=subject_id, role=role)
