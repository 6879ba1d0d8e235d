"""Salted one-way password hashing backed by bcrypt."""

import asyncio
import logging
from dataclasses import dataclass

from bcrypt import checkpw, gensalt, hashpw

from country_accounts.errors import InternalError, ValidationError

LOGGER = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


@dataclass
class PasswordHasher:
    """Hash and verify passwords off the event loop.

    :param int rounds: bcrypt cost factor
    """

    DEFAULT_ROUNDS = 10
    MIN_ROUNDS = 4
    MAX_ROUNDS = 31

    rounds: int = DEFAULT_ROUNDS

    def __post_init__(self) -> None:
        """Prepare the digest compared against when no stored digest exists."""
        self._dummy_hash = hashpw(b"dummy-password", gensalt(self.rounds))

    @staticmethod
    def validate_password(password: str | None) -> bytes:
        """Check a plaintext password and return its encoded form.

        :param password: The plaintext password
        :return: The UTF-8 encoded password
        :raises ValidationError: If the password is empty or too long
        """
        if not password:
            msg = "Password is required"
            raise ValidationError(msg)
        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            msg = f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
            raise ValidationError(msg)
        return encoded

    async def hash(self, password: str) -> str:
        """Produce a salted digest, different on every call.

        :param password: The plaintext password
        :return: The bcrypt digest as text
        """
        encoded = self.validate_password(password)
        try:
            digest = await asyncio.to_thread(hashpw, encoded, gensalt(self.rounds))
        except ValueError as e:
            LOGGER.error("Password hashing failed: %s", e)
            msg = "Failed to hash password"
            raise InternalError(msg) from e
        return digest.decode()

    async def verify(self, password: str, digest: str | None) -> bool:
        """Check a plaintext password against a stored digest.

        When ``digest`` is None the password is still checked against a dummy
        digest so a missing account costs the same time as a wrong password.
        A password longer than ``hash`` accepts never matches.

        :param password: The plaintext password
        :param digest: The stored digest, or None if there is no account
        :return: True iff ``password`` produced ``digest``
        """
        encoded = (password or "").encode()
        too_long = len(encoded) > MAX_PASSWORD_BYTES
        stored = (
            digest.encode() if digest is not None and not too_long else self._dummy_hash
        )
        encoded = encoded[:MAX_PASSWORD_BYTES]
        try:
            matches = await asyncio.to_thread(checkpw, encoded, stored)
        except ValueError:
            LOGGER.warning("Stored password digest is malformed")
            return False
        return matches and digest is not None and not too_long
