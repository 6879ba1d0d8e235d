"""FastAPI dependency validators for authentication and authorization."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from country_accounts.common import Identity, Role
from country_accounts.errors import AuthenticationError, AuthorizationError

from .security_manager import SecurityManager


# missing headers are reported through AuthenticationError, not FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)

LOGGER = logging.getLogger(__name__)


class Validate:
    """Holds validator dependencies for FastAPI authentication/authorization."""

    def __init__(self, security_manager: SecurityManager) -> None:
        """Create a new validator instance.

        :param security_manager: JWT security manager
        """
        self.security_manager = security_manager

    def jwt_token(
        self,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None,
            Security(bearer_scheme),
        ],
    ) -> Identity:
        """Validate the bearer access token and return the caller identity."""
        if credentials is None:
            LOGGER.debug("Request without bearer token rejected")
            msg = "Authorization token is required"
            raise AuthenticationError(msg)

        identity = self.security_manager.verify_token(credentials.credentials)

        if not identity:
            LOGGER.debug("JWT token validation failed")
            raise AuthenticationError

        LOGGER.debug("JWT token validated for subject: %s", identity.subject_id)
        return identity

    def role(self, required_role: Role) -> Callable[..., Identity]:
        """Return a role-based dependency validator."""

        def validator(
            identity: Annotated[Identity, Depends(self.jwt_token)],
        ) -> Identity:
            if not identity.role.check_permission(required_role):
                LOGGER.debug(
                    "Role validation failed for subject %s: %s != %s",
                    identity.subject_id,
                    identity.role,
                    required_role,
                )
                raise AuthorizationError
            return identity

        return validator
