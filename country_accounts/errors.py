"""Exceptions raised by the account service.

Every exception carries the HTTP status and the message that the application
returns to the client as ``{"error": message}``.
"""

from fastapi import status


class AccountServiceError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Create a new error.

        :param message: Message shown to the client, defaults to the class message
        :param headers: Extra response headers
        """
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AccountServiceError):
    """Raised when request input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AccountServiceError):
    """Raised when the bearer token is missing, invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AccountServiceError):
    """Raised when the caller's role does not match the route's role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class InvalidCredentialsError(AccountServiceError):
    """Raised on login failure, whether the email or the password is wrong."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invalid email or password"


class NotFoundError(AccountServiceError):
    """Raised when the user or the favorite referenced is absent."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class ConflictError(AccountServiceError):
    """Raised when a write would duplicate an existing entry."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Country already in favorites"


class EmailTakenError(ConflictError):
    """Raised when an email is already registered to another user."""

    # the existing clients expect a server error for duplicate emails
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Email already registered"


class InternalError(AccountServiceError):
    """Raised when the store or the hasher fails unexpectedly."""
