"""Stored records and request/response models for the account routes."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass
class StoredUser:
    """A user row as held by the credential store, password digest included."""

    id: str
    name: str
    email: str
    password_hash: str = field(repr=False)
    role: str
    favorites: list[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


class CamelModel(BaseModel):
    """Model serialized with the camelCase names the web client uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Registration payload.

    :param role: Accepted for compatibility and ignored, every account gets
        the default role
    """

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class UpdateUserRequest(CamelModel):
    """Partial update, absent or empty fields are left unchanged."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class FavoriteRequest(CamelModel):
    country_id: str | None = None


class UserResponse(CamelModel):
    """A user record without its password digest."""

    id: str
    name: str
    email: str
    role: str
    favorites: list[str]
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_stored(cls, user: StoredUser) -> "UserResponse":
        """Create UserResponse from a StoredUser.

        :param user: StoredUser instance
        :return: UserResponse instance
        """
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            favorites=list(user.favorites),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    token: str


class UserEnvelope(BaseModel):
    user: UserResponse


class UserUpdatedResponse(MessageResponse):
    user: UserResponse


class FavoritesResponse(BaseModel):
    favorites: list[str]
