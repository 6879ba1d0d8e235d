"""Account and favorites routes for the FastAPI application.

Provides endpoints for registration, login, self-service account management
and the favorite countries list.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from country_accounts.auth import Validate
from country_accounts.common import Identity, Role

from .models import (
    FavoriteRequest,
    FavoritesResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UpdateUserRequest,
    UserEnvelope,
    UserResponse,
    UserUpdatedResponse,
)
from .service import AccountService

LOGGER = logging.getLogger(__name__)


def configure_account_router(
    router: APIRouter,
    service: AccountService,
    validate: Validate,
) -> APIRouter:
    """Configure the account router.

    :param router: The APIRouter to configure
    :param service: The AccountService handling every route
    :param validate: The validator providing the token and role dependencies
    :return: The configured APIRouter
    """
    caller = Annotated[Identity, Depends(validate.role(Role.USER))]

    @router.post(
        "/register",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def register(body: RegisterRequest) -> MessageResponse:
        await service.register(body.name, body.email, body.password, body.role)
        return MessageResponse(message="User registered successfully")

    @router.post("/login", response_model=LoginResponse)
    async def login(body: LoginRequest) -> LoginResponse:
        token = await service.login(body.email, body.password)
        return LoginResponse(token=token)

    @router.get("/user", response_model=UserEnvelope)
    async def get_user(identity: caller) -> UserEnvelope:
        user = await service.get_self(identity)
        return UserEnvelope(user=UserResponse.from_stored(user))

    @router.put("/update/user", response_model=UserUpdatedResponse)
    async def update_user(
        body: UpdateUserRequest,
        identity: caller,
    ) -> UserUpdatedResponse:
        user = await service.update_self(
            identity,
            name=body.name,
            email=body.email,
            password=body.password,
        )
        return UserUpdatedResponse(
            message="User updated successfully",
            user=UserResponse.from_stored(user),
        )

    @router.delete("/delete/user", response_model=MessageResponse)
    async def delete_user(identity: caller) -> MessageResponse:
        await service.delete_self(identity)
        return MessageResponse(message="User deleted successfully")

    @router.put("/add/favorites", response_model=MessageResponse)
    async def add_favorite(
        body: FavoriteRequest,
        identity: caller,
    ) -> MessageResponse:
        await service.add_favorite(identity, body.country_id)
        return MessageResponse(message="Country added to favorites")

    @router.get("/favorites", response_model=FavoritesResponse)
    async def get_favorites(identity: caller) -> FavoritesResponse:
        favorites = await service.get_favorites(identity)
        return FavoritesResponse(favorites=favorites)

    @router.delete("/remove/favorites", response_model=MessageResponse)
    async def remove_favorite(
        body: FavoriteRequest,
        identity: caller,
    ) -> MessageResponse:
        await service.remove_favorite(identity, body.country_id)
        return MessageResponse(message="Country removed from favorites")

    return router
