"""
Login, current-user and profile routes.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Body, Depends, Request

from app.core import config
from app.core.rate_limit import limiter
from app.features.auth import service
from app.features.auth.schemas import (
    CurrentUserResponse,
    LoginRequest,
    ProfileMutationResponse,
    TokenResponse,
)
from app.features.users.dependencies import DbSession, get_current_user
from app.features.users.models import User
from app.features.users.schemas import UserWithRoles


router = APIRouter()
profile_router = APIRouter()

CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("/login", response_model=TokenResponse)
@limiter.limit(config.LOGIN_RATE_LIMIT)
async def login(request: Request, credentials: LoginRequest, db: DbSession):
    """Exchange email and password for a bearer token."""
    token = await service.login(db, credentials.email, credentials.password)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: CurrentUser, db: DbSession):
    """
    The authenticated user with their roles and effective permission names.
    
    Clients use ``permissions`` to decide which actions to offer.
    """
    return await service.current_user(db, user)


@profile_router.get("", response_model=CurrentUserResponse)
async def get_profile(user: CurrentUser, db: DbSession):
    """Requires `view profile`."""
    return await service.show_profile(db, user)


@profile_router.patch("", response_model=ProfileMutationResponse)
async def update_profile(user: CurrentUser, payload: Annotated[dict[str, Any], Body()], db: DbSession):
    """Update own name, email and password. Requires `edit profile`."""
    user = await service.update_profile(db, user, payload)
    return {"message": "Profile updated successfully.", "data": UserWithRoles.model_validate(user)}
