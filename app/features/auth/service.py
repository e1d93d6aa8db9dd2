"""
Authentication and self-service profile operations.
"""
from datetime import datetime, timezone
from typing import Any
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotAuthenticated
from app.core.service import commit_or_conflict
from app.features.auth.schemas import CurrentUserResponse
from app.features.permissions.catalog import PermissionName
from app.features.permissions.dependencies import authorize, effective_permissions
from app.features.users.auth import create_access_token, hash_password, verify_password
from app.features.users.models import User
from app.features.users.validation import validate_profile
from app.utils import get_logger


log = get_logger(__name__)


async def login(db: AsyncSession, email: str, password: str) -> str:
    """
    Check credentials and issue a bearer token.
    
    Raises:
        NotAuthenticated: If the email is unknown or the password doesn't match
    """
    user = await db.scalar(select(User).where(func.lower(User.email) == email.strip().lower()))
    if user is None or not verify_password(password, user.password):
        log.info("Failed login for %r", email)
        raise NotAuthenticated("Invalid email or password")
    
    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    
    log.info("User %s logged in", user.id)
    return create_access_token(user.id)


async def current_user(db: AsyncSession, user: User) -> CurrentUserResponse:
    """The acting user plus their effective permission names, sorted."""
    response = CurrentUserResponse.model_validate(user)
    response.permissions = sorted(await effective_permissions(db, user))
    return response


async def show_profile(db: AsyncSession, user: User) -> CurrentUserResponse:
    await authorize(db, user, PermissionName.VIEW_PROFILE)
    return await current_user(db, user)


async def update_profile(db: AsyncSession, user: User, payload: Any) -> User:
    """
    Update the acting user's name, email and optionally password.
    
    Roles can't be changed here.
    """
    await authorize(db, user, PermissionName.EDIT_PROFILE)
    changes = await validate_profile(db, payload, user.id)
    
    user.name = changes.name
    user.email = changes.email
    if changes.password:
        user.password = hash_password(changes.password)
    await commit_or_conflict(db, "email", "A user with this email already exists.")
    
    log.info("User %s updated their profile", user.id)
    return user
