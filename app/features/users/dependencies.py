"""
FastAPI dependencies for resolving the acting user.
"""
from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.exceptions import NotAuthenticated
from app.features.users.models import User
from app.features.users.auth import verify_jwt_token


security = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Optional[User]:
    """
    Resolve the acting user from the bearer token.
    
    Returns None when no token is sent or its user no longer exists; such an
    actor holds no permissions, so every guarded operation answers 403.
    A token that fails verification raises NotAuthenticated (401).
    """
    if credentials is None:
        return None
    
    payload = verify_jwt_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticated("Invalid token payload")
    
    return await db.scalar(select(User).where(User.id == user_id))


async def get_current_user(
    actor: Annotated[Optional[User], Depends(get_current_actor)]
) -> User:
    """
    Require an authenticated user.
    
    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    if actor is None:
        raise NotAuthenticated()
    return actor


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"


# Route parameter shorthands; FastAPI shares one session per request between them
CurrentActor = Annotated[Optional[User], Depends(get_current_actor)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
