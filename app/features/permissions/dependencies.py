"""
Authorization resolver and FastAPI dependencies for route protection.

A user's effective permission set is the union of the permission names on
their directly assigned roles. There is no inheritance beyond that one hop,
no deny rules and no wildcards: a permission is held iff its exact name is in
the union. Nothing is cached; every check reads the current role graph.
"""
from typing import Optional
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.exceptions import Forbidden
from app.features.permissions.catalog import PermissionName
from app.features.permissions.models import Permission, role_permissions
from app.features.users.dependencies import get_current_actor
from app.features.users.models import User, user_roles
from app.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# Permission Checking Functions
# ============================================================================

async def effective_permissions(db: AsyncSession, actor: Optional[User]) -> frozenset[str]:
    """
    Get the names of all permissions an actor holds through their roles.
    
    An actor without identity (None) holds nothing.
    """
    if actor is None or actor.id is None:
        return frozenset()
    
    stmt = (
        select(Permission.name)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .join(user_roles, user_roles.c.role_id == role_permissions.c.role_id)
        .where(user_roles.c.user_id == actor.id)
        .distinct()
    )
    result = await db.execute(stmt)
    return frozenset(result.scalars().all())


async def has_permission(
    db: AsyncSession,
    actor: Optional[User],
    permission: PermissionName | str,
) -> bool:
    """
    Check if an actor holds a permission.
    
    Args:
        db: Database session
        actor: Acting user, or None when unauthenticated
        permission: Catalog member or raw permission name, matched exactly
    
    Returns:
        True if any of the actor's roles grants the permission, False otherwise
    """
    name = permission.value if isinstance(permission, PermissionName) else permission
    granted = name in await effective_permissions(db, actor)
    
    if not granted:
        log.debug("Actor %s denied %r", actor.id if actor else None, name)
    return granted


async def authorize(
    db: AsyncSession,
    actor: Optional[User],
    permission: PermissionName,
) -> None:
    """
    Raise Forbidden unless the actor holds ``permission``.
    
    Orchestrators call this before touching any record, so a denied caller
    learns nothing about whether the target exists.
    """
    if not await has_permission(db, actor, permission):
        log.info("Forbidden: actor=%s permission=%r", actor.id if actor else None, permission.value)
        raise Forbidden()


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def require_permission(permission: PermissionName):
    """
    FastAPI dependency to require a specific permission.
    
    Usage:
        @router.get("/dashboard")
        async def dashboard(
            user: User = Depends(require_permission(PermissionName.VIEW_DASHBOARD))
        ):
            pass
    
    Returns:
        Dependency function that returns the current actor if they hold the permission
    
    Raises:
        Forbidden: if the actor doesn't hold the permission
    """
    async def permission_dependency(
        db: AsyncSession = Depends(get_db),
        actor: Optional[User] = Depends(get_current_actor)
    ) -> User:
        await authorize(db, actor, permission)
        return actor
    
    return permission_dependency
