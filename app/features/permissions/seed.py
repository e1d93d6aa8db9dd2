"""
Idempotent bootstrap of the permission catalog and the default roles.

Entries are matched by name, so re-running never duplicates anything. Default
roles have their permission sets synced on every run: ``admin`` gets every
permission that exists, ``user`` gets the basic self-service set.
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.catalog import DEFAULT_PERMISSIONS, DEFAULT_ROLES
from app.features.permissions.models import Permission, Role
from app.features.users.auth import hash_password
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    """
    Create default permissions.
    
    Returns:
        Dictionary mapping permission names to Permission objects
    """
    log.info("Creating default permissions...")
    permissions_map = {}
    
    for permission_name in DEFAULT_PERMISSIONS:
        name = permission_name.value
        existing = await db.scalar(select(Permission).where(Permission.name == name))
        
        if existing:
            log.debug(f"Permission '{name}' already exists, skipping")
            permissions_map[name] = existing
            continue
        
        permission = Permission(name=name)
        db.add(permission)
        permissions_map[name] = permission
        log.info(f"Created permission: {name}")
    
    await db.commit()
    log.info(f"{len(permissions_map)} default permissions present")
    return permissions_map


async def seed_roles(db: AsyncSession, permissions_map: dict[str, Permission]) -> dict[str, Role]:
    """
    Create default roles and sync their permissions.
    
    Args:
        db: Database session
        permissions_map: Dictionary of permission name -> Permission object
    """
    log.info("Creating default roles...")
    roles_map = {}
    
    for role_name, role_permissions in DEFAULT_ROLES.items():
        role = await db.scalar(
            select(Role).where(Role.name == role_name).execution_options(populate_existing=True)
        )
        if role is None:
            role = Role(name=role_name)
            db.add(role)
            log.info(f"Created role '{role_name}'")
        
        if role_permissions == "ALL":
            # Admin gets every permission, including ones added after the catalog
            result = await db.execute(select(Permission))
            role.permissions = list(result.scalars().all())
        else:
            role.permissions = [permissions_map[p.value] for p in role_permissions]
        log.info(f"Role '{role_name}' synced with {len(role.permissions)} permissions")
        roles_map[role_name] = role
    
    await db.commit()
    log.info("Default roles created successfully")
    return roles_map


async def seed_admin_user(
    db: AsyncSession,
    admin_role: Role,
    name: str,
    email: Optional[str],
    password: Optional[str],
) -> Optional[User]:
    """Create a bootstrap administrator unless the email is unset or already taken."""
    if not email or not password:
        log.info("No bootstrap administrator configured")
        return None
    
    existing = await db.scalar(select(User).where(User.email == email))
    if existing:
        log.debug(f"User '{email}' already exists, skipping")
        return existing
    
    user = User(name=name, email=email, password=hash_password(password), roles=[admin_role])
    db.add(user)
    await db.commit()
    log.info(f"Created administrator {email}")
    return user


async def seed(db: AsyncSession) -> dict[str, Role]:
    """Seed permissions then roles."""
    permissions_map = await seed_permissions(db)
    return await seed_roles(db, permissions_map)
