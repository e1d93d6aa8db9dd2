"""
Role CRUD orchestration.

A role's permission set is synced, never patched: when a payload carries
``permissions`` the set becomes exactly those permissions, and when the key
is absent the set is left alone.
"""
from typing import Any
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import ListQuery, Page
from app.core.service import CrudService, actor_id
from app.features.permissions.catalog import Action, EntityKind
from app.features.permissions.models import Permission, Role
from app.features.permissions.schemas import PermissionResponse
from app.features.roles.schemas import RoleForm, RoleWithPermissions
from app.features.roles.validation import validate_role
from app.features.users.models import user_roles
from app.utils import get_logger


log = get_logger(__name__)


class RoleService(CrudService):
    model = Role
    kind = EntityKind.ROLES

    async def _assignable_permissions(self, db: AsyncSession) -> list[PermissionResponse]:
        result = await db.execute(select(Permission).order_by(Permission.name))
        return [PermissionResponse.model_validate(p) for p in result.scalars().all()]

    async def list(self, db: AsyncSession, actor, query: ListQuery) -> Page[RoleWithPermissions]:
        """List roles newest first with their permissions, filtered by name."""
        await self._authorize(db, actor, Action.VIEW)
        items, meta = await self._search(db, query)
        return Page[RoleWithPermissions](
            data=[RoleWithPermissions.model_validate(r) for r in items], **meta
        )

    async def create_form(self, db: AsyncSession, actor) -> RoleForm:
        await self._authorize(db, actor, Action.CREATE)
        return RoleForm(permissions=await self._assignable_permissions(db))

    async def create(self, db: AsyncSession, actor, payload: Any) -> Role:
        """Create a role and, if requested, its permission set in one transaction."""
        await self._authorize(db, actor, Action.CREATE)
        changes = await validate_role(db, payload)

        role = Role(name=changes.name, permissions=changes.permissions or [])
        db.add(role)
        await self._commit(db)

        log.info("Role %r created by %s with %d permissions", role.name, actor_id(actor), len(role.permissions))
        return role

    async def show(self, db: AsyncSession, actor, role_id: str) -> Role:
        await self._authorize(db, actor, Action.VIEW)
        return await self._get_or_404(db, role_id)

    async def edit_form(self, db: AsyncSession, actor, role_id: str) -> RoleForm:
        await self._authorize(db, actor, Action.EDIT)
        role = await self._get_or_404(db, role_id)
        return RoleForm(
            role=RoleWithPermissions.model_validate(role),
            permissions=await self._assignable_permissions(db),
        )

    async def update(self, db: AsyncSession, actor, role_id: str, payload: Any) -> Role:
        await self._authorize(db, actor, Action.EDIT)
        role = await self._get_or_404(db, role_id)
        changes = await validate_role(db, payload, role_id=role.id)

        role.name = changes.name
        if changes.permissions is not None:
            role.permissions = changes.permissions
        await self._commit(db)

        log.info("Role %s updated by %s", role.id, actor_id(actor))
        return role

    async def _detach(self, db: AsyncSession, entity: Role) -> None:
        # role_permissions rows go with the Role.permissions relationship
        await db.execute(delete(user_roles).where(user_roles.c.role_id == entity.id))


role_service = RoleService()
