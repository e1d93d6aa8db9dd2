"""
Permission CRUD orchestration.
"""
from typing import Any
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import ListQuery, Page
from app.core.service import CrudService, actor_id
from app.features.permissions.catalog import Action, EntityKind
from app.features.permissions.models import Permission, role_permissions
from app.features.permissions.schemas import PermissionResponse
from app.features.permissions.validation import validate_permission
from app.utils import get_logger


log = get_logger(__name__)


class PermissionService(CrudService):
    model = Permission
    kind = EntityKind.PERMISSIONS

    async def list(self, db: AsyncSession, actor, query: ListQuery) -> Page[PermissionResponse]:
        """List permissions newest first, filtered by name."""
        await self._authorize(db, actor, Action.VIEW)
        items, meta = await self._search(db, query)
        return Page[PermissionResponse](
            data=[PermissionResponse.model_validate(p) for p in items], **meta
        )

    async def create(self, db: AsyncSession, actor, payload: Any) -> Permission:
        await self._authorize(db, actor, Action.CREATE)
        changes = await validate_permission(db, payload)

        permission = Permission(name=changes.name)
        db.add(permission)
        await self._commit(db)

        log.info("Permission %r created by %s", permission.name, actor_id(actor))
        return permission

    async def show(self, db: AsyncSession, actor, permission_id: str) -> Permission:
        await self._authorize(db, actor, Action.VIEW)
        return await self._get_or_404(db, permission_id)

    async def edit_form(self, db: AsyncSession, actor, permission_id: str) -> Permission:
        await self._authorize(db, actor, Action.EDIT)
        return await self._get_or_404(db, permission_id)

    async def update(self, db: AsyncSession, actor, permission_id: str, payload: Any) -> Permission:
        """Rename a permission; its id and role memberships are kept."""
        await self._authorize(db, actor, Action.EDIT)
        permission = await self._get_or_404(db, permission_id)
        changes = await validate_permission(db, payload, permission_id=permission.id)

        permission.name = changes.name
        await self._commit(db)

        log.info("Permission %s renamed to %r by %s", permission.id, permission.name, actor_id(actor))
        return permission

    async def _detach(self, db: AsyncSession, entity: Permission) -> None:
        await db.execute(delete(role_permissions).where(role_permissions.c.permission_id == entity.id))


permission_service = PermissionService()
