"""
User CRUD orchestration.

Update semantics:
- name and email are always written
- the password is re-hashed only when a non-empty new one is supplied
- the role set is replaced wholesale only when ``roles`` is in the payload
"""
from typing import Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import ListQuery, Page
from app.core.service import CrudService, actor_id
from app.features.permissions.catalog import Action, EntityKind
from app.features.permissions.models import Role
from app.features.roles.schemas import RoleResponse
from app.features.users.auth import hash_password
from app.features.users.models import User
from app.features.users.schemas import UserForm, UserWithRoles
from app.features.users.validation import validate_user
from app.utils import get_logger


log = get_logger(__name__)


class UserService(CrudService):
    model = User
    kind = EntityKind.USERS
    search_columns = ("name", "email")
    unique_field = "email"
    unique_message = "A user with this email already exists."

    async def _assignable_roles(self, db: AsyncSession) -> list[RoleResponse]:
        result = await db.execute(select(Role).order_by(Role.name))
        return [RoleResponse.model_validate(r) for r in result.scalars().all()]

    async def list(self, db: AsyncSession, actor, query: ListQuery) -> Page[UserWithRoles]:
        """List users newest first with their roles, filtered by name or email."""
        await self._authorize(db, actor, Action.VIEW)
        items, meta = await self._search(db, query)
        return Page[UserWithRoles](
            data=[UserWithRoles.model_validate(u) for u in items], **meta
        )

    async def create_form(self, db: AsyncSession, actor) -> UserForm:
        await self._authorize(db, actor, Action.CREATE)
        return UserForm(roles=await self._assignable_roles(db))

    async def create(self, db: AsyncSession, actor, payload: Any) -> User:
        await self._authorize(db, actor, Action.CREATE)
        changes = await validate_user(db, payload)

        user = User(
            name=changes.name,
            email=changes.email,
            password=hash_password(changes.password),
            roles=changes.roles or [],
        )
        db.add(user)
        await self._commit(db)

        log.info("User %s <%s> created by %s", user.id, user.email, actor_id(actor))
        return user

    async def show(self, db: AsyncSession, actor, user_id: str) -> User:
        await self._authorize(db, actor, Action.VIEW)
        return await self._get_or_404(db, user_id)

    async def edit_form(self, db: AsyncSession, actor, user_id: str) -> UserForm:
        await self._authorize(db, actor, Action.EDIT)
        user = await self._get_or_404(db, user_id)
        return UserForm(
            user=UserWithRoles.model_validate(user),
            roles=await self._assignable_roles(db),
        )

    async def update(self, db: AsyncSession, actor, user_id: str, payload: Any) -> User:
        await self._authorize(db, actor, Action.EDIT)
        user = await self._get_or_404(db, user_id)
        changes = await validate_user(db, payload, user_id=user.id)

        user.name = changes.name
        user.email = changes.email
        if changes.password:
            user.password = hash_password(changes.password)
        if changes.roles is not None:
            user.roles = changes.roles
        await self._commit(db)

        log.info("User %s updated by %s", user.id, actor_id(actor))
        return user


user_service = UserService()
