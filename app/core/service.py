"""
Shared request flow for the entity orchestrators.

Every operation follows the same path: authorize the actor, load the target
(NotFound if missing), validate, write in one transaction, respond. The
subclasses supply the entity specifics.
"""
from typing import Any, ClassVar, Optional

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictViolation, NotFound
from app.core.pagination import ListQuery, paginate
from app.features.permissions.catalog import Action, EntityKind
from app.features.permissions.dependencies import authorize
from app.utils import get_logger


log = get_logger(__name__)


class CrudService:
    """Base orchestrator for one entity kind."""

    model: ClassVar[Any]
    kind: ClassVar[EntityKind]
    # Columns matched by the list search
    search_columns: ClassVar[tuple[str, ...]] = ("name",)
    # Column guarded by a unique constraint and the message shown when it clashes
    unique_field: ClassVar[str] = "name"
    unique_message: ClassVar[str] = "The name has already been taken."

    async def _authorize(self, db: AsyncSession, actor, action: Action) -> None:
        await authorize(db, actor, self.kind.permission(action))

    def _select(self) -> Select:
        # Refresh rows already in the session so relation sets reflect the store
        return select(self.model).execution_options(populate_existing=True)

    async def _get_or_404(self, db: AsyncSession, entity_id: str):
        entity = await db.scalar(self._select().where(self.model.id == entity_id))
        if entity is None:
            raise NotFound(f"{self.kind.label} not found.")
        return entity

    async def _commit(self, db: AsyncSession) -> None:
        await commit_or_conflict(db, self.unique_field, self.unique_message)

    def message(self, action: str) -> str:
        return f"{self.kind.label} {action} successfully."

    async def _detach(self, db: AsyncSession, entity) -> None:
        """
        Remove association rows pointing at ``entity`` from the other side.

        Rows in the entity's own ``secondary`` relationships (``User.roles``,
        ``Role.permissions``) are deleted by the ORM together with the entity, so
        the base class has nothing to do. Subclasses whose entity is the target
        of another model's relationship override this.
        """

    async def _search(self, db: AsyncSession, query: ListQuery) -> tuple[list, dict]:
        stmt = self._select()
        term = query.term
        if term:
            term = term.lower()
            stmt = stmt.where(or_(*[
                func.lower(getattr(self.model, column)).contains(term, autoescape=True)
                for column in self.search_columns
            ]))
        stmt = stmt.order_by(self.model.created_at.desc(), self.model.id.desc())
        return await paginate(db, stmt, query.page, self.kind.page_size)

    async def delete(self, db: AsyncSession, actor, entity_id: str) -> str:
        """
        Delete an entity and every relation membership it takes part in.

        Returns:
            The confirmation message

        Raises:
            Forbidden: actor lacks ``delete <kind>``
            NotFound: the id does not resolve (including an already deleted id)
        """
        await self._authorize(db, actor, Action.DELETE)
        entity = await self._get_or_404(db, entity_id)

        await self._detach(db, entity)
        await db.delete(entity)
        await db.commit()

        log.info("%s %s deleted by %s", self.kind.label, entity_id, actor_id(actor))
        return self.message("deleted")


async def commit_or_conflict(db: AsyncSession, field: str, message: str) -> None:
    """Commit the unit of work, turning a unique-constraint race into a field error on ``field``."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.warning("Unique constraint rejected a write on %r", field)
        raise ConflictViolation(field, message)


def actor_id(actor) -> Optional[str]:
    return actor.id if actor is not None else None
