"""
User management API routes.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Body, Query, status

from app.core.pagination import ListQuery, Page
from app.features.users.dependencies import CurrentActor as Actor, DbSession as Session
from app.features.permissions.schemas import MessageResponse
from app.features.users.schemas import UserForm, UserMutationResponse, UserWithRoles
from app.features.users.service import user_service


router = APIRouter(tags=["users"])


@router.get("", response_model=Page[UserWithRoles])
async def list_users(query: Annotated[ListQuery, Query()], actor: Actor, db: Session):
    """List users with their roles, newest first, 9 per page. Search matches name or email."""
    return await user_service.list(db, actor, query)


@router.get("/create", response_model=UserForm)
async def create_user_form(actor: Actor, db: Session):
    """All roles a new user can be given. Requires `create users`."""
    return await user_service.create_form(db, actor)


@router.post("", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: Annotated[dict[str, Any], Body()], actor: Actor, db: Session):
    """
    Create a user.
    
    Body: ``name``, ``email``, ``password``, ``password_confirmation`` and
    optionally ``roles`` (role ids). Requires `create users`.
    """
    user = await user_service.create(db, actor, payload)
    return {"message": user_service.message("created"), "data": UserWithRoles.model_validate(user)}


@router.get("/{user_id}", response_model=UserWithRoles)
async def get_user(user_id: str, actor: Actor, db: Session):
    """Get a user with their roles. Requires `view users`."""
    return await user_service.show(db, actor, user_id)


@router.get("/{user_id}/edit", response_model=UserForm)
async def edit_user_form(user_id: str, actor: Actor, db: Session):
    """A user with their roles plus every assignable role. Requires `edit users`."""
    return await user_service.edit_form(db, actor, user_id)


@router.put("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    user_id: str,
    payload: Annotated[dict[str, Any], Body()],
    actor: Actor,
    db: Session,
):
    """
    Update a user.
    
    An empty or missing ``password`` keeps the current one; omitting
    ``roles`` keeps the current role set, ``[]`` clears it. Requires `edit users`.
    """
    user = await user_service.update(db, actor, user_id, payload)
    return {"message": user_service.message("updated"), "data": UserWithRoles.model_validate(user)}


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, actor: Actor, db: Session):
    """Delete a user and their role assignments. Requires `delete users`."""
    return {"message": await user_service.delete(db, actor, user_id)}
