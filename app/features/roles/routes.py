"""
Role management API routes.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Body, Query, status

from app.core.pagination import ListQuery, Page
from app.features.users.dependencies import CurrentActor as Actor, DbSession as Session
from app.features.permissions.schemas import MessageResponse
from app.features.roles.schemas import RoleForm, RoleMutationResponse, RoleWithPermissions
from app.features.roles.service import role_service


router = APIRouter()


@router.get("", response_model=Page[RoleWithPermissions])
async def list_roles(query: Annotated[ListQuery, Query()], actor: Actor, db: Session):
    """List roles with their permissions, newest first, 10 per page. Requires `view roles`."""
    return await role_service.list(db, actor, query)


@router.get("/create", response_model=RoleForm)
async def create_role_form(actor: Actor, db: Session):
    """All permissions a new role can be granted. Requires `create roles`."""
    return await role_service.create_form(db, actor)


@router.post("", response_model=RoleMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_role(payload: Annotated[dict[str, Any], Body()], actor: Actor, db: Session):
    """
    Create a role.
    
    Body: ``{"name": str, "permissions": [permission ids]}``; ``permissions`` is optional.
    Requires `create roles`.
    """
    role = await role_service.create(db, actor, payload)
    return {"message": role_service.message("created"), "data": RoleWithPermissions.model_validate(role)}


@router.get("/{role_id}", response_model=RoleWithPermissions)
async def get_role(role_id: str, actor: Actor, db: Session):
    """Get a specific role with its permissions. Requires `view roles`."""
    return await role_service.show(db, actor, role_id)


@router.get("/{role_id}/edit", response_model=RoleForm)
async def edit_role_form(role_id: str, actor: Actor, db: Session):
    """A role with its permissions plus every assignable permission. Requires `edit roles`."""
    return await role_service.edit_form(db, actor, role_id)


@router.put("/{role_id}", response_model=RoleMutationResponse)
async def update_role(
    role_id: str,
    payload: Annotated[dict[str, Any], Body()],
    actor: Actor,
    db: Session,
):
    """
    Rename a role and optionally sync its permissions.
    
    Omitting ``permissions`` keeps the current set, ``[]`` clears it.
    Requires `edit roles`.
    """
    role = await role_service.update(db, actor, role_id, payload)
    return {"message": role_service.message("updated"), "data": RoleWithPermissions.model_validate(role)}


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(role_id: str, actor: Actor, db: Session):
    """Delete a role and unassign it from every user. Requires `delete roles`."""
    return {"message": await role_service.delete(db, actor, role_id)}
