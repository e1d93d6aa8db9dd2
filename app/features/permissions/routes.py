"""
Permission management API routes.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Body, Query, status

from app.core.pagination import ListQuery, Page
from app.features.permissions.schemas import (
    MessageResponse,
    PermissionMutationResponse,
    PermissionResponse,
)
from app.features.permissions.service import permission_service
from app.features.users.dependencies import CurrentActor as Actor, DbSession as Session


router = APIRouter()


@router.get("", response_model=Page[PermissionResponse])
async def list_permissions(query: Annotated[ListQuery, Query()], actor: Actor, db: Session):
    """List permissions, newest first, 9 per page. Requires `view permissions`."""
    return await permission_service.list(db, actor, query)


@router.post("", response_model=PermissionMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(payload: Annotated[dict[str, Any], Body()], actor: Actor, db: Session):
    """Create a permission. Requires `create permissions`."""
    permission = await permission_service.create(db, actor, payload)
    return {"message": permission_service.message("created"), "data": PermissionResponse.model_validate(permission)}


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(permission_id: str, actor: Actor, db: Session):
    """Get a specific permission by ID. Requires `view permissions`."""
    return await permission_service.show(db, actor, permission_id)


@router.get("/{permission_id}/edit", response_model=PermissionResponse)
async def edit_permission(permission_id: str, actor: Actor, db: Session):
    """Load a permission for editing. Requires `edit permissions`."""
    return await permission_service.edit_form(db, actor, permission_id)


@router.put("/{permission_id}", response_model=PermissionMutationResponse)
async def update_permission(
    permission_id: str,
    payload: Annotated[dict[str, Any], Body()],
    actor: Actor,
    db: Session,
):
    """Rename a permission. Requires `edit permissions`."""
    permission = await permission_service.update(db, actor, permission_id, payload)
    return {"message": permission_service.message("updated"), "data": PermissionResponse.model_validate(permission)}


@router.delete("/{permission_id}", response_model=MessageResponse)
async def delete_permission(permission_id: str, actor: Actor, db: Session):
    """Delete a permission and remove it from every role. Requires `delete permissions`."""
    return {"message": await permission_service.delete(db, actor, permission_id)}
