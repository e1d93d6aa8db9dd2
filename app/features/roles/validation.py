"""
Validation rules for role payloads.
"""
from dataclasses import dataclass
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation import (
    check_unique,
    raise_if_errors,
    raw_id_list,
    raw_string,
    resolve_ids,
    schema_errors,
)
from app.features.permissions.models import Permission, Role
from app.features.roles.schemas import RolePayload


@dataclass
class RoleChanges:
    name: str
    # None leaves the permission set untouched, a list (possibly empty) replaces it
    permissions: Optional[list[Permission]]


async def validate_role(
    db: AsyncSession,
    payload: Any,
    role_id: Optional[str] = None,
) -> RoleChanges:
    """
    Check a create (``role_id`` None) or update payload.
    
    Every permission id must reference an existing permission; each one that
    doesn't is reported as ``permissions.<index>``.
    
    Raises:
        ValidationFailed: with every failing field
    """
    data, errors = schema_errors(RolePayload, payload)
    
    name = data.name if data else raw_string(payload, "name")
    await check_unique(
        db, errors, Role, "name", name,
        "The name has already been taken.",
        exclude_id=role_id,
    )
    
    present = "permissions" in data.model_fields_set if data else False
    ids = data.permissions if data else raw_id_list(payload, "permissions")
    permissions = await resolve_ids(
        db, errors, Permission, "permissions", ids,
        "The selected permission does not exist.",
    )
    raise_if_errors(errors)
    
    return RoleChanges(name=data.name, permissions=permissions if present else None)
