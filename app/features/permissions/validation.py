"""
Validation rules for permission payloads.
"""
from dataclasses import dataclass
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation import check_unique, raise_if_errors, raw_string, schema_errors
from app.features.permissions.models import Permission
from app.features.permissions.schemas import PermissionPayload


@dataclass
class PermissionChanges:
    name: str


async def validate_permission(
    db: AsyncSession,
    payload: Any,
    permission_id: Optional[str] = None,
) -> PermissionChanges:
    """
    Check a create (``permission_id`` None) or update payload.
    
    Raises:
        ValidationFailed: with every failing field
    """
    data, errors = schema_errors(PermissionPayload, payload)
    name = data.name if data else raw_string(payload, "name")
    
    await check_unique(
        db, errors, Permission, "name", name,
        "The name has already been taken.",
        exclude_id=permission_id,
    )
    raise_if_errors(errors)
    
    return PermissionChanges(name=data.name)
