"""
Pydantic schemas for role requests and responses.
"""
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, ConfigDict

from app.features.permissions.schemas import MessageResponse, PermissionResponse


class RolePayload(BaseModel):
    """
    Schema for creating or updating a role.
    
    ``permissions`` replaces the role's permission set only when the key is
    sent; check ``"permissions" in payload.model_fields_set``. An empty list
    clears the set.
    """
    name: str = Field(..., min_length=1, max_length=255, description="Unique role name")
    permissions: List[str] = Field(default_factory=list, description="Permission ids")
    
    model_config = ConfigDict(str_strip_whitespace=True)


class RoleResponse(BaseModel):
    """Schema for role response."""
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class RoleWithPermissions(RoleResponse):
    """Schema for role with permissions."""
    permissions: List[PermissionResponse] = []


class RoleForm(BaseModel):
    """Data needed to render the role create/edit form."""
    role: RoleWithPermissions | None = None
    permissions: List[PermissionResponse]


class RoleMutationResponse(MessageResponse):
    data: RoleWithPermissions
