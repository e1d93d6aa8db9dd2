"""
Pydantic schemas for permission requests and responses.

Request schemas describe payload shape only; uniqueness and referential
checks live in the feature validators.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Permission Schemas
# ============================================================================

class PermissionPayload(BaseModel):
    """Schema for creating or renaming a permission."""
    name: str = Field(..., min_length=1, max_length=255, description="Unique permission name, e.g. 'view reports'")
    
    model_config = ConfigDict(str_strip_whitespace=True)


class PermissionResponse(BaseModel):
    """Schema for permission response."""
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Mutation Responses
# ============================================================================

class MessageResponse(BaseModel):
    """Confirmation returned by mutations."""
    message: str


class PermissionMutationResponse(MessageResponse):
    data: PermissionResponse
