"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from typing import Annotated, List, Optional
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from app.features.permissions.schemas import MessageResponse
from app.features.roles.schemas import RoleResponse


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


def normalize_email(value: str) -> str:
    """Validated address with its domain part normalized, as stored."""
    return validate_email(value, check_deliverability=False).normalized


class UserFields(BaseModel):
    """Fields shared by every user payload."""
    name: Name
    email: Email

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        """Require a syntactically valid address; the domain part is normalized."""
        try:
            return normalize_email(v)
        except EmailNotValidError as e:
            raise ValueError(str(e))


class UserCreate(UserFields):
    """
    Schema for creating a new user.
    
    ``password`` must equal ``password_confirmation``; the validator checks it
    so the message lands on the ``password`` field.
    """
    password: str = Field(..., min_length=8)
    password_confirmation: Optional[str] = None
    roles: List[str] = Field(default_factory=list, description="Role ids")


class ProfileUpdate(UserFields):
    """Schema for a user updating their own profile."""
    password: Optional[str] = Field(None, min_length=8, description="Leave empty to keep the current password")
    password_confirmation: Optional[str] = None

    @field_validator("password", mode="before")
    @classmethod
    def empty_password_is_absent(cls, v):
        return None if v == "" else v


class UserUpdate(ProfileUpdate):
    """
    Schema for updating a user.
    
    ``roles`` replaces the user's role set only when the key is sent; an
    empty list clears it.
    """
    roles: List[str] = Field(default_factory=list, description="Role ids")


class UserResponse(BaseModel):
    """Schema for user responses."""
    id: str
    name: str
    email: str
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class UserWithRoles(UserResponse):
    roles: List[RoleResponse] = []


class UserForm(BaseModel):
    """Data needed to render the user create/edit form."""
    user: UserWithRoles | None = None
    roles: List[RoleResponse]


class UserMutationResponse(MessageResponse):
    data: UserWithRoles
