"""
Pydantic schemas for login and the acting user's profile.
"""
from typing import List
from pydantic import BaseModel, Field

from app.features.permissions.schemas import MessageResponse
from app.features.users.schemas import UserWithRoles


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUserResponse(UserWithRoles):
    """The acting user with the names of every permission they hold."""
    permissions: List[str] = []


class ProfileMutationResponse(MessageResponse):
    data: UserWithRoles
