"""
Validation rules for user and profile payloads.
"""
from dataclasses import dataclass
from typing import Any, Optional
from email_validator import EmailNotValidError
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation import (
    check_unique,
    raise_if_errors,
    raw_id_list,
    raw_string,
    resolve_ids,
    schema_errors,
)
from app.features.permissions.models import Role
from app.features.users.models import User
from app.features.users.schemas import ProfileUpdate, UserCreate, UserUpdate, normalize_email


@dataclass
class UserChanges:
    name: str
    email: str
    # Plain text; None keeps the stored hash
    password: Optional[str]
    # None leaves the role set untouched, a list (possibly empty) replaces it
    roles: Optional[list[Role]]


def _raw_email(payload: Any) -> Optional[str]:
    # Uniqueness is still checked when other fields fail the schema
    email = raw_string(payload, "email")
    if email is None:
        return None
    try:
        return normalize_email(email)
    except EmailNotValidError:
        return None


def _password_pair(data: Optional[BaseModel], payload: Any) -> tuple[Optional[str], Any]:
    if data is not None:
        return data.password, data.password_confirmation
    if not isinstance(payload, dict):
        return None, None
    password = payload.get("password")
    return (password if isinstance(password, str) and password else None), payload.get("password_confirmation")


async def _validate(
    db: AsyncSession,
    schema: type[BaseModel],
    payload: Any,
    user_id: Optional[str],
    with_roles: bool,
) -> UserChanges:
    data, errors = schema_errors(schema, payload)
    
    email = data.email if data else _raw_email(payload)
    await check_unique(
        db, errors, User, "email", email,
        "A user with this email already exists.",
        exclude_id=user_id,
        ignore_case=True,
    )
    
    password, confirmation = _password_pair(data, payload)
    if password is not None and "password" not in errors and password != confirmation:
        errors["password"] = "The password confirmation does not match."
    
    roles = None
    if with_roles:
        ids = data.roles if data else raw_id_list(payload, "roles")
        found = await resolve_ids(
            db, errors, Role, "roles", ids,
            "The selected role does not exist.",
        )
        if data is not None and "roles" in data.model_fields_set:
            roles = found
    raise_if_errors(errors)
    
    return UserChanges(name=data.name, email=data.email, password=data.password, roles=roles)


async def validate_user(db: AsyncSession, payload: Any, user_id: Optional[str] = None) -> UserChanges:
    """
    Check a user create (``user_id`` None) or update payload.
    
    On create the password is required; on update an empty or missing
    password keeps the current one. Email uniqueness ignores the user being
    updated.
    
    Raises:
        ValidationFailed: with every failing field
    """
    schema = UserCreate if user_id is None else UserUpdate
    return await _validate(db, schema, payload, user_id, with_roles=True)


async def validate_profile(db: AsyncSession, payload: Any, user_id: str) -> UserChanges:
    """Check a self-service profile update; role changes are not accepted here."""
    return await _validate(db, ProfileUpdate, payload, user_id, with_roles=False)
