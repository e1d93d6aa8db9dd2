"""
Dashboard summary route.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select

from app.features.permissions.catalog import PermissionName
from app.features.permissions.dependencies import require_permission
from app.features.permissions.models import Permission, Role
from app.features.users.dependencies import DbSession
from app.features.users.models import User


router = APIRouter()


class DashboardResponse(BaseModel):
    users: int
    roles: int
    permissions: int


@router.get(
    "",
    response_model=DashboardResponse,
    dependencies=[Depends(require_permission(PermissionName.VIEW_DASHBOARD))],
)
async def dashboard(db: DbSession):
    """Entity counts for the admin landing page. Requires `view dashboard`."""
    counts = {}
    for key, model in (("users", User), ("roles", Role), ("permissions", Permission)):
        counts[key] = await db.scalar(select(func.count()).select_from(model)) or 0
    return DashboardResponse(**counts)
