"""Shared test fixtures for the RBAC admin backend."""

import os
import tempfile

# Configure before any app module reads app.core.config
_tmp_dir = tempfile.mkdtemp(prefix="rbac-admin-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["SECRET_KEY"] = "test-secret"

import httpx
import pytest
from sqlalchemy import select

from app.core.database.base import generate_ulid
from app.core.database.engine import AsyncSessionLocal, drop_db, init_db
from app.features.permissions.models import Permission, Role
from app.features.permissions.seed import seed
from app.features.users.auth import create_access_token, hash_password
from app.features.users.models import User


@pytest.fixture
async def db():
    """A session on a freshly created schema."""
    await drop_db()
    await init_db()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def seeded(db):
    """The default catalog plus the ``admin`` and ``user`` roles."""
    return await seed(db)


async def get_or_create_permission(db, name) -> Permission:
    name = str(name)
    permission = await db.scalar(select(Permission).where(Permission.name == name))
    if permission is None:
        permission = Permission(name=name)
        db.add(permission)
        await db.flush()
    return permission


@pytest.fixture
def make_role(db):
    async def factory(name=None, permissions=()):
        perms = [await get_or_create_permission(db, p) for p in permissions]
        role = Role(name=name or f"role-{generate_ulid()}", permissions=perms)
        db.add(role)
        await db.commit()
        return role

    return factory


@pytest.fixture
def make_user(db):
    async def factory(name="Test User", email=None, password="secret-password", roles=()):
        user = User(
            name=name,
            email=email or f"user-{generate_ulid().lower()}@example.com",
            password=hash_password(password),
            roles=list(roles),
        )
        db.add(user)
        await db.commit()
        return user

    return factory


@pytest.fixture
def actor_with(make_role, make_user):
    """Create a user whose single role grants exactly the given permission names."""
    async def factory(*permissions, **user_fields):
        role = await make_role(permissions=permissions)
        return await make_user(roles=[role], **user_fields)

    return factory


@pytest.fixture
async def client(db):
    from app.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    def build(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return build
