"""Tests for user CRUD orchestration."""

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictViolation, Forbidden, NotFound, ValidationFailed
from app.core.pagination import ListQuery
from app.core.service import commit_or_conflict
from app.features.permissions.catalog import PermissionName
from app.features.permissions.models import Role
from app.features.users.auth import verify_password
from app.features.users.models import User, user_roles
from app.features.users.service import user_service

P = PermissionName


def _payload(**overrides) -> dict:
    payload = {
        "name": "John Doe",
        "email": "john@example.com",
        "password": "correct-horse",
        "password_confirmation": "correct-horse",
    }
    payload.update(overrides)
    return payload


async def test_create_hashes_password_and_assigns_roles(db, seeded, actor_with):
    actor = await actor_with(P.CREATE_USERS)

    user = await user_service.create(db, actor, _payload(roles=[seeded["user"].id]))

    assert user.password != "correct-horse"
    assert verify_password("correct-horse", user.password)
    assert [r.name for r in user.roles] == ["user"]


async def test_create_duplicate_email(db, actor_with, make_user):
    actor = await actor_with(P.CREATE_USERS)
    await make_user(email="john@example.com")

    with pytest.raises(ValidationFailed) as excinfo:
        await user_service.create(db, actor, _payload())

    assert excinfo.value.errors == {"email": "A user with this email already exists."}


async def test_search_matches_name_or_email(db, actor_with, make_user):
    actor = await actor_with(P.VIEW_USERS, name="Admin", email="admin@example.com")
    await make_user(name="John Doe", email="jd@example.com")
    await make_user(name="Jane Roe", email="jane@example.com")

    by_name = await user_service.list(db, actor, ListQuery(search="John"))
    by_email = await user_service.list(db, actor, ListQuery(search="JANE@"))

    assert [u.name for u in by_name.data] == ["John Doe"]
    assert [u.name for u in by_email.data] == ["Jane Roe"]


async def test_list_includes_roles(db, seeded, actor_with, make_user):
    actor = await actor_with(P.VIEW_USERS)
    await make_user(name="Member", roles=[seeded["user"]])

    page = await user_service.list(db, actor, ListQuery(search="member"))

    assert [r.name for r in page.data[0].roles] == ["user"]
    assert page.per_page == 9


async def test_update_without_password_or_roles_keeps_both(db, seeded, actor_with, make_user):
    actor = await actor_with(P.EDIT_USERS)
    user = await make_user(name="John Doe", email="john@example.com", roles=[seeded["user"]])
    old_hash = user.password

    updated = await user_service.update(db, actor, user.id, {"name": "John Q. Doe", "email": "jq@example.com"})

    assert updated.name == "John Q. Doe"
    assert updated.email == "jq@example.com"
    assert updated.password == old_hash
    assert [r.name for r in updated.roles] == ["user"]


async def test_update_with_empty_roles_clears_them(db, seeded, actor_with, make_user):
    actor = await actor_with(P.EDIT_USERS, P.VIEW_USERS)
    user = await make_user(email="john@example.com", roles=[seeded["user"]])

    await user_service.update(db, actor, user.id, {"name": "John", "email": "john@example.com", "roles": []})
    shown = await user_service.show(db, actor, user.id)

    assert shown.roles == []


async def test_update_with_new_password_rehashes(db, actor_with, make_user):
    actor = await actor_with(P.EDIT_USERS)
    user = await make_user(email="john@example.com", password="old-password")

    updated = await user_service.update(db, actor, user.id, {
        "name": "John",
        "email": "john@example.com",
        "password": "new-password",
        "password_confirmation": "new-password",
    })

    assert verify_password("new-password", updated.password)
    assert not verify_password("old-password", updated.password)


async def test_edit_form_lists_roles(db, seeded, actor_with, make_user):
    actor = await actor_with(P.EDIT_USERS)
    user = await make_user(roles=[seeded["admin"]])

    form = await user_service.edit_form(db, actor, user.id)

    assert [r.name for r in form.user.roles] == ["admin"]
    assert {"admin", "user"} <= {r.name for r in form.roles}


async def test_delete_requires_permission_and_keeps_record(db, actor_with, make_user):
    actor = await actor_with(P.VIEW_USERS, P.EDIT_USERS)
    target = await make_user()

    with pytest.raises(Forbidden):
        await user_service.delete(db, actor, target.id)

    assert await db.scalar(select(User.id).where(User.id == target.id)) == target.id


async def test_delete_and_not_found(db, seeded, actor_with, make_user):
    actor = await actor_with(P.DELETE_USERS, P.VIEW_USERS)
    target = await make_user(roles=[seeded["user"]])

    assert await user_service.delete(db, actor, target.id) == "User deleted successfully."

    with pytest.raises(NotFound):
        await user_service.show(db, actor, target.id)
    with pytest.raises(NotFound):
        await user_service.delete(db, actor, target.id)


async def test_update_missing_user(db, actor_with):
    actor = await actor_with(P.EDIT_USERS)
    with pytest.raises(NotFound) as excinfo:
        await user_service.update(db, actor, "missing", _payload())
    assert excinfo.value.message == "User not found."


async def test_delete_removes_role_assignments(db, seeded, actor_with, make_user):
    actor = await actor_with(P.DELETE_USERS)
    target = await make_user(roles=[seeded["admin"], seeded["user"]])
    assigned = select(func.count()).select_from(user_roles).where(user_roles.c.user_id == target.id)
    assert await db.scalar(assigned) == 2

    await user_service.delete(db, actor, target.id)

    assert await db.scalar(assigned) == 0
    # The roles themselves stay
    assert await db.scalar(select(func.count()).select_from(Role)) >= 2


async def test_case_variant_email_rejected_by_store(db, make_user):
    await make_user(email="jane@example.com")

    db.add(User(name="Jane", email="JANE@example.com", password="x"))
    with pytest.raises(ConflictViolation) as excinfo:
        await commit_or_conflict(db, "email", "A user with this email already exists.")

    assert excinfo.value.errors == {"email": "A user with this email already exists."}
