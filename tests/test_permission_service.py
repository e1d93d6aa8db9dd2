"""Tests for permission CRUD orchestration."""

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictViolation, Forbidden, NotFound, ValidationFailed
from app.core.pagination import ListQuery
from app.core.service import commit_or_conflict
from app.features.permissions.catalog import PermissionName
from app.features.permissions.dependencies import has_permission
from app.features.permissions.models import Permission, Role
from app.features.permissions.service import permission_service

P = PermissionName


async def _count(db) -> int:
    return await db.scalar(select(func.count()).select_from(Permission))


# -- Create -------------------------------------------------------------------


async def test_create_then_duplicate_fails_on_name(db, actor_with):
    actor = await actor_with(P.CREATE_PERMISSIONS)

    created = await permission_service.create(db, actor, {"name": "view reports"})
    assert created.name == "view reports"

    with pytest.raises(ValidationFailed) as excinfo:
        await permission_service.create(db, actor, {"name": "view reports"})
    assert excinfo.value.errors == {"name": "The name has already been taken."}
    assert await _count(db) == 2


async def test_create_requires_permission(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    before = await _count(db)

    with pytest.raises(Forbidden):
        await permission_service.create(db, actor, {"name": "view reports"})
    assert await _count(db) == before


async def test_forbidden_before_validation(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    with pytest.raises(Forbidden):
        await permission_service.create(db, actor, {})


# -- List ---------------------------------------------------------------------


async def test_pagination_page_two(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    for i in range(10):
        db.add(Permission(name=f"extra {i:02d}"))
    await db.commit()
    assert await _count(db) == 11

    page = await permission_service.list(db, actor, ListQuery(page=2))

    assert len(page.data) == 2
    assert page.total == 11
    assert page.per_page == 9
    assert page.last_page == 2
    assert page.current_page == 2
    assert (page.from_, page.to) == (10, 11)


async def test_page_past_the_end_is_empty(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)

    page = await permission_service.list(db, actor, ListQuery(page=5))

    assert page.data == []
    assert page.total == 1
    assert page.from_ is None


async def test_list_newest_first(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    for name in ("first", "second", "third"):
        db.add(Permission(name=name))
        await db.commit()

    page = await permission_service.list(db, actor, ListQuery())

    assert [p.name for p in page.data][:3] == ["third", "second", "first"]


async def test_search_is_case_insensitive_substring(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    db.add_all([Permission(name="view reports"), Permission(name="export Reports"), Permission(name="audit")])
    await db.commit()

    page = await permission_service.list(db, actor, ListQuery(search="REPORT"))

    assert sorted(p.name for p in page.data) == ["export Reports", "view reports"]
    assert page.total == 2


async def test_search_treats_wildcards_literally(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    db.add_all([Permission(name="100% coverage"), Permission(name="1000 coverage")])
    await db.commit()

    page = await permission_service.list(db, actor, ListQuery(search="100%"))

    assert [p.name for p in page.data] == ["100% coverage"]


async def test_blank_search_returns_all(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    db.add(Permission(name="audit"))
    await db.commit()

    page = await permission_service.list(db, actor, ListQuery(search="  "))

    assert page.total == 2


# -- Show / update / delete -----------------------------------------------------


async def test_show_and_not_found(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    permission = actor.roles[0].permissions[0]

    shown = await permission_service.show(db, actor, permission.id)
    assert shown.name == "view permissions"

    with pytest.raises(NotFound):
        await permission_service.show(db, actor, "missing")


async def test_rename_keeps_identity_and_role_membership(db, actor_with):
    actor = await actor_with(P.EDIT_PERMISSIONS, "view reports")
    report = next(p for p in actor.roles[0].permissions if p.name == "view reports")

    renamed = await permission_service.update(db, actor, report.id, {"name": "read reports"})

    assert renamed.id == report.id
    assert await has_permission(db, actor, "read reports") is True
    assert await has_permission(db, actor, "view reports") is False


async def test_update_not_found_leaves_store_unchanged(db, actor_with):
    actor = await actor_with(P.EDIT_PERMISSIONS)
    before = await _count(db)

    with pytest.raises(NotFound):
        await permission_service.update(db, actor, "missing", {"name": "anything"})
    assert await _count(db) == before


async def test_unauthorized_caller_gets_forbidden_for_missing_id(db, actor_with):
    actor = await actor_with(P.VIEW_PERMISSIONS)
    with pytest.raises(Forbidden):
        await permission_service.update(db, actor, "missing", {"name": "anything"})
    with pytest.raises(Forbidden):
        await permission_service.delete(db, actor, "missing")


async def test_delete_removes_from_roles_and_is_not_repeatable(db, actor_with, make_role):
    actor = await actor_with(P.DELETE_PERMISSIONS, P.VIEW_ROLES)
    editor = await make_role("editor", ["view reports", "export reports"])
    doomed = next(p for p in editor.permissions if p.name == "view reports")

    message = await permission_service.delete(db, actor, doomed.id)
    assert message == "Permission deleted successfully."

    refreshed = await db.scalar(
        select(Role).where(Role.id == editor.id).execution_options(populate_existing=True)
    )
    assert [p.name for p in refreshed.permissions] == ["export reports"]

    with pytest.raises(NotFound):
        await permission_service.delete(db, actor, doomed.id)


# -- Store-level conflicts ------------------------------------------------------


async def test_unique_race_surfaces_as_field_error(db):
    db.add(Permission(name="view reports"))
    await db.commit()

    db.add(Permission(name="view reports"))
    with pytest.raises(ConflictViolation) as excinfo:
        await commit_or_conflict(db, "name", "The name has already been taken.")

    assert excinfo.value.errors == {"name": "The name has already been taken."}
    assert isinstance(excinfo.value, ValidationFailed)
    assert await _count(db) == 1
