"""
Canonical permission names and the entity kinds they guard.

Permission strings are stored and displayed verbatim (e.g. ``"view users"``);
code refers to them through ``PermissionName`` so a typo fails at import time
instead of silently denying access.
"""
from enum import Enum


class PermissionName(str, Enum):
    VIEW_DASHBOARD = "view dashboard"

    VIEW_ROLES = "view roles"
    CREATE_ROLES = "create roles"
    EDIT_ROLES = "edit roles"
    DELETE_ROLES = "delete roles"

    VIEW_PERMISSIONS = "view permissions"
    CREATE_PERMISSIONS = "create permissions"
    EDIT_PERMISSIONS = "edit permissions"
    DELETE_PERMISSIONS = "delete permissions"

    VIEW_USERS = "view users"
    CREATE_USERS = "create users"
    EDIT_USERS = "edit users"
    DELETE_USERS = "delete users"

    VIEW_PROFILE = "view profile"
    EDIT_PROFILE = "edit profile"

    def __str__(self) -> str:
        return self.value


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


class EntityKind(str, Enum):
    """An administrable entity kind with its fixed list page size."""
    PERMISSIONS = "permissions"
    ROLES = "roles"
    USERS = "users"

    @property
    def page_size(self) -> int:
        return _PAGE_SIZES[self]

    @property
    def label(self) -> str:
        """Singular display name, used in confirmation messages."""
        return self.value[:-1].capitalize()

    def permission(self, action: Action) -> PermissionName:
        """Permission required to perform ``action`` on this kind."""
        return PermissionName(f"{action.value} {self.value}")


_PAGE_SIZES = {
    EntityKind.PERMISSIONS: 9,
    EntityKind.ROLES: 10,
    EntityKind.USERS: 9,
}


# Seeded on bootstrap, in display order
DEFAULT_PERMISSIONS: list[PermissionName] = list(PermissionName)

DEFAULT_ROLES: dict[str, list[PermissionName] | str] = {
    "admin": "ALL",  # Special case - gets all permissions
    "user": [
        PermissionName.VIEW_DASHBOARD,
        PermissionName.VIEW_PROFILE,
        PermissionName.EDIT_PROFILE,
    ],
}
