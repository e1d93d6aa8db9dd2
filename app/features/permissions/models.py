"""
Permission and Role models.

Roles own a set of permissions through the ``role_permissions`` association
table. Users own roles through ``user_roles`` (see app.features.users.models);
a user's effective permissions are the union over their roles.
"""
from sqlalchemy import String, ForeignKey, Table, Column
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, ULIDPrimaryKeyMixin


# Role-Permission relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", String(26), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base, ULIDPrimaryKeyMixin, TimestampMixin):
    """
    A named capability such as ``"view users"``.
    
    Names are unique and compared exactly as stored.
    """
    __tablename__ = "permissions"
    
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    
    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r})>"


class Role(Base, ULIDPrimaryKeyMixin, TimestampMixin):
    """
    Role model for grouping permissions.
    
    Examples: admin, user
    """
    __tablename__ = "roles"
    
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    
    # Relationships
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        lazy="selectin",
        order_by="Permission.name",
    )
    
    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r})>"
