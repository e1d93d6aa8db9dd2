"""
User model with ULID primary keys.
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Table, Column, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, ULIDPrimaryKeyMixin
from app.features.permissions.models import Role


# User-Role relationship
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base, ULIDPrimaryKeyMixin, TimestampMixin):
    """
    User model representing administrable accounts.
    
    ``password`` holds a bcrypt hash and is never serialized.
    """
    __tablename__ = "users"
    
    # User information
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    
    # Track last login
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    
    # Relationships
    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary=user_roles,
        lazy="selectin",
        order_by="Role.name",
    )
    
    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"


# Emails are unique regardless of case; login looks them up the same way
Index("uq_users_email_lower", func.lower(User.__table__.c.email), unique=True)
