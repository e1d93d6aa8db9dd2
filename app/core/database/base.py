"""
SQLAlchemy declarative base and common model utilities.

All SQLAlchemy models should inherit from Base.
"""
from datetime import datetime, timezone
from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.
    
    Usage:
        from app.core.database.base import Base
        
        class Role(Base):
            __tablename__ = "roles"
            
            id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
            name: Mapped[str] = mapped_column(String(255))
    """
    pass


class ULIDPrimaryKeyMixin:
    """Primary key using ULID (Universally Unique Lexicographically Sortable Identifier)."""
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.
    
    Timestamps are set client side with microsecond precision so that
    "newest first" ordering stays stable for rows written in the same second.
    The server default covers rows inserted outside the ORM.
    
    Usage:
        class User(Base, TimestampMixin):
            __tablename__ = "users"
            id: Mapped[str] = mapped_column(String(26), primary_key=True)
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
