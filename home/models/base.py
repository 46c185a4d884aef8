"""Base model for all other models to inherit from."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid_extensions import uuid7str


class Base(DeclarativeBase):
    """Base for all models."""

    pass


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps to a model."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="The time the record was created.",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="The time the record was last changed by a workflow command.",
    )


class BaseModel(Base, TimestampMixin):
    """
    Base model for all other models to inherit from.
    It includes a string primary key, a version counter used for
    compare-and-swap commits, and timestamps.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        default=uuid7str,
        comment="The unique identifier for the record.",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Incremented on every change; commits compare it before writing.",
    )


def enum_values(enum_cls) -> list[str]:
    """Store enum values ("submitted") rather than member names ("SUBMITTED")."""
    return [member.value for member in enum_cls]
