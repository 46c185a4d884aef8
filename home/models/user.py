"""User model."""

import enum
from typing import Optional

from sqlalchemy import Enum as EnumType
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel, enum_values


class UserRole(enum.Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"
    CONTRACTOR = "contractor"


class User(BaseModel):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        EnumType(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Not a ForeignKey so the contractor row can be written in the same
    # change set without ordering inserts.
    contractor_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Contractor record owned by this account, set at sign-up.",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
