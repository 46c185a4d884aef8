"""Contractor model."""

from typing import Optional

from sqlalchemy import JSON, Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel


class Contractor(BaseModel):
    __tablename__ = "contractors"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    specialization: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list, comment="Category names."
    )
    service_areas: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="State name -> list of cities."
    )
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    completed_jobs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    preferred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Contractor(id={self.id}, name='{self.name}', rating={self.rating})>"
