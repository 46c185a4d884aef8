"""Pydantic schemas for contractors and matching results."""

from typing import Optional

from pydantic import BaseModel, Field

from home.schemas.base import Entity


class Contractor(Entity):
    name: str
    company: str = ""
    email: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    specialization: tuple[str, ...] = ()
    service_areas: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    rating: float = 0.0
    completed_jobs: int = 0
    preferred: bool = False


class ContractorServiceUpdate(BaseModel):
    specialization: list[str]
    service_areas: dict[str, list[str]]


class ContractorMatch(BaseModel):
    contractor: Contractor
    distance: float = Field(..., description="Rough miles: 0 same city, 50 same state, 200 otherwise.")
