"""Pydantic schemas for user accounts."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from home.models.user import UserRole
from home.schemas.base import Entity


class User(Entity):
    email: str
    name: str
    role: UserRole
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    company_name: Optional[str] = None
    contractor_id: Optional[str] = None


class UserCreate(BaseModel):
    """Account creation payload. Contractors also get a roster entry."""

    name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    company_name: Optional[str] = None


class TokenResponse(BaseModel):
    user: User
    access_token: str
    token_type: str = "bearer"
