"""
TableTalk Auth - Schemas.

Pydantic models for authentication.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """JWT token payload from Supabase."""

    sub: UUID = Field(..., description="User ID")
    email: str | None = None
    role: str | None = None
    aud: str | None = None
    exp: datetime | None = None
    iat: datetime | None = None


class User(BaseModel):
    """Authenticated caller."""

    id: UUID
    email: str | None = None
    role: str | None = None
    access_token: str = Field(..., repr=False, description="Bearer token forwarded to the reasoning service")
