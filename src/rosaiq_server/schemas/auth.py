"""
Pydantic schemas for authentication and user management endpoints.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import UtcDatetime


class LoginRequest(BaseModel):
    """Request schema for login endpoint."""
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Response schema for successful authentication."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class UserResponse(BaseModel):
    """Response schema for user information."""
    id: int
    username: str
    role: str
    created_at: UtcDatetime
    last_login_at: Optional[UtcDatetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Admin request to create a dashboard account."""
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.@-]+$")
    password: str = Field(..., min_length=8)
    role: Literal["admin", "user"] = "user"


class UserUpdate(BaseModel):
    """Admin request to change a password and/or role; absent fields are left alone."""
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[Literal["admin", "user"]] = None
