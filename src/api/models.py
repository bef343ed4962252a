"""Pydantic parameter schemas, one per route.

Request validation turns these into sanitized parameter dicts; responses are
shaped by the presenters instead.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

MAX_PER_PAGE = 100


class ListUsersParams(BaseModel):
    """Query parameters for listing users."""
    page: int = Field(1, ge=1, description="1-based page number")
    per_page: int = Field(25, ge=1, le=MAX_PER_PAGE, description="Users per page")


class UserPathParams(BaseModel):
    user_id: str = Field(..., min_length=1, description="User ID")


class CreateUserRequest(BaseModel):
    """Request body for signup."""
    email: EmailStr
    password: Optional[str] = Field(None, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UpdateUserRequest(BaseModel):
    """Path ID plus the profile fields a PATCH may change."""
    user_id: str = Field(..., min_length=1)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, max_length=128)


class LoginRequest(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str = Field(..., min_length=1)
