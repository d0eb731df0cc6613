"""Pydantic schemas for user profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from blogspace.schemas.auth import Password, Username


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    bio: str | None
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class UserCountResponse(BaseModel):
    count: int


class UserUpdateRequest(BaseModel):
    # Unknown fields such as is_admin are rejected rather than ignored
    model_config = {"extra": "forbid"}

    username: Username | None = None
    bio: str | None = Field(default=None, max_length=2000)
    password: Password | None = None
