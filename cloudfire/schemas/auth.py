"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from common.types import Plan, Role
from cloudfire.repositories.user_repository import User


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    username: str
    password: str
    email: str = ""


class RegisterResponse(BaseModel):
    """Response model for user registration."""
    api_key: str
    user_id: str


class LoginRequest(BaseModel):
    """Request model for user login."""
    username: str
    password: str


class LoginResponse(BaseModel):
    """Response model for user login."""
    api_key: str
    user_id: str


class UserResponse(BaseModel):
    """Public view of a user account (no secrets)."""
    user_id: str
    username: str
    email: str
    role: str
    plan: str
    storage_used: int
    storage_limit: int
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role=user.role,
            plan=user.plan,
            storage_used=user.storage_used,
            storage_limit=user.storage_limit,
            is_active=user.is_active,
            created_at=user.created_at,
        )


class UpgradePlanRequest(BaseModel):
    """Request model for changing the caller's plan."""
    plan: Plan


class UpdateUserRequest(BaseModel):
    """Request model for an admin's partial edit of a user."""
    email: Optional[str] = None
    role: Optional[Role] = None
    plan: Optional[Plan] = None
    storage_limit: Optional[int] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None
