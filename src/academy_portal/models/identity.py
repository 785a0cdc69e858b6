"""Identity models for learners and admins."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserIdentity(BaseModel):
    """Account record owned by the Supabase auth subsystem."""

    id: str
    email: str | None = None


class AdminUser(BaseModel):
    """Portal administrator."""

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    email: str | None = None
    full_name: str | None = None
    role: str | None = None
    is_active: bool = True
    password_hash: str | None = Field(default=None, exclude=True)
    created_at: datetime | None = None


class AdminSession(BaseModel):
    """Issued admin session. Only the token digest is persisted."""

    token_hash: str
    admin_user_id: str
    expires_at: datetime
    created_at: datetime | None = None


class AuthContext(BaseModel):
    """Authentication context for admin requests."""

    admin: AdminUser
    expires_at: datetime


class LoginRequest(BaseModel):
    """Admin login credentials."""

    username: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    """Successful admin login."""

    success: bool = True
    admin_user: AdminUser = Field(serialization_alias="adminUser")
    admin_token: str = Field(serialization_alias="adminToken")
    expires_at: datetime = Field(serialization_alias="expiresAt")
