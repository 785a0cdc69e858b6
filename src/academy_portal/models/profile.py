"""Learner profile models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """Post-approval learner record, one per auth identity."""

    model_config = ConfigDict(extra="allow")

    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    username: str | None = None
    temp_password: str | None = None
    is_temp_password_used: bool | None = False
    uc_campus: str | None = None
    major: str | None = None
    graduation_year: int | None = None
    gpa: float | None = None
    linkedin_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Credentials(BaseModel):
    """Temporary credentials issued at approval."""

    username: str
    temp_password: str


class ResendCredentialsRequest(BaseModel):
    """Admin request to re-send a learner's credentials email."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    admin_token: str | None = Field(default=None, alias="adminToken")
