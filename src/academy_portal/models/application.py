"""Application models - prospective-student submissions under review."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Optional academic fields copied onto the learner profile at approval time.
ACADEMIC_FIELDS = ("uc_campus", "major", "graduation_year", "gpa", "linkedin_url")


class ApplicationStatus(str, Enum):
    """Review state of an application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Application(BaseModel):
    """Persisted application row."""

    model_config = ConfigDict(extra="allow")

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    admin_comment: str | None = None
    created_by_admin: bool | None = None

    # Academic fields
    uc_campus: str | None = None
    major: str | None = None
    graduation_year: int | None = None
    gpa: float | None = None
    linkedin_url: str | None = None
    student_type: str | None = None

    def academic_fields(self) -> dict:
        """Academic fields that carry a value (nulls are left out)."""
        values = {name: getattr(self, name) for name in ACADEMIC_FIELDS}
        return {name: value for name, value in values.items() if value is not None}


class ApplicationCreate(BaseModel):
    """Public submission of a new application."""

    model_config = ConfigDict(extra="ignore")

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    uc_campus: str | None = None
    major: str | None = None
    graduation_year: int | None = None
    gpa: float | None = None
    linkedin_url: str | None = None
    student_type: str | None = None
    question_1: str | None = None
    question_2: str | None = None
    question_3: str | None = None
    question_4: str | None = None


class ListApplicationsRequest(BaseModel):
    """Filter for the admin application listing."""

    status: ApplicationStatus | None = None


class UpdateStatusRequest(BaseModel):
    """Admin decision on an application."""

    model_config = ConfigDict(populate_by_name=True)

    application_id: str = Field(alias="applicationId")
    new_status: Literal["approved", "rejected"] = Field(alias="newStatus")
    applicant_name: str | None = Field(default=None, alias="applicantName")
    email: str | None = None
    admin_comment: str | None = Field(default=None, alias="adminComment")
    admin_token: str | None = Field(default=None, alias="adminToken")


class UpdateStatusResponse(BaseModel):
    """Result of an approval or rejection."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    temp_username: str | None = Field(default=None, serialization_alias="tempUsername")
    temp_password: str | None = Field(default=None, serialization_alias="tempPassword")


class RevokeRequest(BaseModel):
    """Admin request to revoke an applicant's access."""

    model_config = ConfigDict(populate_by_name=True)

    application_id: str = Field(alias="applicationId")
    email: str | None = None
    admin_token: str | None = Field(default=None, alias="adminToken")


class RevocationResult(BaseModel):
    """Outcome of a revocation."""

    deleted_profile: bool = Field(serialization_alias="deletedProfile")
    deleted_application: bool = Field(serialization_alias="deletedApplication")
