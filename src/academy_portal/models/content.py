"""Website content and internship models."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebsiteContent(BaseModel):
    """Editable section of the public website."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    section_id: str
    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    image_url: str | None = None
    metadata: dict[str, Any] | None = None
    updated_at: datetime | None = None


class ContentUpdates(BaseModel):
    """Fields an admin may change on a section."""

    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    image_url: str | None = None
    metadata: dict[str, Any] | None = None


class UpdateContentRequest(BaseModel):
    """Upsert of a website section."""

    model_config = ConfigDict(populate_by_name=True)

    section_id: str = Field(alias="sectionId")
    updates: ContentUpdates


class InternshipCreate(BaseModel):
    """Admin request to post an internship."""

    title: str | None = None
    company: str | None = None
    location: str | None = None
    position_type: str | None = None
    is_uc_partner: bool = False
    status: str = "active"
    compensation: str | None = None
    description: str | None = None
    apply_url: str | None = None
    contact_email: str | None = None
    available_positions: int | None = None
    requirements: list[str] | None = None
    application_deadline: date | None = None
