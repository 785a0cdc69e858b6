"""Website content and internship postings."""

import logging
from datetime import datetime, UTC
from typing import Any

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import ValidationError
from academy_portal.models.content import (
    ContentUpdates,
    InternshipCreate,
    WebsiteContent,
)

logger = logging.getLogger(__name__)

INTERNSHIP_REQUIRED_FIELDS = ("title", "company", "location")


class ContentService:
    """Admin edits to public site content."""

    def __init__(self, db: DatabaseClient) -> None:
        self.db = db

    async def list_sections(self) -> list[WebsiteContent]:
        return await self.db.list_website_content()

    async def update_section(
        self,
        section_id: str,
        updates: ContentUpdates,
        updated_by: str | None = None,
    ) -> WebsiteContent:
        """Update a section, creating it if it does not exist yet."""
        if not section_id:
            raise ValidationError("Section ID is required")

        now = datetime.now(UTC).isoformat()
        changes = updates.model_dump(mode="json", exclude_unset=True)
        changes["updated_at"] = now

        section = await self.db.update_website_content(section_id, changes)
        if section:
            logger.info(f"Updated website section {section_id}")
            return section

        row = {"section_id": section_id, **changes, "created_at": now}
        if updated_by:
            row["created_by"] = updated_by
        section = await self.db.insert_website_content(row)
        logger.info(f"Created website section {section_id}")
        return section

    async def create_internship(
        self,
        data: InternshipCreate,
        created_by: str,
    ) -> dict[str, Any]:
        """Post a new internship.

        Raises:
            ValidationError: If title, company or location is missing
        """
        missing = [name for name in INTERNSHIP_REQUIRED_FIELDS if not getattr(data, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        row = data.model_dump(mode="json", exclude_none=True)
        row["created_by"] = created_by
        internship = await self.db.create_internship(row)
        logger.info(f"Internship created: {internship.get('id')} ({data.company})")
        return internship
