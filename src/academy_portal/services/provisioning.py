"""Account provisioning - turns an approved application into a learner login.

The workflow is a fixed sequence of remote writes:

1. resolve (or create) the auth identity for the applicant's email and set
   its password to a fresh temporary password,
2. upsert the learner profile keyed on the identity ID,
3. mark the application approved,
4. email the credentials (best-effort).

Nothing is rolled back if a later step fails. Every step converges when
repeated, so an admin can simply retry a failed approval: the identity is
found by email and reset, and the existing profile is updated in place.

Usernames are ``first.last`` in lowercase with no collision handling; two
applicants with the same name receive the same username.
"""

import logging
import secrets
import string
from datetime import datetime, UTC

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import (
    DownstreamError,
    IdentityError,
    ProfileWriteError,
    ValidationError,
)
from academy_portal.models.application import Application, ApplicationStatus
from academy_portal.models.email import ApprovalEmail
from academy_portal.models.identity import UserIdentity
from academy_portal.models.profile import Credentials
from academy_portal.services.notifier import NotificationPort

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
PASSWORD_FRAGMENT_LENGTH = 8

REQUIRED_FIELDS = ("first_name", "last_name", "email")


def derive_username(first_name: str, last_name: str) -> str:
    """Build the temporary ``first.last`` username."""
    return f"{first_name.lower()}.{last_name.lower()}"


def _base36_fragment(length: int = PASSWORD_FRAGMENT_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_temp_password() -> str:
    """Generate a 16-character password from two base-36 fragments."""
    return _base36_fragment() + _base36_fragment()


class AccountProvisioner:
    """Creates or refreshes the login for an approved application."""

    def __init__(self, db: DatabaseClient, notifier: NotificationPort) -> None:
        self.db = db
        self.notifier = notifier

    async def provision(
        self,
        application: Application,
        reviewed_by: str | None = None,
    ) -> Credentials:
        """Provision credentials for an application and mark it approved.

        Args:
            application: The application being approved
            reviewed_by: ID of the approving admin, stamped on the application

        Returns:
            The temporary credentials that were issued

        Raises:
            ValidationError: If first name, last name or email is missing
            IdentityError: If the auth identity cannot be resolved or written
            ProfileWriteError: If the profile upsert fails
            DownstreamError: If the application status update fails
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(application, name)]
        if missing:
            raise ValidationError(
                f"Application is missing required fields: {', '.join(missing)}"
            )

        username = derive_username(application.first_name, application.last_name)
        temp_password = generate_temp_password()
        logger.info(f"Provisioning account {username} for application {application.id}")

        identity = await self._resolve_identity(application.email, temp_password)
        await self._upsert_profile(identity, application, username, temp_password)

        try:
            await self.db.update_application(application.id, {
                "status": ApplicationStatus.APPROVED.value,
                "reviewed_at": datetime.now(UTC).isoformat(),
                "reviewed_by": reviewed_by,
            })
        except Exception as e:
            logger.error(f"Error updating application {application.id} to approved: {e}")
            raise DownstreamError(f"Failed to update application: {e}") from e

        await self.notifier.notify(
            ApprovalEmail(
                first_name=application.first_name,
                last_name=application.last_name,
                temp_username=username,
                temp_password=temp_password,
            ),
            application.email,
        )

        return Credentials(username=username, temp_password=temp_password)

    async def _resolve_identity(self, email: str, password: str) -> UserIdentity:
        """Find the identity for an email and reset its password, or create it."""
        try:
            identity = await self.db.find_identity_by_email(email)
            if identity:
                await self.db.update_identity_password(identity.id, password)
                logger.info(f"Reset password on existing identity {identity.id}")
                return identity

            identity = await self.db.create_identity(email, password)
            logger.info(f"Created identity {identity.id} for {email}")
            return identity
        except Exception as e:
            logger.error(f"Identity provisioning failed for {email}: {e}")
            raise IdentityError(f"Failed to provision identity: {e}") from e

    async def _upsert_profile(
        self,
        identity: UserIdentity,
        application: Application,
        username: str,
        temp_password: str,
    ) -> None:
        """Insert or update the profile for an identity.

        Academic fields are only written when the application has a value,
        so populated profile fields are never overwritten with null.
        """
        fields = {
            "first_name": application.first_name,
            "last_name": application.last_name,
            "email": application.email,
            "username": username,
            "temp_password": temp_password,
            "is_temp_password_used": False,
            **application.academic_fields(),
        }

        try:
            existing = await self.db.get_profile(identity.id)
            if existing:
                await self.db.update_profile(identity.id, fields)
                logger.info(f"Updated profile for identity {identity.id}")
            else:
                await self.db.insert_profile({"user_id": identity.id, **fields})
                logger.info(f"Created profile for identity {identity.id}")
        except Exception as e:
            logger.error(f"Profile upsert failed for identity {identity.id}: {e}")
            raise ProfileWriteError(f"Failed to write profile: {e}") from e
