"""Application review workflows: submission, decisions and revocation."""

import logging
from datetime import datetime, UTC

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import (
    ConflictError,
    DownstreamError,
    NotFoundError,
    ValidationError,
)
from academy_portal.models.application import (
    Application,
    ApplicationCreate,
    ApplicationStatus,
    RevocationResult,
    UpdateStatusRequest,
    UpdateStatusResponse,
)
from academy_portal.models.email import (
    ApplicationConfirmation,
    ApprovalEmail,
    DenialEmail,
)
from academy_portal.services.notifier import NotificationPort
from academy_portal.services.provisioning import AccountProvisioner

logger = logging.getLogger(__name__)


class ApplicationService:
    """Admin and applicant operations on applications."""

    def __init__(
        self,
        db: DatabaseClient,
        notifier: NotificationPort,
        provisioner: AccountProvisioner | None = None,
    ) -> None:
        self.db = db
        self.notifier = notifier
        self.provisioner = provisioner or AccountProvisioner(db, notifier)

    async def submit(self, data: ApplicationCreate) -> Application:
        """Record a new application from the public form.

        Raises:
            ValidationError: If name or email is missing
            ConflictError: If an application already exists for the email
        """
        if not data.first_name or not data.last_name or not data.email:
            raise ValidationError("First name, last name and email are required")

        if await self.db.find_application_by_email(data.email):
            raise ConflictError("An application with this email already exists")

        row = data.model_dump(mode="json", exclude_none=True)
        row["status"] = ApplicationStatus.PENDING.value
        row["submitted_at"] = datetime.now(UTC).isoformat()
        application = await self.db.create_application(row)
        logger.info(f"Application {application.id} submitted")

        await self.notifier.notify(
            ApplicationConfirmation(
                first_name=data.first_name,
                last_name=data.last_name,
            ),
            data.email,
        )
        return application

    async def list_applications(
        self,
        status: ApplicationStatus | None,
        limit: int,
    ) -> list[Application]:
        applications = await self.db.list_applications(status=status, limit=limit)
        logger.info(
            f"Fetched {len(applications)} applications with status: "
            f"{status.value if status else 'all'}"
        )
        return applications

    async def update_status(
        self,
        request: UpdateStatusRequest,
        reviewed_by: str | None = None,
    ) -> UpdateStatusResponse:
        """Apply an admin decision to an application.

        Args:
            request: The decision
            reviewed_by: ID of the deciding admin

        Returns:
            UpdateStatusResponse, carrying credentials on approval

        Raises:
            NotFoundError: If the application does not exist
        """
        logger.info(f"Processing status update: {request.application_id} to {request.new_status}")
        application = await self.db.get_application(request.application_id)
        if not application:
            raise NotFoundError("Application not found")

        if request.new_status == ApplicationStatus.REJECTED.value:
            await self.reject(
                application,
                request.admin_comment,
                reviewed_by=reviewed_by,
                recipient=request.email or application.email,
            )
            return UpdateStatusResponse(message="Application rejected successfully")

        credentials = await self.provisioner.provision(application, reviewed_by=reviewed_by)
        return UpdateStatusResponse(
            message="Application approved successfully",
            temp_username=credentials.username,
            temp_password=credentials.temp_password,
        )

    async def reject(
        self,
        application: Application,
        reason: str | None,
        reviewed_by: str | None = None,
        recipient: str | None = None,
    ) -> None:
        """Mark an application rejected and send a denial email.

        No identity or profile is touched.
        """
        try:
            await self.db.update_application(application.id, {
                "status": ApplicationStatus.REJECTED.value,
                "reviewed_at": datetime.now(UTC).isoformat(),
                "reviewed_by": reviewed_by,
                "admin_comment": reason,
            })
        except Exception as e:
            logger.error(f"Error updating application {application.id} to rejected: {e}")
            raise DownstreamError(f"Failed to update application: {e}") from e

        logger.info(f"Application {application.id} rejected")

        if recipient:
            await self.notifier.notify(
                DenialEmail(
                    first_name=application.first_name or "",
                    last_name=application.last_name or "",
                    reason=reason,
                ),
                recipient,
            )

    async def revoke(self, application_id: str, email: str | None) -> RevocationResult:
        """Remove an applicant's profile, identity and application.

        Profile deletion is not undone if the identity delete fails; the
        identity failure is logged and the application is still removed.
        Calling this again for the same application is harmless.

        Args:
            application_id: The application to delete
            email: Email the learner profile was created with

        Returns:
            RevocationResult describing what was deleted
        """
        if not email:
            application = await self.db.get_application(application_id)
            email = application.email if application else None

        user_id: str | None = None
        if email:
            profile = await self.db.get_profile_by_email(email)
            if profile:
                user_id = profile.user_id
                logger.info(f"Found profile with user_id: {user_id}")
            else:
                logger.info(f"No profile found for email: {email}")

        if user_id:
            try:
                await self.db.delete_profile(user_id)
            except Exception as e:
                logger.error(f"Error deleting profile {user_id}: {e}")
                raise DownstreamError(f"Failed to delete profile: {e}") from e
            logger.info(f"Profile deleted for user_id: {user_id}")

            try:
                await self.db.delete_identity(user_id)
                logger.info(f"Auth user deleted: {user_id}")
            except Exception as e:
                logger.error(f"Error deleting auth user {user_id}, continuing: {e}")

        try:
            await self.db.delete_application(application_id)
        except Exception as e:
            logger.error(f"Error deleting application {application_id}: {e}")
            raise DownstreamError(f"Failed to delete application: {e}") from e

        logger.info(f"Revoke access completed for application {application_id}")
        return RevocationResult(
            deleted_profile=user_id is not None,
            deleted_application=True,
        )

    async def resend_credentials(self, user_id: str) -> None:
        """Email a learner their stored temporary credentials again.

        Unlike the approval flow, delivery failure is an error here.

        Raises:
            NotFoundError: If no profile exists for the user
            ValidationError: If the profile has no temporary credentials
            DownstreamError: If the email could not be sent
        """
        profile = await self.db.get_profile(user_id)
        if not profile:
            raise NotFoundError("User profile not found")

        if not profile.username or not profile.temp_password or not profile.email:
            raise ValidationError("User missing credentials")

        result = await self.notifier.notify(
            ApprovalEmail(
                first_name=profile.first_name or "",
                last_name=profile.last_name or "",
                temp_username=profile.username,
                temp_password=profile.temp_password,
            ),
            profile.email,
        )
        if not result.success:
            raise DownstreamError("Failed to send email")
