"""Tests for application submission, review and revocation."""

import pytest

from academy_portal.exceptions import (
    ConflictError,
    DownstreamError,
    NotFoundError,
    ValidationError,
)
from academy_portal.models.application import (
    ApplicationCreate,
    ApplicationStatus,
    UpdateStatusRequest,
)
from academy_portal.models.email import (
    ApplicationConfirmation,
    ApprovalEmail,
    DenialEmail,
)
from academy_portal.services.applications import ApplicationService
from academy_portal.services.notifier import NotificationPort

from conftest import RecordingEmailSender


class TestSubmit:
    """Tests for ApplicationService.submit."""

    @pytest.mark.asyncio
    async def test_submit_creates_pending(self, db, notifier, email_sender):
        service = ApplicationService(db, notifier)

        application = await service.submit(ApplicationCreate(
            first_name="Jane",
            last_name="Doe",
            email="jane@ucla.edu",
            major="Finance",
        ))

        assert application.status == ApplicationStatus.PENDING
        assert application.submitted_at is not None
        assert db.applications[application.id]["major"] == "Finance"
        template, recipient = email_sender.sent[0]
        assert isinstance(template, ApplicationConfirmation)
        assert recipient == "jane@ucla.edu"

    @pytest.mark.asyncio
    async def test_submit_ignores_review_and_unknown_fields(self, db, notifier):
        service = ApplicationService(db, notifier)

        application = await service.submit(ApplicationCreate(
            first_name="Eve",
            last_name="Smith",
            email="eve@ucla.edu",
            id="chosen-id",
            reviewed_by="forged-admin",
            reviewed_at="2025-01-01T00:00:00Z",
            admin_comment="pre-approved",
            created_by_admin=True,
            favourite_color="green",
        ))

        assert application.id != "chosen-id"
        row = db.applications[application.id]
        for column in (
            "reviewed_by", "reviewed_at", "admin_comment", "created_by_admin", "favourite_color"
        ):
            assert column not in row
        assert row["status"] == "pending"

    @pytest.mark.asyncio
    async def test_submit_duplicate_email(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)

        with pytest.raises(ConflictError):
            await service.submit(ApplicationCreate(
                first_name="Jane",
                last_name="Doe",
                email="jane@ucla.edu",
            ))
        assert len(db.applications) == 1

    @pytest.mark.asyncio
    async def test_submit_requires_name(self, db, notifier):
        service = ApplicationService(db, notifier)

        with pytest.raises(ValidationError):
            await service.submit(ApplicationCreate(email="jane@ucla.edu"))
        assert db.applications == {}


class TestUpdateStatus:
    """Tests for ApplicationService.update_status."""

    @pytest.mark.asyncio
    async def test_approve_returns_credentials(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)

        response = await service.update_status(
            UpdateStatusRequest(applicationId=jane_application.id, newStatus="approved"),
            reviewed_by="admin-1",
        )

        assert response.success is True
        assert response.message == "Application approved successfully"
        assert response.temp_username == "jane.doe"
        assert len(response.temp_password) == 16

    @pytest.mark.asyncio
    async def test_reject_touches_only_application(
        self, db, notifier, email_sender, jane_application
    ):
        service = ApplicationService(db, notifier)

        response = await service.update_status(
            UpdateStatusRequest(
                applicationId=jane_application.id,
                newStatus="rejected",
                adminComment="Incomplete answers",
            ),
            reviewed_by="admin-1",
        )

        assert response.message == "Application rejected successfully"
        assert response.temp_username is None
        row = db.applications[jane_application.id]
        assert row["status"] == "rejected"
        assert row["admin_comment"] == "Incomplete answers"
        assert row["reviewed_at"] is not None
        assert db.identities == {}
        assert db.profiles == {}

        template, recipient = email_sender.sent[0]
        assert isinstance(template, DenialEmail)
        assert template.reason == "Incomplete answers"
        assert recipient == "jane@ucla.edu"

    @pytest.mark.asyncio
    async def test_reject_uses_request_email(self, db, notifier, email_sender, jane_application):
        service = ApplicationService(db, notifier)

        await service.update_status(UpdateStatusRequest(
            applicationId=jane_application.id,
            newStatus="rejected",
            email="jane.personal@example.com",
        ))

        assert email_sender.sent[0][1] == "jane.personal@example.com"

    @pytest.mark.asyncio
    async def test_unknown_application(self, db, notifier):
        service = ApplicationService(db, notifier)

        with pytest.raises(NotFoundError):
            await service.update_status(
                UpdateStatusRequest(applicationId="missing", newStatus="approved"),
            )
        assert db.identities == {}


class TestRevoke:
    """Tests for ApplicationService.revoke."""

    @pytest.mark.asyncio
    async def test_revoke_approved(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)
        await service.provisioner.provision(jane_application)

        result = await service.revoke(jane_application.id, "jane@ucla.edu")

        assert result.deleted_profile is True
        assert result.deleted_application is True
        assert db.profiles == {}
        assert db.identities == {}
        assert db.applications == {}

    @pytest.mark.asyncio
    async def test_revoke_twice(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)
        await service.provisioner.provision(jane_application)

        await service.revoke(jane_application.id, "jane@ucla.edu")
        second = await service.revoke(jane_application.id, "jane@ucla.edu")

        assert second.deleted_profile is False
        assert second.deleted_application is True

    @pytest.mark.asyncio
    async def test_revoke_without_email_uses_application(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)
        await service.provisioner.provision(jane_application)

        result = await service.revoke(jane_application.id, None)

        assert result.deleted_profile is True
        assert db.profiles == {}

    @pytest.mark.asyncio
    async def test_identity_delete_failure_still_deletes_application(
        self, db, notifier, jane_application
    ):
        service = ApplicationService(db, notifier)
        await service.provisioner.provision(jane_application)
        db.fail_on.add("delete_identity")

        result = await service.revoke(jane_application.id, "jane@ucla.edu")

        assert result.deleted_profile is True
        assert db.profiles == {}
        assert len(db.identities) == 1
        assert db.applications == {}

    @pytest.mark.asyncio
    async def test_profile_delete_failure(self, db, notifier, jane_application):
        service = ApplicationService(db, notifier)
        await service.provisioner.provision(jane_application)
        db.fail_on.add("delete_profile")

        with pytest.raises(DownstreamError):
            await service.revoke(jane_application.id, "jane@ucla.edu")
        assert jane_application.id in db.applications


class TestResendCredentials:
    """Tests for ApplicationService.resend_credentials."""

    @pytest.mark.asyncio
    async def test_resend(self, db, notifier, email_sender, jane_application):
        service = ApplicationService(db, notifier)
        credentials = await service.provisioner.provision(jane_application)
        user_id = next(iter(db.profiles))
        email_sender.sent.clear()

        await service.resend_credentials(user_id)

        template, recipient = email_sender.sent[0]
        assert isinstance(template, ApprovalEmail)
        assert template.temp_password == credentials.temp_password
        assert recipient == "jane@ucla.edu"

    @pytest.mark.asyncio
    async def test_unknown_user(self, db, notifier):
        service = ApplicationService(db, notifier)

        with pytest.raises(NotFoundError):
            await service.resend_credentials("missing")

    @pytest.mark.asyncio
    async def test_missing_credentials(self, db, notifier):
        await db.insert_profile({"user_id": "u1", "email": "a@b.edu"})
        service = ApplicationService(db, notifier)

        with pytest.raises(ValidationError):
            await service.resend_credentials("u1")

    @pytest.mark.asyncio
    async def test_delivery_failure_is_an_error(self, db, jane_application):
        service = ApplicationService(db, NotificationPort(RecordingEmailSender(succeed=False)))
        await service.provisioner.provision(jane_application)

        with pytest.raises(DownstreamError) as exc_info:
            await service.resend_credentials(next(iter(db.profiles)))
        assert exc_info.value.message == "Failed to send email"
