"""Tests for email templates and delivery."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from pydantic import TypeAdapter

from academy_portal.models.email import (
    AdminInvite,
    ApprovalEmail,
    DenialEmail,
    EmailKind,
    EmailTemplate,
    PasswordSetup,
)
from academy_portal.services.notifier import (
    LoggingEmailSender,
    NotificationPort,
    ResendEmailSender,
)

from conftest import RaisingEmailSender


def _approval() -> ApprovalEmail:
    return ApprovalEmail(
        first_name="Jane",
        last_name="Doe",
        temp_username="jane.doe",
        temp_password="abc123def456ghi7",
    )


def _mock_client(mock_client, response):
    mock_instance = AsyncMock()
    mock_instance.post = AsyncMock(return_value=response)
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=None)
    mock_client.return_value = mock_instance
    return mock_instance


class TestEmailTemplates:
    """Tests for template rendering."""

    def test_approval_contains_credentials(self):
        html = _approval().html()
        assert "jane.doe" in html
        assert "abc123def456ghi7" in html
        assert "Approved" in _approval().subject()

    def test_denial_escapes_reason(self):
        email = DenialEmail(first_name="Jane", last_name="Doe", reason="<b>late</b>")
        assert "&lt;b&gt;late&lt;/b&gt;" in email.html()
        assert "<b>late</b>" not in email.html()

    def test_discriminated_union(self):
        adapter = TypeAdapter(EmailTemplate)
        template = adapter.validate_python({
            "kind": "password_setup",
            "first_name": "Jane",
            "setup_url": "https://example.com/setup",
        })
        assert isinstance(template, PasswordSetup)

    def test_admin_invite(self):
        invite = AdminInvite(
            full_name="Club Treasurer",
            username="treasurer",
            invite_url="https://example.com/invite?t=1&x=2",
        )
        assert "treasurer" in invite.html()
        assert "t=1&amp;x=2" in invite.html()


class TestResendEmailSender:
    """Tests for ResendEmailSender."""

    @pytest.mark.asyncio
    async def test_send_without_key(self):
        sender = ResendEmailSender(api_key=None, sender="Academy <a@example.com>")

        result = await sender.send(_approval(), "jane@ucla.edu")

        assert result.success is False
        assert "not configured" in result.error_message

    @pytest.mark.asyncio
    async def test_send_success(self):
        sender = ResendEmailSender(api_key="re_test", sender="Academy <a@example.com>")

        with patch("academy_portal.services.notifier.httpx.AsyncClient") as mock_client:
            response = MagicMock()
            response.status_code = 200
            response.json.return_value = {"id": "msg_123"}
            instance = _mock_client(mock_client, response)

            result = await sender.send(_approval(), "jane@ucla.edu")

            assert result.success is True
            assert result.external_id == "msg_123"
            assert result.kind == EmailKind.APPROVAL

            payload = instance.post.call_args.kwargs["json"]
            assert payload["to"] == ["jane@ucla.edu"]
            assert payload["from"] == "Academy <a@example.com>"
            headers = instance.post.call_args.kwargs["headers"]
            assert headers["Authorization"] == "Bearer re_test"

    @pytest.mark.asyncio
    async def test_send_api_error(self):
        sender = ResendEmailSender(api_key="re_test", sender="a@example.com")

        with patch("academy_portal.services.notifier.httpx.AsyncClient") as mock_client:
            response = MagicMock()
            response.status_code = 422
            _mock_client(mock_client, response)

            result = await sender.send(_approval(), "jane@ucla.edu")

        assert result.success is False
        assert "422" in result.error_message

    @pytest.mark.asyncio
    async def test_send_timeout(self):
        sender = ResendEmailSender(api_key="re_test", sender="a@example.com")

        with patch("academy_portal.services.notifier.httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, None)
            instance.post = AsyncMock(side_effect=httpx.TimeoutException("slow"))

            result = await sender.send(_approval(), "jane@ucla.edu")

        assert result.success is False
        assert "timed out" in result.error_message


class TestNotificationPort:
    """Tests for NotificationPort."""

    @pytest.mark.asyncio
    async def test_logging_sender_reports_failure(self):
        port = NotificationPort(LoggingEmailSender())

        result = await port.notify(_approval(), "jane@ucla.edu")

        assert result.success is False
        assert result.error_message == "No email provider configured"

    @pytest.mark.asyncio
    async def test_sender_exception_is_swallowed(self):
        port = NotificationPort(RaisingEmailSender())

        result = await port.notify(_approval(), "jane@ucla.edu")

        assert result.success is False
        assert result.recipient == "jane@ucla.edu"

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, email_sender):
        port = NotificationPort(email_sender, history_size=3)

        for n in range(5):
            await port.notify(_approval(), f"student{n}@ucla.edu")

        history = port.get_history()
        assert [r.recipient for r in history] == [
            "student4@ucla.edu",
            "student3@ucla.edu",
            "student2@ucla.edu",
        ]
        assert len(email_sender.sent) == 5

    @pytest.mark.asyncio
    async def test_history_newest_first(self, notifier):
        await notifier.notify(_approval(), "first@ucla.edu")
        await notifier.notify(_approval(), "second@ucla.edu")

        history = notifier.get_history(limit=1)
        assert len(history) == 1
        assert history[0].recipient == "second@ucla.edu"
