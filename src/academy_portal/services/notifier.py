"""Email notification service.

Workflows hand a typed ``EmailTemplate`` and a recipient to the
``NotificationPort`` after their writes have committed. Delivery is
best-effort: failures come back as a ``DeliveryResult`` and are logged,
never raised into the calling workflow.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque

import httpx

from academy_portal.config import get_settings
from academy_portal.models.email import DeliveryResult, EmailTemplate

logger = logging.getLogger(__name__)


# Default timeout for HTTP requests
DEFAULT_TIMEOUT = 10.0

# Delivery attempts kept in memory per NotificationPort
HISTORY_SIZE = 100


class EmailSender(ABC):
    """Base class for email delivery backends."""

    @abstractmethod
    async def send(self, template: EmailTemplate, recipient: str) -> DeliveryResult:
        """Deliver a rendered template to one recipient."""
        ...

    def _make_result(
        self,
        template: EmailTemplate,
        recipient: str,
        success: bool,
        error_message: str | None = None,
        external_id: str | None = None,
    ) -> DeliveryResult:
        """Create a DeliveryResult."""
        return DeliveryResult(
            kind=template.kind,
            recipient=recipient,
            success=success,
            error_message=error_message,
            external_id=external_id,
        )


class ResendEmailSender(EmailSender):
    """Send email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str | None,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize with Resend credentials.

        Args:
            api_key: Resend API key. If None, sending will fail.
            sender: The From header, e.g. ``"Name <addr@example.com>"``
            api_url: Endpoint to POST messages to
            timeout: Request timeout in seconds
        """
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout

    async def send(self, template: EmailTemplate, recipient: str) -> DeliveryResult:
        """Send one email via Resend."""
        if not self._api_key:
            return self._make_result(
                template,
                recipient,
                success=False,
                error_message="Resend API key not configured",
            )

        payload = {
            "from": self._sender,
            "to": [recipient],
            "subject": template.subject(),
            "html": template.html(),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                )

                if 200 <= response.status_code < 300:
                    message_id = response.json().get("id")
                    return self._make_result(
                        template,
                        recipient,
                        success=True,
                        external_id=str(message_id) if message_id else None,
                    )
                else:
                    return self._make_result(
                        template,
                        recipient,
                        success=False,
                        error_message=f"Resend API error: {response.status_code}",
                    )

        except httpx.TimeoutException:
            return self._make_result(
                template,
                recipient,
                success=False,
                error_message="Resend request timed out",
            )
        except Exception as e:
            logger.exception("Resend email failed")
            return self._make_result(
                template,
                recipient,
                success=False,
                error_message=str(e),
            )


class LoggingEmailSender(EmailSender):
    """Records emails in the log instead of sending them.

    Used when no provider key is configured (local development).
    """

    async def send(self, template: EmailTemplate, recipient: str) -> DeliveryResult:
        logger.info(
            f"Email (not sent - no provider configured): "
            f"kind={template.kind.value}, to={recipient}, subject={template.subject()}"
        )
        return self._make_result(
            template,
            recipient,
            success=False,
            error_message="No email provider configured",
        )


class NotificationPort:
    """Best-effort dispatcher in front of an EmailSender.

    Never raises: every outcome, including unexpected exceptions from the
    sender, is reduced to a DeliveryResult and logged.
    """

    def __init__(self, sender: EmailSender, history_size: int = HISTORY_SIZE) -> None:
        self._sender = sender
        self._history: deque[DeliveryResult] = deque(maxlen=history_size)

    async def notify(self, template: EmailTemplate, recipient: str) -> DeliveryResult:
        """Send a template, logging rather than propagating failures.

        Args:
            template: The email to send
            recipient: Destination address

        Returns:
            DeliveryResult describing the attempt
        """
        try:
            result = await self._sender.send(template, recipient)
        except Exception as e:
            logger.exception(f"Email sender raised for {template.kind.value} to {recipient}")
            result = DeliveryResult(
                kind=template.kind,
                recipient=recipient,
                success=False,
                error_message=str(e),
            )

        if result.success:
            logger.info(
                f"Sent {template.kind.value} email to {recipient} "
                f"(id={result.external_id})"
            )
        else:
            logger.error(
                f"Failed to send {template.kind.value} email to {recipient}: "
                f"{result.error_message}"
            )

        self._history.append(result)
        return result

    def get_history(self, limit: int = 50) -> list[DeliveryResult]:
        """Most recent delivery attempts, newest first."""
        return list(reversed(self._history))[:limit]


def build_email_sender() -> EmailSender:
    """Create the configured email sender."""
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set; emails will only be logged")
        return LoggingEmailSender()
    return ResendEmailSender(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        api_url=settings.email_api_url,
        timeout=settings.email_timeout_seconds,
    )
