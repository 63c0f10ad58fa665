"""
Brevo implementation of the EmailRepository protocol.

Messages are delivered with a single POST to Brevo's transactional email
endpoint. There is no retry, queueing or receipt tracking: a failed call is
raised to the caller as a DeliveryError.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from pharmacy_desk.config import BREVO_API_URL
from pharmacy_desk.domain import EmailMessage
from pharmacy_desk.repositories import EmailRepository
from pharmacy_desk.validation import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BrevoEmailRepository(EmailRepository):
    def __init__(
        self,
        api_key: Optional[str],
        sender_email: str,
        sender_name: str,
        api_url: str = BREVO_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._api_key = api_key
        self._sender_email = sender_email
        self._sender_name = sender_name
        self._api_url = api_url
        self._transport = transport
        self._timeout = timeout

    def _payload(self, message: EmailMessage) -> Dict[str, Any]:
        return {
            "sender": {
                "name": self._sender_name,
                "email": self._sender_email,
            },
            "to": [{"email": message.to}],
            "subject": message.subject,
            "htmlContent": message.html,
        }

    async def send_email(self, message: EmailMessage) -> Dict[str, Any]:
        if not self._api_key:
            logger.error("BREVO_API_KEY is not configured")
            raise ConfigurationError("Email service not configured")

        logger.debug(
            "Sending email through Brevo",
            extra={"to": message.to, "subject": message.subject},
        )
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.post(
                    self._api_url,
                    json=self._payload(message),
                    headers={"api-key": self._api_key},
                )
        except httpx.HTTPError as e:
            logger.error(
                "Failed to reach Brevo",
                extra={"to": message.to, "error_type": type(e).__name__},
                exc_info=True,
            )
            raise DeliveryError(f"Brevo request failed: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("message") if isinstance(body, dict) else None
            reason = detail or response.reason_phrase
            logger.error(
                "Brevo rejected email",
                extra={
                    "to": message.to,
                    "status_code": response.status_code,
                    "reason": reason,
                },
            )
            raise DeliveryError(f"Brevo API error: {reason}")

        try:
            receipt = response.json() if response.content else {}
        except ValueError:
            receipt = {}
        if not isinstance(receipt, dict):
            receipt = {}
        logger.info(
            "Email sent successfully",
            extra={"to": message.to, "message_id": receipt.get("messageId")},
        )
        return receipt
