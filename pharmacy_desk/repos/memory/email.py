"""
Memory implementation of EmailRepository.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from pharmacy_desk.domain import EmailMessage
from pharmacy_desk.repositories import EmailRepository

logger = logging.getLogger(__name__)


class MemoryEmailRepository(EmailRepository):
    """Records messages instead of delivering them.

    Pass ``failure`` to make every send raise it, simulating a provider
    outage.
    """

    def __init__(self, failure: Optional[Exception] = None) -> None:
        self.failure = failure
        self.sent: List[EmailMessage] = []

    async def send_email(self, message: EmailMessage) -> Dict[str, Any]:
        if self.failure is not None:
            raise self.failure
        self.sent.append(message)
        message_id = f"<{uuid.uuid4()}@memory>"
        logger.debug(
            "Email recorded in memory",
            extra={"to": message.to, "message_id": message_id},
        )
        return {"messageId": message_id}
