"""
Email routes.

- POST /api/test-email - send a test message to check provider settings
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pharmacy_desk.api.dependencies import get_notification_use_case
from pharmacy_desk.api.requests import TestEmailRequest
from pharmacy_desk.api.responses import SuccessResponse, error_response
from pharmacy_desk.usecase import NotificationUseCase
from pharmacy_desk.validation import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Email"])


@router.post("/api/test-email", response_model=SuccessResponse)
async def send_test_email(
    body: Optional[TestEmailRequest] = None,
    use_case: NotificationUseCase = Depends(get_notification_use_case),
) -> Union[SuccessResponse, JSONResponse]:
    to = body.to if body else None
    try:
        recipient = await use_case.send_test_email(to=to)
    except Exception as e:
        logger.error(
            "Failed to send test email",
            exc_info=True,
            extra={
                "to": to,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        if isinstance(e, (ConfigurationError, DeliveryError)):
            return error_response(500, str(e))
        return error_response(500, "Failed to send test email")

    return SuccessResponse(
        message=f"Test email sent successfully to {recipient}"
    )
