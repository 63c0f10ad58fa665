"""
Refill and consultation request routes.

- GET /api/requests - all requests, newest first
- POST /api/requests - submit a new request
- PUT /api/requests/{request_id} - change a request's status
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pharmacy_desk.api.dependencies import (
    get_list_requests_use_case,
    get_submit_request_use_case,
    get_update_request_status_use_case,
)
from pharmacy_desk.api.requests import StatusUpdateRequest
from pharmacy_desk.api.responses import (
    RequestListResponse,
    SubmitRequestResponse,
    SuccessResponse,
    error_response,
)
from pharmacy_desk.domain import NewRequestSubmission
from pharmacy_desk.usecase import (
    ListRequestsUseCase,
    SubmitRequestUseCase,
    UpdateRequestStatusUseCase,
)
from pharmacy_desk.validation import (
    DomainValidationError,
    RequestNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Requests"])


@router.get("/api/requests", response_model=RequestListResponse)
async def list_requests(
    use_case: ListRequestsUseCase = Depends(get_list_requests_use_case),
) -> Union[RequestListResponse, JSONResponse]:
    logger.info("Requests list requested")

    try:
        requests = await use_case.list_requests()
    except Exception as e:
        logger.error(
            "Failed to retrieve requests",
            exc_info=True,
            extra={"error_type": type(e).__name__, "error_message": str(e)},
        )
        return error_response(500, "Failed to fetch requests")

    logger.info(
        "Requests retrieved successfully", extra={"count": len(requests)}
    )
    return RequestListResponse(
        requests=[request.to_document() for request in requests]
    )


@router.post("/api/requests", response_model=SubmitRequestResponse)
async def submit_request(
    submission: NewRequestSubmission,
    use_case: SubmitRequestUseCase = Depends(get_submit_request_use_case),
) -> Union[SubmitRequestResponse, JSONResponse]:
    """
    Store a new request with status ``pending`` and notify the pharmacy.

    A failed notification email does not fail the submission.
    """
    logger.info(
        "Request submission received",
        extra={"type": submission.type.value},
    )

    try:
        request = await use_case.submit(submission)
    except Exception as e:
        logger.error(
            "Failed to create request",
            exc_info=True,
            extra={
                "type": submission.type.value,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        return error_response(500, "Failed to create request")

    return SubmitRequestResponse(
        request_id=request.id, message="Request submitted successfully"
    )


@router.put("/api/requests/{request_id}", response_model=SuccessResponse)
async def update_request_status(
    request_id: str,
    body: StatusUpdateRequest,
    use_case: UpdateRequestStatusUseCase = Depends(
        get_update_request_status_use_case
    ),
) -> Union[SuccessResponse, JSONResponse]:
    """
    Set the status of one request and stamp ``updatedAt``.

    Answers 400 for a missing or unknown status and 404 when no request
    has this id; in both cases nothing is written.
    """
    logger.info(
        "Request status update requested",
        extra={"request_id": request_id, "status": body.status},
    )

    try:
        await use_case.update_status(request_id, body.status)
    except DomainValidationError as e:
        return error_response(400, str(e))
    except RequestNotFoundError:
        return error_response(404, "Request not found")
    except Exception as e:
        logger.error(
            "Failed to update request status",
            exc_info=True,
            extra={
                "request_id": request_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        return error_response(500, "Failed to update request status")

    return SuccessResponse(message="Request status updated successfully")
