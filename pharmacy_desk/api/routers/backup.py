"""
Backup routes.

- POST /api/backup - export the document store to Google Sheets
- GET /api/backup - liveness only
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from pharmacy_desk.api.dependencies import get_backup_use_case
from pharmacy_desk.api.responses import (
    BackupResponse,
    SuccessResponse,
    error_response,
)
from pharmacy_desk.usecase import BackupUseCase
from pharmacy_desk.validation import AuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Backup"])


@router.post("/api/backup", response_model=BackupResponse)
async def trigger_backup(
    x_api_key: Optional[str] = Header(None, alias="x-api-key"),
    use_case: BackupUseCase = Depends(get_backup_use_case),
) -> Union[BackupResponse, JSONResponse]:
    """
    Run one backup.

    When a backup key is configured the ``x-api-key`` header must match it;
    otherwise the call is rejected with 401 before anything is read.
    """
    try:
        outcome = await use_case.perform_backup(api_key=x_api_key)
    except AuthorizationError as e:
        return error_response(401, str(e))
    except Exception as e:
        logger.error(
            "Backup request failed",
            exc_info=True,
            extra={"error_type": type(e).__name__, "error_message": str(e)},
        )
        return error_response(500, "Backup failed")

    if not outcome.success:
        return error_response(500, outcome.error or "Backup failed")

    return BackupResponse(
        message="Backup completed successfully",
        spreadsheet_id=outcome.spreadsheet_id,
    )


@router.get("/api/backup", response_model=SuccessResponse)
async def backup_status() -> SuccessResponse:
    return SuccessResponse(
        message="Backup API is available. Use POST to trigger a backup."
    )
