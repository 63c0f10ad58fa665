"""
Upload routes.

- POST /api/uploads - accept one multipart ``file`` part

Stored files are served back by the static mount at ``/uploads``.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from pharmacy_desk.api.dependencies import get_upload_use_case
from pharmacy_desk.api.responses import (
    UploadedFile,
    UploadResponse,
    error_response,
)
from pharmacy_desk.usecase import UploadUseCase
from pharmacy_desk.validation import DomainValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post("/api/uploads", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    use_case: UploadUseCase = Depends(get_upload_use_case),
) -> Union[UploadResponse, JSONResponse]:
    filename = file.filename if file is not None else None
    logger.info("File upload requested", extra={"upload_filename": filename})

    try:
        data = await file.read() if file is not None else None
        stored = await use_case.upload(filename, data)
    except DomainValidationError as e:
        return error_response(400, str(e))
    except Exception as e:
        logger.error(
            "Failed to upload file",
            exc_info=True,
            extra={
                "upload_filename": filename,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        return error_response(500, "Upload failed")

    logger.info(
        "File uploaded successfully",
        extra={
            "stored_name": stored.stored_name,
            "size_bytes": stored.size_bytes,
        },
    )
    return UploadResponse(
        file=UploadedFile(
            filename=stored.filename,
            file_path=stored.file_path,
            upload_date=stored.upload_date,
        )
    )
