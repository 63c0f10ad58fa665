"""
Pydantic models for API responses.
These define the contract between the API and external clients.

Every JSON body carries a ``success`` flag. Failures use the shape
``{"success": false, "error": "..."}`` produced by ``error_response``.
Field names are serialised in camelCase.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pharmacy_desk.validation import (
    AuthorizationError,
    DomainValidationError,
    RequestNotFoundError,
)


class ApiResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True


class HealthCheckResponse(BaseModel):
    """Response for health check endpoint."""

    status: str
    version: str
    timestamp: datetime


class SuccessResponse(ApiResponse):
    message: str


class SessionResponse(ApiResponse):
    authenticated: bool
    username: Optional[str] = None


class RequestListResponse(ApiResponse):
    requests: List[Dict[str, Any]]


class SubmitRequestResponse(ApiResponse):
    request_id: str
    message: str


class BackupResponse(ApiResponse):
    message: str
    spreadsheet_id: str


class UploadedFile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    file_path: str
    upload_date: str


class UploadResponse(ApiResponse):
    file: UploadedFile


def status_code_for(error: Exception) -> int:
    """HTTP status for an error raised below the API layer."""
    if isinstance(error, DomainValidationError):
        return 400
    if isinstance(error, AuthorizationError):
        return 401
    if isinstance(error, RequestNotFoundError):
        return 404
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )
