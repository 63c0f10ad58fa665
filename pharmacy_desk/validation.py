"""
Runtime validation utilities and the error types raised at application
boundaries.

This module provides functions to validate:

- Repository implementations against their defined Protocols using
  @runtime_checkable.
- Status values requested by callers against the RequestStatus enum.
- Upload filenames, which are rewritten into a safe storage form.

The error classes map one-to-one onto the HTTP failure responses produced
by the API layer (see ``pharmacy_desk.api.responses.status_code_for``).
"""

import logging
import re
from typing import Optional, Type, TypeVar

from pharmacy_desk.domain import RequestStatus
from pharmacy_desk.repositories import (
    BackupSinkRepository,
    CollectionExportRepository,
    EmailRepository,
    RequestRepository,
    UploadStorageRepository,
)

logger = logging.getLogger(__name__)

P = TypeVar("P")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class RepositoryValidationError(Exception):
    """Raised when repository contract validation fails"""

    pass


class DomainValidationError(Exception):
    """Raised when caller input is missing or malformed"""

    pass


class AuthorizationError(Exception):
    """Raised when credentials or a shared secret do not match"""

    pass


class RequestNotFoundError(LookupError):
    """Raised when no record matches the requested identifier"""

    def __init__(self, request_id: str) -> None:
        super().__init__(f"Request not found: {request_id}")
        self.request_id = request_id


class ConfigurationError(RuntimeError):
    """Raised when a required setting is absent or unusable"""

    pass


class DeliveryError(RuntimeError):
    """Raised when the email provider rejects or fails a delivery"""

    pass


def validate_repository_protocol(
    repository: object, protocol: Type[P]
) -> None:
    """
    Validate that a repository implementation satisfies a protocol contract.

    Args:
        repository: The repository implementation to validate
        protocol: The protocol class to validate against

    Raises:
        RepositoryValidationError: If validation fails
    """
    if not isinstance(repository, protocol):
        error_message = (
            f"Repository {type(repository).__name__} does not implement "
            f"{protocol.__name__} protocol. Missing or incorrect methods."
        )

        logger.error(
            "Repository protocol validation failed",
            extra={
                "repository_type": type(repository).__name__,
                "protocol_name": protocol.__name__,
            },
        )

        raise RepositoryValidationError(error_message)

    logger.debug(
        "Repository protocol validation passed",
        extra={
            "repository_type": type(repository).__name__,
            "protocol_name": protocol.__name__,
        },
    )


def ensure_repository_protocol(repository: object, protocol: Type[P]) -> P:
    """
    Validate and return a repository with proper type annotation.

    This provides both runtime validation and static type checking benefits.
    """
    validate_repository_protocol(repository, protocol)
    return repository  # type: ignore[return-value]


def ensure_request_repository(repository: object) -> RequestRepository:
    return ensure_repository_protocol(repository, RequestRepository)


def ensure_collection_export_repository(
    repository: object,
) -> CollectionExportRepository:
    return ensure_repository_protocol(repository, CollectionExportRepository)


def ensure_backup_sink_repository(repository: object) -> BackupSinkRepository:
    return ensure_repository_protocol(repository, BackupSinkRepository)


def ensure_email_repository(repository: object) -> EmailRepository:
    return ensure_repository_protocol(repository, EmailRepository)


def ensure_upload_storage_repository(
    repository: object,
) -> UploadStorageRepository:
    return ensure_repository_protocol(repository, UploadStorageRepository)


def parse_request_status(value: Optional[str]) -> RequestStatus:
    """
    Convert a caller-supplied status string into a RequestStatus.

    Raises:
        DomainValidationError: "Status is required" when value is missing or
            empty, "Invalid status" when it is not one of the known values.
    """
    if not value:
        raise DomainValidationError("Status is required")
    try:
        return RequestStatus(value)
    except ValueError:
        logger.warning(
            "Rejected unknown request status", extra={"status": value}
        )
        raise DomainValidationError("Invalid status") from None


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for safe storage.

    Every character outside ``[A-Za-z0-9_.-]`` becomes an underscore, so
    path separators and whitespace can never reach the filesystem.

    >>> sanitize_filename("my file@2024!.pdf")
    'my_file_2024_.pdf'
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)
