"""
usecase logic must be clean, without direct dependencies.
dependencies are injected via repository instances.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pharmacy_desk.auth import credentials_match, issue_session_token
from pharmacy_desk.config import Settings
from pharmacy_desk.domain import (
    BackupOutcome,
    EmailMessage,
    NewRequestSubmission,
    PharmacyRequest,
    RequestStatus,
    StoredUpload,
)
from pharmacy_desk.emails import (
    render_new_request_email,
    render_test_email,
    request_title,
)
from pharmacy_desk.repositories import (
    BackupSinkRepository,
    CollectionExportRepository,
    EmailRepository,
    RequestRepository,
    UploadStorageRepository,
)
from pharmacy_desk.validation import (
    AuthorizationError,
    DomainValidationError,
    RequestNotFoundError,
    ensure_backup_sink_repository,
    ensure_collection_export_repository,
    ensure_email_repository,
    ensure_request_repository,
    ensure_upload_storage_repository,
    parse_request_status,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UpdateRequestStatusUseCase:
    """
    Validates and applies a status change to a single request.

    The three statuses form an unordered set: every transition is allowed,
    including setting the current value again (which only advances
    ``updatedAt``). Validation happens before the repository is touched, so
    a rejected status never reaches the store.
    """

    def __init__(
        self, request_repo: RequestRepository, clock: Clock = _utcnow
    ) -> None:
        self.request_repo = ensure_request_repository(request_repo)
        self.clock = clock

    async def update_status(
        self, request_id: str, status: Optional[str]
    ) -> RequestStatus:
        """
        Args:
            request_id: Identifier of the record to update
            status: Requested status string as received from the caller

        Returns:
            The status that was applied

        Raises:
            DomainValidationError: status missing or not a known value
            RequestNotFoundError: no record has this identifier
        """
        new_status = parse_request_status(status)

        matched = await self.request_repo.update_status(
            request_id, new_status, self.clock()
        )
        if not matched:
            logger.warning(
                "Status update for unknown request",
                extra={"request_id": request_id, "status": new_status.value},
            )
            raise RequestNotFoundError(request_id)

        logger.info(
            "Request status updated",
            extra={"request_id": request_id, "status": new_status.value},
        )
        return new_status


class ListRequestsUseCase:
    def __init__(self, request_repo: RequestRepository) -> None:
        self.request_repo = ensure_request_repository(request_repo)

    async def list_requests(self) -> List[PharmacyRequest]:
        return await self.request_repo.list_all()


class NotificationUseCase:
    """Sends transactional email through the configured provider.

    Provider failures are propagated to the caller unchanged; nothing is
    retried or queued.
    """

    def __init__(
        self,
        email_repo: EmailRepository,
        settings: Settings,
        clock: Clock = _utcnow,
    ) -> None:
        self.email_repo = ensure_email_repository(email_repo)
        self.settings = settings
        self.clock = clock

    async def send_test_email(self, to: Optional[str] = None) -> str:
        """Send the configuration test email.

        Args:
            to: Recipient; falls back to the configured admin address

        Returns:
            The address the email was sent to
        """
        recipient = to or self.settings.admin_email
        html = render_test_email(
            sender=self.settings.mail_from,
            recipient=recipient,
            sent_at=self.clock(),
        )
        await self.email_repo.send_email(
            EmailMessage(
                to=recipient,
                subject=f"Test Email from {self.settings.mail_from_name}",
                html=html,
            )
        )
        logger.info("Test email sent", extra={"to": recipient})
        return recipient

    async def notify_new_request(self, request: PharmacyRequest) -> None:
        html = render_new_request_email(
            request,
            dashboard_url=self.settings.admin_dashboard_url,
            brand=self.settings.mail_from_name,
        )
        await self.email_repo.send_email(
            EmailMessage(
                to=self.settings.admin_email,
                subject=f"New {request_title(request)}",
                html=html,
            )
        )


class SubmitRequestUseCase:
    """
    Records a new refill/consultation request and tells the pharmacy
    about it.

    The admin notification is best effort: the request is already stored
    when the email is attempted, so a provider failure is logged and the
    submission still succeeds.
    """

    def __init__(
        self,
        request_repo: RequestRepository,
        notifications: NotificationUseCase,
        clock: Clock = _utcnow,
    ) -> None:
        self.request_repo = ensure_request_repository(request_repo)
        self.notifications = notifications
        self.clock = clock

    async def submit(
        self, submission: NewRequestSubmission
    ) -> PharmacyRequest:
        request_id = await self.request_repo.generate_id()
        request = PharmacyRequest(
            id=request_id,
            type=submission.type,
            status=RequestStatus.PENDING,
            created_at=self.clock(),
            **submission.business_fields(),
        )
        await self.request_repo.save(request)
        logger.info(
            "Request submitted",
            extra={"request_id": request.id, "type": request.type.value},
        )

        try:
            await self.notifications.notify_new_request(request)
        except Exception as e:
            logger.error(
                "Failed to send email notification",
                extra={
                    "request_id": request.id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
        return request


class BackupUseCase:
    """
    Exports the whole document store to the backup sink.

    One attempt per call. Authorization is checked before anything is read;
    every later failure is reported as an unsuccessful BackupOutcome rather
    than raised.
    """

    def __init__(
        self,
        export_repo: CollectionExportRepository,
        sink_repo: BackupSinkRepository,
        backup_api_key: Optional[str] = None,
    ) -> None:
        self.export_repo = ensure_collection_export_repository(export_repo)
        self.sink_repo = ensure_backup_sink_repository(sink_repo)
        self.backup_api_key = backup_api_key

    def authorize(self, api_key: Optional[str]) -> None:
        """
        Raises:
            AuthorizationError: a backup key is configured and ``api_key``
                does not match it
        """
        if not self.backup_api_key:
            return
        supplied = (api_key or "").encode("utf-8")
        if not secrets.compare_digest(
            supplied, self.backup_api_key.encode("utf-8")
        ):
            logger.warning("Backup rejected: API key mismatch")
            raise AuthorizationError("Unauthorized")

    async def perform_backup(
        self, api_key: Optional[str] = None, check_api_key: bool = True
    ) -> BackupOutcome:
        """
        Args:
            api_key: Shared secret supplied by the caller
            check_api_key: False for trusted local callers (the CLI)

        Raises:
            AuthorizationError: see ``authorize``
        """
        if check_api_key:
            self.authorize(api_key)

        logger.info("Backup started")
        try:
            exports = await self.export_repo.export_collections()
            spreadsheet_id = await self.sink_repo.write_backup(exports)
        except Exception as e:
            logger.error(
                "Backup failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            return BackupOutcome(
                success=False, error=str(e) or "Unknown error"
            )

        logger.info(
            "Backup completed", extra={"spreadsheet_id": spreadsheet_id}
        )
        return BackupOutcome(success=True, spreadsheet_id=spreadsheet_id)


class UploadUseCase:
    def __init__(self, upload_repo: UploadStorageRepository) -> None:
        self.upload_repo = ensure_upload_storage_repository(upload_repo)

    async def upload(
        self, filename: Optional[str], data: Optional[bytes]
    ) -> StoredUpload:
        """
        Raises:
            DomainValidationError: no file part was received
        """
        if data is None or filename is None:
            raise DomainValidationError("No file provided")
        return await self.upload_repo.store_file(filename, data)


class LoginUseCase:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def login(self, username: str, password: str) -> str:
        """
        Returns:
            A signed session token for the admin

        Raises:
            AuthorizationError: credentials do not match
            ConfigurationError: admin credentials or JWT secret unset
        """
        if not credentials_match(username, password, self.settings):
            logger.warning(
                "Admin login rejected", extra={"username": username}
            )
            raise AuthorizationError("Invalid credentials")
        logger.info("Admin logged in", extra={"username": username})
        return issue_session_token(username, self.settings)
