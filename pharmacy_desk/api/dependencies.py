"""
Dependency injection for FastAPI endpoints.

The container lives on ``app.state.container`` and owns the loaded
Settings plus the long-lived document store. Repositories and use cases
are cheap and built per request from those. Tests replace any of the
functions below through ``app.dependency_overrides``.
"""

import logging
from typing import Any, Callable, Dict

from fastapi import Depends, Request

from pharmacy_desk.config import Settings
from pharmacy_desk.repositories import (
    BackupSinkRepository,
    CollectionExportRepository,
    DocumentStore,
    EmailRepository,
    RequestRepository,
    UploadStorageRepository,
)
from pharmacy_desk.repos import create_document_store
from pharmacy_desk.repos.brevo import BrevoEmailRepository
from pharmacy_desk.repos.document import (
    DocumentCollectionExportRepository,
    DocumentRequestRepository,
)
from pharmacy_desk.repos.google import GoogleSheetsBackupSink
from pharmacy_desk.repos.local import LocalUploadRepository
from pharmacy_desk.usecase import (
    BackupUseCase,
    ListRequestsUseCase,
    LoginUseCase,
    NotificationUseCase,
    SubmitRequestUseCase,
    UpdateRequestStatusUseCase,
    UploadUseCase,
)

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency injection container with singleton lifecycle management.
    Always creates real clients; mocks are provided by test overrides.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._instances: Dict[str, Any] = {}

    def get_or_create(self, key: str, factory: Callable[[], Any]) -> Any:
        """Get or create a singleton instance."""
        if key not in self._instances:
            self._instances[key] = factory()
        return self._instances[key]

    def get_document_store(self) -> DocumentStore:
        store = self.get_or_create(
            "document_store", self._create_document_store
        )
        return store  # type: ignore[no-any-return]

    def _create_document_store(self) -> DocumentStore:
        settings = self.settings
        logger.debug(
            "Creating document store",
            extra={
                "backend": settings.store_backend,
                "endpoint": settings.minio_endpoint,
                "bucket": settings.minio_bucket,
            },
        )
        return create_document_store(settings)


def get_container(request: Request) -> DependencyContainer:
    """FastAPI dependency for the application's container."""
    return request.app.state.container  # type: ignore[no-any-return]


def get_settings(
    container: DependencyContainer = Depends(get_container),
) -> Settings:
    return container.settings


def get_document_store(
    container: DependencyContainer = Depends(get_container),
) -> DocumentStore:
    return container.get_document_store()


def get_request_repository(
    store: DocumentStore = Depends(get_document_store),
) -> RequestRepository:
    return DocumentRequestRepository(store)


def get_collection_export_repository(
    store: DocumentStore = Depends(get_document_store),
) -> CollectionExportRepository:
    return DocumentCollectionExportRepository(store)


def get_backup_sink(
    settings: Settings = Depends(get_settings),
) -> BackupSinkRepository:
    return GoogleSheetsBackupSink(
        service_account_key=settings.google_service_account_key,
        spreadsheet_id=settings.google_backup_spreadsheet_id,
        title_prefix=settings.mail_from_name,
    )


def get_email_repository(
    settings: Settings = Depends(get_settings),
) -> EmailRepository:
    return BrevoEmailRepository(
        api_key=settings.brevo_api_key,
        sender_email=settings.mail_from,
        sender_name=settings.mail_from_name,
        api_url=settings.brevo_api_url,
    )


def get_upload_repository(
    settings: Settings = Depends(get_settings),
) -> UploadStorageRepository:
    return LocalUploadRepository(
        base_path=settings.uploads_dir,
        url_prefix=settings.uploads_url_prefix,
    )


def get_update_request_status_use_case(
    request_repo: RequestRepository = Depends(get_request_repository),
) -> UpdateRequestStatusUseCase:
    return UpdateRequestStatusUseCase(request_repo=request_repo)


def get_list_requests_use_case(
    request_repo: RequestRepository = Depends(get_request_repository),
) -> ListRequestsUseCase:
    return ListRequestsUseCase(request_repo=request_repo)


def get_notification_use_case(
    email_repo: EmailRepository = Depends(get_email_repository),
    settings: Settings = Depends(get_settings),
) -> NotificationUseCase:
    return NotificationUseCase(email_repo=email_repo, settings=settings)


def get_submit_request_use_case(
    request_repo: RequestRepository = Depends(get_request_repository),
    notifications: NotificationUseCase = Depends(get_notification_use_case),
) -> SubmitRequestUseCase:
    return SubmitRequestUseCase(
        request_repo=request_repo, notifications=notifications
    )


def get_backup_use_case(
    export_repo: CollectionExportRepository = Depends(
        get_collection_export_repository
    ),
    sink_repo: BackupSinkRepository = Depends(get_backup_sink),
    settings: Settings = Depends(get_settings),
) -> BackupUseCase:
    return BackupUseCase(
        export_repo=export_repo,
        sink_repo=sink_repo,
        backup_api_key=settings.backup_api_key,
    )


def get_upload_use_case(
    upload_repo: UploadStorageRepository = Depends(get_upload_repository),
) -> UploadUseCase:
    return UploadUseCase(upload_repo=upload_repo)


def get_login_use_case(
    settings: Settings = Depends(get_settings),
) -> LoginUseCase:
    return LoginUseCase(settings=settings)
