"""
Repository interfaces defined as Protocols.

All repository operations in this module follow these principles:

- **Domain Objects**: Methods accept and return domain objects or
  primitives, never framework-specific types (no FastAPI, MinIO, Google or
  httpx types cross this boundary).

- **Single Attempt**: No implementation retries internally. A failure is
  raised to the caller, which decides how to report it.

- **Last Write Wins**: Record updates are single-record operations with no
  version token. Two concurrent updates of the same record race, and the
  later write is the one that persists.

Architectural Notes:

- These are pure interfaces with no implementation details
- Use case classes depend on these protocols, not concrete implementations
- The protocols are runtime checkable so wiring mistakes are caught when a
  use case is constructed (see ``pharmacy_desk.validation``)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pharmacy_desk.domain import (
    CollectionExport,
    EmailMessage,
    PharmacyRequest,
    RequestStatus,
    StoredUpload,
)


@runtime_checkable
class DocumentStore(Protocol):
    """Named collections of JSON documents keyed by an opaque string id.

    This is the leaf dependency shared by every state-mutating operation.
    Documents are plain dictionaries; typing them is the job of the
    repositories built on top of the store.
    """

    async def get_document(
        self, collection: str, document_id: str
    ) -> Optional[Dict[str, Any]]:
        """Return a copy of the document, or None if it does not exist."""
        ...

    async def put_document(
        self, collection: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        """Create or replace a document."""
        ...

    async def update_document(
        self, collection: str, document_id: str, fields: Dict[str, Any]
    ) -> bool:
        """Match a document by id and set the given top-level fields.

        Returns:
            True if a document matched and was updated, False if no
            document has this id (nothing is written in that case).

        Implementation Notes:
        - Fields not named in ``fields`` are left untouched
        - Concurrent updates of the same document are last-write-wins
        """
        ...

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """Return every document of a collection (empty if unknown)."""
        ...

    async def list_collections(self) -> List[str]:
        """Return the names of all collections holding documents."""
        ...


@runtime_checkable
class RequestRepository(Protocol):
    """Persistence of pharmacy requests (the ``requests`` collection)."""

    async def generate_id(self) -> str:
        """Generate a unique request identifier.

        Returns:
            Identifier of the form ``req_<epoch ms>_<9 base36 chars>``
        """
        ...

    async def save(self, request: PharmacyRequest) -> None:
        """Persist a complete request record (create or replace)."""
        ...

    async def get(self, request_id: str) -> Optional[PharmacyRequest]:
        """Retrieve a request by id.

        Returns:
            The request if found, None otherwise
        """
        ...

    async def list_all(self) -> List[PharmacyRequest]:
        """Return every stored request, newest ``createdAt`` first."""
        ...

    async def update_status(
        self, request_id: str, status: RequestStatus, updated_at: datetime
    ) -> bool:
        """Atomically set ``status`` and ``updatedAt`` on one record.

        Args:
            request_id: Identifier of the record to match
            status: New status (already validated by the caller)
            updated_at: Timestamp to record as ``updatedAt``

        Returns:
            True if a record matched, False if none did. Other business
            fields of the record are never modified.
        """
        ...


@runtime_checkable
class CollectionExportRepository(Protocol):
    """Read-only view of the whole store, used by backups."""

    async def export_collections(self) -> List[CollectionExport]:
        """Read every backed-up collection in full.

        System collections (names starting with ``system.``) are skipped.
        All exports of one call share the same ``backup_date``.
        """
        ...


@runtime_checkable
class BackupSinkRepository(Protocol):
    """Write-only destination of backup exports (a spreadsheet)."""

    async def write_backup(self, exports: List[CollectionExport]) -> str:
        """Write the exports to the sink.

        Returns:
            Identifier of the spreadsheet that now holds the backup

        Raises:
            Any exception describing why the export could not be written.
            Configuration problems (missing credentials) are raised here,
            not at construction time.
        """
        ...


@runtime_checkable
class EmailRepository(Protocol):
    """Transactional email provider."""

    async def send_email(self, message: EmailMessage) -> Dict[str, Any]:
        """Deliver one message.

        Returns:
            The provider's receipt (for example its message id)

        Raises:
            ConfigurationError: provider credential absent, raised before
                any network call
            DeliveryError: network or provider-side failure
        """
        ...


@runtime_checkable
class UploadStorageRepository(Protocol):
    """Storage of files received through the upload endpoint."""

    async def store_file(self, filename: str, data: bytes) -> StoredUpload:
        """Write raw bytes under a collision-resistant name.

        Args:
            filename: Original client-side filename
            data: File content

        Returns:
            StoredUpload with the public path of the stored file
        """
        ...
