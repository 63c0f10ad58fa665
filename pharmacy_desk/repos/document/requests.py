"""
RequestRepository built on any DocumentStore.
"""

import logging
import secrets
import string
import time
from datetime import datetime
from typing import List, Optional

from pharmacy_desk.domain import PharmacyRequest, RequestStatus
from pharmacy_desk.repositories import DocumentStore, RequestRepository

logger = logging.getLogger(__name__)

REQUESTS_COLLECTION = "requests"

_BASE36 = string.digits + string.ascii_lowercase


class DocumentRequestRepository(RequestRepository):
    """Stores requests as camelCase JSON documents in the ``requests``
    collection of a DocumentStore."""

    def __init__(
        self, store: DocumentStore, collection: str = REQUESTS_COLLECTION
    ) -> None:
        self.store = store
        self.collection = collection

    async def generate_id(self) -> str:
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
        return f"req_{int(time.time() * 1000)}_{suffix}"

    async def save(self, request: PharmacyRequest) -> None:
        await self.store.put_document(
            self.collection, request.id, request.to_document()
        )
        logger.info(
            "Request saved",
            extra={
                "request_id": request.id,
                "type": request.type.value,
                "status": request.status.value,
            },
        )

    async def get(self, request_id: str) -> Optional[PharmacyRequest]:
        document = await self.store.get_document(self.collection, request_id)
        if document is None:
            return None
        return PharmacyRequest.model_validate(document)

    async def list_all(self) -> List[PharmacyRequest]:
        documents = await self.store.list_documents(self.collection)
        requests = []
        for document in documents:
            try:
                requests.append(PharmacyRequest.model_validate(document))
            except ValueError:
                logger.warning(
                    "Skipping unreadable request document",
                    extra={"document_id": document.get("id")},
                    exc_info=True,
                )
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    async def update_status(
        self, request_id: str, status: RequestStatus, updated_at: datetime
    ) -> bool:
        matched = await self.store.update_document(
            self.collection,
            request_id,
            {"status": status.value, "updatedAt": updated_at.isoformat()},
        )
        logger.info(
            "Request status update applied",
            extra={
                "request_id": request_id,
                "status": status.value,
                "matched": matched,
            },
        )
        return matched
