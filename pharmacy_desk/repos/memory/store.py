"""
Memory implementation of DocumentStore.

Documents are held in nested Python dictionaries, making this store ideal
for tests and for running the API without a MinIO server
(``STORE_BACKEND=memory``). All operations are still async to maintain
interface compatibility.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from pharmacy_desk.repositories import DocumentStore

logger = logging.getLogger(__name__)


class MemoryDocumentStore(DocumentStore):
    """
    Memory implementation of DocumentStore using Python dictionaries.

    Storage layout: ``{collection: {document_id: document}}``. Documents are
    deep-copied on the way in and out so callers never share state with the
    store.
    """

    def __init__(
        self,
        collections: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None,
    ) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = (
            copy.deepcopy(collections) if collections else {}
        )
        logger.debug("Initializing MemoryDocumentStore")

    async def get_document(
        self, collection: str, document_id: str
    ) -> Optional[Dict[str, Any]]:
        document = self.collections.get(collection, {}).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def put_document(
        self, collection: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        self.collections.setdefault(collection, {})[document_id] = (
            copy.deepcopy(document)
        )
        logger.debug(
            "Document stored in memory",
            extra={"collection": collection, "document_id": document_id},
        )

    async def update_document(
        self, collection: str, document_id: str, fields: Dict[str, Any]
    ) -> bool:
        document = self.collections.get(collection, {}).get(document_id)
        if document is None:
            logger.debug(
                "No document matched update",
                extra={"collection": collection, "document_id": document_id},
            )
            return False
        document.update(copy.deepcopy(fields))
        return True

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(document)
            for document in self.collections.get(collection, {}).values()
        ]

    async def list_collections(self) -> List[str]:
        return [name for name, docs in self.collections.items() if docs]
