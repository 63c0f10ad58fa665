"""
CollectionExportRepository built on any DocumentStore.
"""

import logging
from datetime import datetime, timezone
from typing import List

from pharmacy_desk.domain import CollectionExport
from pharmacy_desk.repositories import (
    CollectionExportRepository,
    DocumentStore,
)

logger = logging.getLogger(__name__)


class DocumentCollectionExportRepository(CollectionExportRepository):
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def export_collections(self) -> List[CollectionExport]:
        backup_date = datetime.now(timezone.utc).isoformat()
        exports = []
        for collection in sorted(await self.store.list_collections()):
            if collection.startswith("system."):
                continue
            documents = await self.store.list_documents(collection)
            exports.append(
                CollectionExport(
                    collection=collection,
                    documents=documents,
                    backup_date=backup_date,
                )
            )
        logger.info(
            "Collections exported for backup",
            extra={
                "collections": [export.collection for export in exports],
                "document_count": sum(len(e.documents) for e in exports),
            },
        )
        return exports
