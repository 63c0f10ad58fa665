"""
Memory implementation of BackupSinkRepository.

Keeps every backup written to it so tests can inspect what would have been
sent to the spreadsheet.
"""

import logging
from typing import List, Optional

from pharmacy_desk.domain import CollectionExport
from pharmacy_desk.repositories import BackupSinkRepository

logger = logging.getLogger(__name__)


class MemoryBackupSink(BackupSinkRepository):
    def __init__(
        self,
        spreadsheet_id: str = "memory-spreadsheet",
        failure: Optional[Exception] = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.failure = failure
        self.backups: List[List[CollectionExport]] = []

    async def write_backup(self, exports: List[CollectionExport]) -> str:
        if self.failure is not None:
            raise self.failure
        self.backups.append(list(exports))
        logger.info(
            "Backup kept in memory",
            extra={
                "spreadsheet_id": self.spreadsheet_id,
                "collections": [export.collection for export in exports],
            },
        )
        return self.spreadsheet_id
