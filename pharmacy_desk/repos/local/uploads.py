"""
Local file-based implementation of the UploadStorageRepository protocol.
Stores uploaded files in a directory served publicly under a URL prefix.
"""

import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pharmacy_desk.domain import StoredUpload
from pharmacy_desk.repositories import UploadStorageRepository
from pharmacy_desk.validation import sanitize_filename

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class LocalUploadRepository(UploadStorageRepository):
    """
    Writes each upload to ``<base_path>/<epoch ms>_<sanitized name>``.

    The millisecond prefix keeps repeated uploads of the same filename from
    overwriting each other. No size limit, content-type check or scanning
    is applied.
    """

    def __init__(
        self,
        base_path: str,
        url_prefix: str = "/uploads",
        clock_ms: Callable[[], int] = _epoch_millis,
    ):
        self._base_path = Path(base_path)
        self._url_prefix = url_prefix.rstrip("/")
        self._clock_ms = clock_ms

    async def store_file(self, filename: str, data: bytes) -> StoredUpload:
        os.makedirs(self._base_path, exist_ok=True)

        stored_name = f"{self._clock_ms()}_{sanitize_filename(filename)}"
        target = self._base_path / stored_name
        with open(target, "wb") as f:
            f.write(data)

        logger.info(
            "Upload written to disk",
            extra={
                "original_filename": filename,
                "stored_name": stored_name,
                "size_bytes": len(data),
            },
        )
        return StoredUpload(
            filename=filename,
            stored_name=stored_name,
            file_path=f"{self._url_prefix}/{stored_name}",
            upload_date=datetime.now(timezone.utc).isoformat(),
            size_bytes=len(data),
        )
