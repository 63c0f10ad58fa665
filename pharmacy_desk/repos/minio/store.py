"""
Minio implementation of DocumentStore.

Each document is a JSON object named ``<collection>/<document_id>.json`` in a
single bucket, so a collection is simply an object prefix.
"""

import io
import json
import logging
from typing import Any, Dict, List, Optional

from minio import Minio
from minio.error import S3Error

from pharmacy_desk.repositories import DocumentStore

logger = logging.getLogger(__name__)


class MinioDocumentStore(DocumentStore):
    """
    Minio implementation of DocumentStore.
    Uses Minio for persistence of request documents and any other
    collection written by the site.

    ``update_document`` is a read-merge-write of one object: concurrent
    updates of the same document are last-write-wins.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        secure: bool = False,
        client: Optional[Minio] = None,
    ):
        self._endpoint = endpoint
        self._access_key = access_key
        self._secret_key = secret_key
        self._secure = secure
        self._bucket_name = bucket_name
        self._client = client
        self._bucket_checked = False
        logger.debug(
            "MinioDocumentStore initialized",
            extra={"endpoint": endpoint, "bucket_name": bucket_name},
        )

    def _get_client(self) -> Minio:
        """Lazily initialize the Minio client and ensure the bucket."""
        if self._client is None:
            logger.debug(
                "Creating new Minio client instance",
                extra={"endpoint": self._endpoint, "secure": self._secure},
            )
            self._client = Minio(
                self._endpoint,
                access_key=self._access_key,
                secret_key=self._secret_key,
                secure=self._secure,
            )
        if not self._bucket_checked:
            try:
                if not self._client.bucket_exists(self._bucket_name):
                    logger.info(
                        "Minio bucket does not exist, creating now",
                        extra={"bucket_name": self._bucket_name},
                    )
                    self._client.make_bucket(self._bucket_name)
            except S3Error as e:
                logger.error(
                    f"Error checking or creating Minio bucket: {e}",
                    extra={
                        "bucket_name": self._bucket_name,
                        "error_code": e.code,
                    },
                )
                raise
            self._bucket_checked = True
        return self._client

    @staticmethod
    def _object_name(collection: str, document_id: str) -> str:
        return f"{collection}/{document_id}.json"

    def _read_object(self, object_name: str) -> Optional[Dict[str, Any]]:
        client = self._get_client()
        try:
            response = client.get_object(self._bucket_name, object_name)
        except S3Error as e:
            if e.code == "NoSuchKey":
                return None
            raise
        try:
            data = response.read()
        finally:
            response.close()
            response.release_conn()
        return json.loads(data.decode("utf-8"))

    def _write_object(
        self, object_name: str, document: Dict[str, Any]
    ) -> None:
        client = self._get_client()
        payload = json.dumps(document, default=str).encode("utf-8")
        client.put_object(
            self._bucket_name,
            object_name,
            io.BytesIO(payload),
            len(payload),
            content_type="application/json",
        )

    async def get_document(
        self, collection: str, document_id: str
    ) -> Optional[Dict[str, Any]]:
        object_name = self._object_name(collection, document_id)
        document = self._read_object(object_name)
        if document is None:
            logger.debug(
                "Document not found in Minio (NoSuchKey)",
                extra={"collection": collection, "document_id": document_id},
            )
        return document

    async def put_document(
        self, collection: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        object_name = self._object_name(collection, document_id)
        try:
            self._write_object(object_name, document)
        except S3Error as e:
            logger.error(
                "Failed to persist document to Minio",
                extra={
                    "object_name": object_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise
        logger.info(
            "Document persisted to Minio",
            extra={"bucket": self._bucket_name, "object_name": object_name},
        )

    async def update_document(
        self, collection: str, document_id: str, fields: Dict[str, Any]
    ) -> bool:
        object_name = self._object_name(collection, document_id)
        document = self._read_object(object_name)
        if document is None:
            logger.debug(
                "No document matched update",
                extra={"object_name": object_name},
            )
            return False

        document.update(fields)
        self._write_object(object_name, document)
        logger.info(
            "Document fields updated in Minio",
            extra={"object_name": object_name, "fields": sorted(fields)},
        )
        return True

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        client = self._get_client()
        documents = []
        for obj in client.list_objects(
            self._bucket_name, prefix=f"{collection}/", recursive=True
        ):
            if not obj.object_name.endswith(".json"):
                continue
            document = self._read_object(obj.object_name)
            if document is not None:
                documents.append(document)
        logger.debug(
            "Listed collection from Minio",
            extra={"collection": collection, "count": len(documents)},
        )
        return documents

    async def list_collections(self) -> List[str]:
        client = self._get_client()
        return [
            obj.object_name.rstrip("/")
            for obj in client.list_objects(self._bucket_name, recursive=False)
            if obj.is_dir
        ]
