"""Repository implementations grouped by backing technology."""

from pharmacy_desk.config import Settings
from pharmacy_desk.repositories import DocumentStore


def create_document_store(settings: Settings) -> DocumentStore:
    """Build the document store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        from pharmacy_desk.repos.memory import MemoryDocumentStore

        return MemoryDocumentStore()

    from pharmacy_desk.repos.minio import MinioDocumentStore

    return MinioDocumentStore(
        endpoint=settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        bucket_name=settings.minio_bucket,
        secure=settings.minio_secure,
    )
