"""MinIO-backed repositories."""

from .store import MinioDocumentStore

__all__ = ["MinioDocumentStore"]
