"""
Repositories implemented on top of a DocumentStore, independent of whether
the store lives in memory or in MinIO.
"""

from .export import DocumentCollectionExportRepository
from .requests import REQUESTS_COLLECTION, DocumentRequestRepository

__all__ = [
    "DocumentCollectionExportRepository",
    "DocumentRequestRepository",
    "REQUESTS_COLLECTION",
]
