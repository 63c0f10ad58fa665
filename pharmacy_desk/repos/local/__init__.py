"""Local filesystem repositories."""

from .uploads import LocalUploadRepository

__all__ = ["LocalUploadRepository"]
