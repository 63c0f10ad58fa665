"""Google API backed repositories."""

from .sheets import GoogleSheetsBackupSink, get_google_sheets_service

__all__ = ["GoogleSheetsBackupSink", "get_google_sheets_service"]
