"""
Google Sheets implementation of the BackupSinkRepository protocol.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from pharmacy_desk.domain import CollectionExport
from pharmacy_desk.repositories import BackupSinkRepository
from pharmacy_desk.spreadsheet import (
    OTHER_COLLECTIONS_SHEET,
    SHEET_LAYOUT,
    SUMMARY_SHEET,
    Row,
    build_collection_block,
    build_sheet_values,
    build_summary_values,
    other_collections,
    select_documents,
)
from pharmacy_desk.validation import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/drive",
]

HEADER_BACKGROUND = {"red": 0.9, "green": 0.9, "blue": 0.9}


def _parse_service_account_key(service_account_key: Optional[str]) -> dict:
    if not service_account_key:
        raise ConfigurationError(
            "GOOGLE_SERVICE_ACCOUNT_KEY is not set. Please configure it in "
            "your environment variables."
        )
    try:
        return json.loads(service_account_key)
    except json.JSONDecodeError:
        raise ConfigurationError(
            "GOOGLE_SERVICE_ACCOUNT_KEY is not valid JSON. Please check your "
            "environment variable."
        ) from None


def get_google_sheets_service(service_account_key: Optional[str]) -> Resource:
    """Build a Sheets v4 client authenticated as a service account."""
    info = _parse_service_account_key(service_account_key)
    credentials = service_account.Credentials.from_service_account_info(
        info, scopes=SCOPES
    )
    return build(
        "sheets", "v4", credentials=credentials, cache_discovery=False
    )


def _utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class GoogleSheetsBackupSink(BackupSinkRepository):
    """
    Writes backups into one spreadsheet: a sheet per fixed category/type,
    a shared sheet for every other collection, and a summary sheet.

    The Sheets client is created on first use so that missing credentials
    surface as a failed backup rather than a failure at startup.
    """

    def __init__(
        self,
        service_account_key: Optional[str],
        spreadsheet_id: Optional[str] = None,
        title_prefix: str = "Kateri Pharmacy",
        service: Optional[Resource] = None,
        today: Callable[[], str] = _utc_today,
    ):
        self._service_account_key = service_account_key
        self._spreadsheet_id = spreadsheet_id
        self._title_prefix = title_prefix
        self._service = service
        self._today = today

    def _get_service(self) -> Resource:
        if self._service is None:
            self._service = get_google_sheets_service(
                self._service_account_key
            )
        return self._service

    def _service_account_email(self) -> str:
        try:
            info = _parse_service_account_key(self._service_account_key)
        except ConfigurationError:
            return "service account"
        return info.get("client_email") or "service account"

    def _get_or_create_spreadsheet(self, sheets: Any, day: str) -> str:
        spreadsheet_id = self._spreadsheet_id
        if spreadsheet_id:
            try:
                sheets.get(
                    spreadsheetId=spreadsheet_id,
                    fields="spreadsheetId,properties.title",
                ).execute()
                return spreadsheet_id
            except HttpError as e:
                status = e.resp.status
                if status == 403:
                    account = self._service_account_email()
                    raise PermissionError(
                        "Permission denied. Please share the spreadsheet "
                        f"(ID: {spreadsheet_id}) with the service account: "
                        f"{account}. Go to https://docs.google.com/"
                        f"spreadsheets/d/{spreadsheet_id}/edit and click "
                        "Share, then add the email with Editor permissions."
                    ) from e
                if status != 404:
                    # Reading metadata failed for another reason; writing
                    # may still work.
                    logger.warning(
                        "Could not read backup spreadsheet, using it anyway",
                        extra={
                            "spreadsheet_id": spreadsheet_id,
                            "status": status,
                        },
                    )
                    return spreadsheet_id
                logger.info(
                    "Backup spreadsheet not found, creating a new one",
                    extra={"spreadsheet_id": spreadsheet_id},
                )

        created = sheets.create(
            body={
                "properties": {
                    "title": f"{self._title_prefix} Backup - {day}"
                }
            },
            fields="spreadsheetId",
        ).execute()
        new_id = created.get("spreadsheetId")
        if not new_id:
            raise RuntimeError("Failed to create spreadsheet")
        logger.info(
            "Backup spreadsheet created", extra={"spreadsheet_id": new_id}
        )
        return new_id

    def _sheet_ids(self, sheets: Any, spreadsheet_id: str) -> Dict[str, int]:
        spreadsheet = sheets.get(
            spreadsheetId=spreadsheet_id, fields="sheets.properties"
        ).execute()
        return {
            sheet["properties"]["title"]: sheet["properties"]["sheetId"]
            for sheet in spreadsheet.get("sheets", [])
        }

    def _prepare_sheets(
        self, sheets: Any, spreadsheet_id: str, titles: List[str]
    ) -> Dict[str, int]:
        """Empty the named sheets, creating the ones that do not exist."""
        existing = self._sheet_ids(sheets, spreadsheet_id)
        for title in titles:
            if title in existing:
                sheets.values().clear(
                    spreadsheetId=spreadsheet_id, range=f"'{title}'!A:ZZ"
                ).execute()

        missing = [title for title in titles if title not in existing]
        if missing:
            sheets.batchUpdate(
                spreadsheetId=spreadsheet_id,
                body={
                    "requests": [
                        {"addSheet": {"properties": {"title": title}}}
                        for title in missing
                    ]
                },
            ).execute()
            existing = self._sheet_ids(sheets, spreadsheet_id)
        return existing

    def _write_values(
        self,
        sheets: Any,
        spreadsheet_id: str,
        title: str,
        values: List[Row],
    ) -> None:
        sheets.values().update(
            spreadsheetId=spreadsheet_id,
            range=f"'{title}'!A1",
            valueInputOption="RAW",
            body={"values": values},
        ).execute()

    def _format_header_row(
        self, sheets: Any, spreadsheet_id: str, sheet_id: int
    ) -> None:
        try:
            sheets.batchUpdate(
                spreadsheetId=spreadsheet_id,
                body={
                    "requests": [
                        {
                            "repeatCell": {
                                "range": {
                                    "sheetId": sheet_id,
                                    "startRowIndex": 0,
                                    "endRowIndex": 1,
                                },
                                "cell": {
                                    "userEnteredFormat": {
                                        "textFormat": {"bold": True},
                                        "backgroundColor": HEADER_BACKGROUND,
                                    }
                                },
                                "fields": (
                                    "userEnteredFormat"
                                    "(textFormat,backgroundColor)"
                                ),
                            }
                        },
                        {
                            "updateSheetProperties": {
                                "properties": {
                                    "sheetId": sheet_id,
                                    "gridProperties": {"frozenRowCount": 1},
                                },
                                "fields": "gridProperties.frozenRowCount",
                            }
                        },
                    ]
                },
            ).execute()
        except HttpError:
            # Data is already written; formatting is cosmetic.
            logger.warning(
                "Failed to format header row",
                extra={"spreadsheet_id": spreadsheet_id, "sheet_id": sheet_id},
                exc_info=True,
            )

    async def write_backup(self, exports: List[CollectionExport]) -> str:
        sheets = self._get_service().spreadsheets()
        day = self._today()
        spreadsheet_id = self._get_or_create_spreadsheet(sheets, day)

        logger.info(
            "Writing backup to Google Sheets",
            extra={
                "spreadsheet_id": spreadsheet_id,
                "collections": [export.collection for export in exports],
            },
        )

        fixed_titles = [spec.title for spec in SHEET_LAYOUT]
        sheet_ids = self._prepare_sheets(sheets, spreadsheet_id, fixed_titles)
        for spec in SHEET_LAYOUT:
            documents = select_documents(exports, spec)
            if documents is None:
                continue
            self._write_values(
                sheets,
                spreadsheet_id,
                spec.title,
                build_sheet_values(spec.title, documents),
            )
            if documents:
                self._format_header_row(
                    sheets, spreadsheet_id, sheet_ids[spec.title]
                )

        others = other_collections(exports)
        if others:
            other_title = OTHER_COLLECTIONS_SHEET.format(date=day)
            self._prepare_sheets(sheets, spreadsheet_id, [other_title])
            for export in others:
                sheets.values().append(
                    spreadsheetId=spreadsheet_id,
                    range=f"'{other_title}'!A:Z",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": build_collection_block(export)},
                ).execute()

        self._prepare_sheets(sheets, spreadsheet_id, [SUMMARY_SHEET])
        self._write_values(
            sheets,
            spreadsheet_id,
            SUMMARY_SHEET,
            build_summary_values(exports, day),
        )

        logger.info(
            "Backup written to Google Sheets",
            extra={"spreadsheet_id": spreadsheet_id},
        )
        return spreadsheet_id
