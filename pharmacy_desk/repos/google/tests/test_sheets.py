"""
Tests for GoogleSheetsBackupSink.

The Sheets service is a MagicMock: each ``spreadsheets()`` call chain ends
in ``execute()``, so tests configure return values and inspect the request
bodies that were built.
"""

import json
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from pharmacy_desk.domain import CollectionExport
from pharmacy_desk.repos.google import GoogleSheetsBackupSink
from pharmacy_desk.repos.google.sheets import get_google_sheets_service
from pharmacy_desk.repositories import BackupSinkRepository
from pharmacy_desk.spreadsheet import SHEET_LAYOUT
from pharmacy_desk.tests.factories import refill_document
from pharmacy_desk.validation import ConfigurationError

DAY = "2024-03-01"
SERVICE_ACCOUNT_KEY = json.dumps(
    {"client_email": "backup@project.iam.gserviceaccount.com"}
)


def http_error(status: int) -> HttpError:
    return HttpError(MagicMock(status=status, reason="error"), b"{}")


def sheet_metadata(titles: List[str]) -> Dict[str, Any]:
    return {
        "spreadsheetId": "sheet-1",
        "sheets": [
            {"properties": {"title": title, "sheetId": index}}
            for index, title in enumerate(titles)
        ],
    }


@pytest.fixture
def service() -> MagicMock:
    service = MagicMock()
    titles = [spec.title for spec in SHEET_LAYOUT] + ["Summary"]
    sheets = service.spreadsheets.return_value
    sheets.get.return_value.execute.return_value = sheet_metadata(titles)
    return service


def make_sink(service: MagicMock, **kwargs: Any) -> GoogleSheetsBackupSink:
    kwargs.setdefault("spreadsheet_id", "sheet-1")
    return GoogleSheetsBackupSink(
        service_account_key=SERVICE_ACCOUNT_KEY,
        service=service,
        today=lambda: DAY,
        **kwargs,
    )


def written_ranges(service: MagicMock) -> Dict[str, List[List[str]]]:
    values = service.spreadsheets.return_value.values.return_value
    return {
        c.kwargs["range"]: c.kwargs["body"]["values"]
        for c in values.update.call_args_list
    }


def test_satisfies_protocol(service: MagicMock) -> None:
    assert isinstance(make_sink(service), BackupSinkRepository)


@pytest.mark.asyncio
async def test_writes_fixed_sheets_and_summary(service: MagicMock) -> None:
    exports = [
        CollectionExport(
            collection="requests",
            documents=[
                refill_document(id="r1"),
                refill_document(id="c1", type="consultation"),
            ],
            backup_date="2024-03-01T12:00:00+00:00",
        )
    ]

    spreadsheet_id = await make_sink(service).write_backup(exports)

    assert spreadsheet_id == "sheet-1"
    ranges = written_ranges(service)
    refills = ranges["'Refill Requests'!A1"]
    assert refills[0][0] == "Id"
    assert refills[1][0] == "r1"
    assert ranges["'Consultation Requests'!A1"][1][0] == "c1"
    # claims was not exported, so its sheets are left empty
    assert "'Medications'!A1" not in ranges
    summary = ranges["'Summary'!A1"]
    assert summary[1] == ["Date", DAY]
    assert ["Refill Requests", "1", "2024-03-01T12:00:00+00:00"] in summary


@pytest.mark.asyncio
async def test_existing_sheets_are_cleared(service: MagicMock) -> None:
    await make_sink(service).write_backup([])

    values = service.spreadsheets.return_value.values.return_value
    cleared = {c.kwargs["range"] for c in values.clear.call_args_list}
    assert "'Medications'!A:ZZ" in cleared
    assert "'Summary'!A:ZZ" in cleared


@pytest.mark.asyncio
async def test_header_row_formatted(service: MagicMock) -> None:
    exports = [
        CollectionExport(
            collection="requests", documents=[refill_document(id="r1")]
        )
    ]

    await make_sink(service).write_backup(exports)

    sheets = service.spreadsheets.return_value
    bodies = [c.kwargs["body"] for c in sheets.batchUpdate.call_args_list]
    repeat = [
        r["repeatCell"]
        for body in bodies
        for r in body["requests"]
        if "repeatCell" in r
    ]
    assert repeat
    fmt = repeat[0]["cell"]["userEnteredFormat"]
    assert fmt["textFormat"] == {"bold": True}


@pytest.mark.asyncio
async def test_formatting_failure_ignored(service: MagicMock) -> None:
    sheets = service.spreadsheets.return_value
    sheets.batchUpdate.return_value.execute.side_effect = http_error(400)
    exports = [
        CollectionExport(
            collection="requests", documents=[refill_document(id="r1")]
        )
    ]

    assert await make_sink(service).write_backup(exports) == "sheet-1"


@pytest.mark.asyncio
async def test_other_collections_appended(service: MagicMock) -> None:
    exports = [
        CollectionExport(
            collection="settings", documents=[{"key": "fax", "on": True}]
        )
    ]

    await make_sink(service).write_backup(exports)

    values = service.spreadsheets.return_value.values.return_value
    append = values.append.call_args
    assert append.kwargs["range"] == f"'Other Collections_{DAY}'!A:Z"
    rows = append.kwargs["body"]["values"]
    assert rows[0] == ["Collection: settings", "key", "on"]
    sheets = service.spreadsheets.return_value
    added = [
        r["addSheet"]["properties"]["title"]
        for c in sheets.batchUpdate.call_args_list
        for r in c.kwargs["body"]["requests"]
        if "addSheet" in r
    ]
    assert f"Other Collections_{DAY}" in added


@pytest.mark.asyncio
async def test_missing_spreadsheet_is_created(service: MagicMock) -> None:
    sheets = service.spreadsheets.return_value
    metadata = sheets.get.return_value.execute.return_value
    sheets.get.return_value.execute.side_effect = [http_error(404)] + [
        metadata
    ] * 10
    sheets.create.return_value.execute.return_value = {
        "spreadsheetId": "new-sheet"
    }

    spreadsheet_id = await make_sink(service).write_backup([])

    assert spreadsheet_id == "new-sheet"
    body = sheets.create.call_args.kwargs["body"]
    assert body["properties"]["title"] == f"Kateri Pharmacy Backup - {DAY}"


@pytest.mark.asyncio
async def test_no_configured_id_creates_spreadsheet(
    service: MagicMock,
) -> None:
    sheets = service.spreadsheets.return_value
    sheets.create.return_value.execute.return_value = {
        "spreadsheetId": "fresh"
    }

    sink = make_sink(service, spreadsheet_id=None)

    assert await sink.write_backup([]) == "fresh"


@pytest.mark.asyncio
async def test_permission_denied_names_service_account(
    service: MagicMock,
) -> None:
    sheets = service.spreadsheets.return_value
    sheets.get.return_value.execute.side_effect = http_error(403)

    with pytest.raises(PermissionError) as excinfo:
        await make_sink(service).write_backup([])

    assert "backup@project.iam.gserviceaccount.com" in str(excinfo.value)
    sheets.create.assert_not_called()


@pytest.mark.asyncio
async def test_other_read_errors_keep_configured_id(
    service: MagicMock,
) -> None:
    sheets = service.spreadsheets.return_value
    metadata = sheets.get.return_value.execute.return_value
    sheets.get.return_value.execute.side_effect = [http_error(500)] + [
        metadata
    ] * 10

    assert await make_sink(service).write_backup([]) == "sheet-1"
    sheets.create.assert_not_called()


@pytest.mark.parametrize("key", [None, "", "{not json"])
def test_bad_service_account_key(key: Any) -> None:
    with pytest.raises(ConfigurationError):
        get_google_sheets_service(key)


@pytest.mark.asyncio
async def test_missing_credentials_fail_on_write() -> None:
    sink = GoogleSheetsBackupSink(service_account_key=None)

    with pytest.raises(ConfigurationError):
        await sink.write_backup([])
