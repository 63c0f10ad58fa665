"""
Spreadsheet layout for backups.

Pure functions that turn exported collections into rows of cell strings.
They know nothing about the Google API; ``repos/google/sheets.py`` only
ships the rows produced here.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from pharmacy_desk.domain import CollectionExport

Row = List[str]

SUMMARY_SHEET = "Summary"
OTHER_COLLECTIONS_SHEET = "Other Collections_{date}"


class SheetSpec(NamedTuple):
    """One fixed backup sheet: documents of ``collection`` whose ``field``
    equals ``value``."""

    title: str
    collection: str
    field: str
    value: str


SHEET_LAYOUT: List[SheetSpec] = [
    SheetSpec("Medications", "claims", "category", "medications"),
    SheetSpec("Appeals", "claims", "category", "appeals"),
    SheetSpec("Manual Claims", "claims", "category", "manual-claims"),
    SheetSpec("Diapers and Pads", "claims", "category", "diapers-pads"),
    SheetSpec("Refill Requests", "requests", "type", "refill"),
    SheetSpec("Consultation Requests", "requests", "type", "consultation"),
]

LAID_OUT_COLLECTIONS = frozenset(spec.collection for spec in SHEET_LAYOUT)

COLUMN_ORDER: Dict[str, int] = {
    "id": 1,
    "category": 2,
    "type": 3,
    "rxNumber": 4,
    "productName": 5,
    "prescriberName": 6,
    "prescriberLicense": 7,
    "prescriberFax": 8,
    "prescriberPhone": 9,
    "dateOfPrescription": 10,
    "claimStatus": 11,
    "status": 12,
    "phone": 13,
    "prescriptions": 14,
    "deliveryType": 15,
    "estimatedTime": 16,
    "service": 17,
    "preferredDateTime": 18,
    "authorizationNumber": 19,
    "caseNumber": 20,
    "din": 21,
    "itemNumber": 22,
    "priority": 23,
    "createdAt": 24,
    "updatedAt": 25,
}
UNKNOWN_COLUMN_ORDER = 100

_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_CAPITAL = re.compile(r"([A-Z])")


def _us_date(value: date) -> str:
    return value.strftime("%m/%d/%Y")


def _pairs(mapping: Dict[str, Any]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in mapping.items())


def format_cell_value(value: Any) -> str:
    """Render one document value as a human-readable cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (datetime, date)):
        return _us_date(value)
    if isinstance(value, list):
        if not value:
            return ""
        if isinstance(value[0], dict):
            return " | ".join(
                _pairs(item) if isinstance(item, dict) else str(item)
                for item in value
            )
        return "; ".join(str(item) for item in value)
    if isinstance(value, dict):
        return _pairs(value)
    if isinstance(value, str) and _ISO_DATE_PREFIX.match(value):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        return _us_date(parsed)
    return str(value)


def format_header_name(key: str) -> str:
    """``_id`` becomes ``Database ID``; camelCase becomes Title Case."""
    if key == "_id":
        return "Database ID"
    spaced = _CAPITAL.sub(r" \1", key)
    return (spaced[:1].upper() + spaced[1:]).strip()


def column_order(key: str) -> int:
    return COLUMN_ORDER.get(key, UNKNOWN_COLUMN_ORDER)


def sheet_headers(documents: Iterable[Dict[str, Any]]) -> List[str]:
    """Union of document keys, ordered by priority then alphabetically.

    Store-internal ``_id`` keys are dropped for documents that carry their
    own ``id``.
    """
    keys = set()
    for document in documents:
        for key in document:
            if key != "_id" or not document.get("id"):
                keys.add(key)
    return sorted(keys, key=lambda k: (column_order(k), k))


def select_documents(
    exports: List[CollectionExport], spec: SheetSpec
) -> Optional[List[Dict[str, Any]]]:
    """Documents belonging to a fixed sheet, or None when the source
    collection was not exported at all."""
    for export in exports:
        if export.collection == spec.collection:
            return [
                document
                for document in export.documents
                if document.get(spec.field) == spec.value
            ]
    return None


def build_sheet_values(
    sheet_name: str, documents: List[Dict[str, Any]]
) -> List[Row]:
    if not documents:
        return [[f"No data available for {sheet_name}"]]

    headers = sheet_headers(documents)
    rows = [
        [format_cell_value(document.get(header)) for header in headers]
        for document in documents
    ]
    return [[format_header_name(header) for header in headers], *rows]


def _raw_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def build_collection_block(export: CollectionExport) -> List[Row]:
    """Rows appended to the shared sheet for a collection with no fixed
    layout: a header row, a separator, one row per document, a separator."""
    if not export.documents:
        return [[f"Collection: {export.collection} (Empty)"]]

    headers: List[str] = []
    for document in export.documents:
        for key in document:
            if key not in headers:
                headers.append(key)

    blank = ["", *["" for _ in headers]]
    rows = [
        [export.collection, *[_raw_cell(doc.get(h)) for h in headers]]
        for doc in export.documents
    ]
    return [
        [f"Collection: {export.collection}", *headers],
        blank,
        *rows,
        list(blank),
    ]


def other_collections(
    exports: List[CollectionExport],
) -> List[CollectionExport]:
    return [e for e in exports if e.collection not in LAID_OUT_COLLECTIONS]


def build_summary_values(
    exports: List[CollectionExport], backup_day: str
) -> List[Row]:
    """Counts per fixed sheet (for exported source collections) and per
    remaining collection."""
    by_name = {export.collection: export for export in exports}
    values: List[Row] = [
        ["Backup Summary"],
        ["Date", backup_day],
        [""],
        ["Category/Type", "Record Count", "Backup Time"],
    ]
    for spec in SHEET_LAYOUT:
        source = by_name.get(spec.collection)
        if source is None:
            continue
        documents = select_documents(exports, spec) or []
        values.append([spec.title, str(len(documents)), source.backup_date])
    for export in other_collections(exports):
        values.append(
            [
                export.collection,
                str(len(export.documents)),
                export.backup_date,
            ]
        )
    return values
