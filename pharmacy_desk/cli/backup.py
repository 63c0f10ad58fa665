#!/usr/bin/env python3
"""
CLI for running a document store backup.

Runs the same backup as ``POST /api/backup`` from a trusted local context
(e.g. cron), so no API key is checked. Exits 0 on success and 1 on
failure.
"""

import asyncio
import logging
import sys
from typing import Optional

import click

from pharmacy_desk.config import Settings, setup_logging
from pharmacy_desk.domain import BackupOutcome
from pharmacy_desk.repos import create_document_store
from pharmacy_desk.repos.document import DocumentCollectionExportRepository
from pharmacy_desk.repos.google import GoogleSheetsBackupSink
from pharmacy_desk.usecase import BackupUseCase

logger = logging.getLogger(__name__)


async def _run_backup(settings: Settings) -> BackupOutcome:
    use_case = BackupUseCase(
        export_repo=DocumentCollectionExportRepository(
            create_document_store(settings)
        ),
        sink_repo=GoogleSheetsBackupSink(
            service_account_key=settings.google_service_account_key,
            spreadsheet_id=settings.google_backup_spreadsheet_id,
            title_prefix=settings.mail_from_name,
        ),
        backup_api_key=settings.backup_api_key,
    )
    return await use_case.perform_backup(check_api_key=False)


@click.command()
@click.option(
    "--spreadsheet-id",
    default=None,
    help="Spreadsheet to write to (defaults to GOOGLE_BACKUP_SPREADSHEET_ID)",
)
def main(spreadsheet_id: Optional[str]) -> None:
    """Back up every collection to Google Sheets."""
    settings = Settings.from_env()
    if spreadsheet_id:
        settings = settings.model_copy(
            update={"google_backup_spreadsheet_id": spreadsheet_id}
        )
    setup_logging(settings)

    click.echo("Starting database backup...")
    try:
        outcome = asyncio.run(_run_backup(settings))
    except Exception as e:
        logger.error(f"Backup run failed: {str(e)}", exc_info=True)
        click.echo(f"Backup failed: {str(e)}", err=True)
        sys.exit(1)

    if not outcome.success:
        click.echo(f"Backup failed: {outcome.error}", err=True)
        sys.exit(1)

    click.echo("Backup completed successfully!")
    click.echo(f"Spreadsheet ID: {outcome.spreadsheet_id}")
    click.echo(
        "URL: https://docs.google.com/spreadsheets/d/"
        f"{outcome.spreadsheet_id}"
    )


if __name__ == "__main__":
    main()
