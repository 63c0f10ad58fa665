"""
Shared fixtures for API tests.

Each test gets a fresh application built from explicit Settings with the
memory document store, a temporary uploads directory, and memory email and
backup repositories swapped in through ``app.dependency_overrides``.
"""

from pathlib import Path
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pharmacy_desk.api.app import create_app
from pharmacy_desk.api.dependencies import (
    get_backup_sink,
    get_email_repository,
)
from pharmacy_desk.config import Settings
from pharmacy_desk.repos.memory import (
    MemoryBackupSink,
    MemoryDocumentStore,
    MemoryEmailRepository,
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        admin_username="admin",
        admin_password="s3cret",
        jwt_secret="test-secret",
        admin_email="owner@example.com",
        store_backend="memory",
        uploads_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def email_repo() -> MemoryEmailRepository:
    return MemoryEmailRepository()


@pytest.fixture
def backup_sink() -> MemoryBackupSink:
    return MemoryBackupSink(spreadsheet_id="sheet-123")


@pytest.fixture
def app(
    settings: Settings,
    email_repo: MemoryEmailRepository,
    backup_sink: MemoryBackupSink,
) -> FastAPI:
    app = create_app(settings)
    app.dependency_overrides[get_email_repository] = lambda: email_repo
    app.dependency_overrides[get_backup_sink] = lambda: backup_sink
    return app


@pytest.fixture
def store(app: FastAPI) -> MemoryDocumentStore:
    """The memory store the application is wired to."""
    return app.state.container.get_document_store()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
