"""
Tests for application wiring: health, error shapes and static uploads.
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from pharmacy_desk.api.app import create_app
from pharmacy_desk.api.dependencies import (
    DependencyContainer,
    get_request_repository,
)
from pharmacy_desk.config import Settings
from pharmacy_desk.repos.memory import MemoryDocumentStore
from pharmacy_desk.repos.minio import MinioDocumentStore
from pharmacy_desk.repositories import RequestRepository


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))


def test_container_reuses_document_store(settings: Settings) -> None:
    container = DependencyContainer(settings)

    first = container.get_document_store()

    assert isinstance(first, MemoryDocumentStore)
    assert container.get_document_store() is first


def test_container_builds_minio_store_lazily(settings: Settings) -> None:
    container = DependencyContainer(
        settings.model_copy(update={"store_backend": "minio"})
    )

    # no connection is made until the store is used
    assert isinstance(container.get_document_store(), MinioDocumentStore)


def test_create_app_makes_uploads_directory(tmp_path: Path) -> None:
    uploads = tmp_path / "nested" / "uploads"

    create_app(Settings(store_backend="memory", uploads_dir=str(uploads)))

    assert uploads.is_dir()


def test_malformed_json_is_400(client: TestClient) -> None:
    response = client.put(
        "/api/requests/req_1",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_repository_failure_is_500(app: FastAPI, client: TestClient) -> None:
    repo = AsyncMock(spec=RequestRepository)
    repo.list_all.side_effect = RuntimeError("store offline")
    app.dependency_overrides[get_request_repository] = lambda: repo

    response = client.get("/api/requests")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to fetch requests",
    }
