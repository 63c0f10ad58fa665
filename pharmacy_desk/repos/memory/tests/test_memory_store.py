"""
Tests for MemoryDocumentStore.
"""

import pytest

from pharmacy_desk.repos.memory import MemoryDocumentStore
from pharmacy_desk.repositories import DocumentStore


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


def test_satisfies_protocol(store: MemoryDocumentStore) -> None:
    assert isinstance(store, DocumentStore)


@pytest.mark.asyncio
async def test_put_and_get(store: MemoryDocumentStore) -> None:
    await store.put_document("requests", "r1", {"id": "r1", "tags": ["a"]})

    assert await store.get_document("requests", "r1") == {
        "id": "r1",
        "tags": ["a"],
    }
    assert await store.get_document("requests", "missing") is None
    assert await store.get_document("other", "r1") is None


@pytest.mark.asyncio
async def test_documents_are_copied(store: MemoryDocumentStore) -> None:
    original = {"id": "r1", "tags": ["a"]}
    await store.put_document("requests", "r1", original)
    original["tags"].append("b")

    fetched = await store.get_document("requests", "r1")
    fetched["tags"].append("c")

    assert store.collections["requests"]["r1"]["tags"] == ["a"]


@pytest.mark.asyncio
async def test_update_merges_fields(store: MemoryDocumentStore) -> None:
    await store.put_document("requests", "r1", {"id": "r1", "status": "a"})

    matched = await store.update_document(
        "requests", "r1", {"status": "b", "updatedAt": "now"}
    )

    assert matched is True
    assert store.collections["requests"]["r1"] == {
        "id": "r1",
        "status": "b",
        "updatedAt": "now",
    }


@pytest.mark.asyncio
async def test_update_unknown_document(store: MemoryDocumentStore) -> None:
    assert await store.update_document("requests", "r1", {"x": 1}) is False
    assert store.collections == {}


@pytest.mark.asyncio
async def test_list_documents_and_collections() -> None:
    store = MemoryDocumentStore(
        {
            "requests": {"r1": {"id": "r1"}, "r2": {"id": "r2"}},
            "claims": {"c1": {"id": "c1"}},
            "empty": {},
        }
    )

    documents = await store.list_documents("requests")

    assert sorted(d["id"] for d in documents) == ["r1", "r2"]
    assert await store.list_documents("nothing") == []
    assert sorted(await store.list_collections()) == ["claims", "requests"]
