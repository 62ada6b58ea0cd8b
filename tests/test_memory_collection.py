import pytest

from osce_admin.services.collections.base import CollectionError, DuplicateKeyError
from osce_admin.services.collections.factory import get_collection_set
from osce_admin.services.collections.memory_backend import InMemoryCollection


@pytest.fixture
def examiners() -> InMemoryCollection:
    return InMemoryCollection("examiners", unique_fields=("examiner_id",), required_fields=("examiner_id", "name"))


async def test_insert_assigns_id_and_timestamps(examiners):
    document = await examiners.insert({"examiner_id": "E1", "name": "Ann"})

    assert document["id"] == 1
    assert document["created_at"] is not None
    assert document["updated_at"] == document["created_at"]
    assert (await examiners.insert({"examiner_id": "E2", "name": "Bob"}))["id"] == 2


async def test_insert_rejects_duplicate_unique_field(examiners):
    await examiners.insert({"examiner_id": "E1", "name": "Ann"})

    with pytest.raises(DuplicateKeyError):
        await examiners.insert({"examiner_id": "E1", "name": "Another Ann"})
    assert await examiners.count() == 1


async def test_insert_rejects_missing_required_field(examiners):
    with pytest.raises(CollectionError, match="name is required"):
        await examiners.insert({"examiner_id": "E1", "name": ""})


async def test_update_by_id_merges_patch(examiners):
    created = await examiners.insert({"examiner_id": "E1", "name": "Ann"})

    updated = await examiners.update_by_id(created["id"], {"name": "Ann B"})

    assert updated["name"] == "Ann B"
    assert updated["examiner_id"] == "E1"
    assert updated["created_at"] == created["created_at"]


async def test_update_by_id_rejects_duplicate_and_missing(examiners):
    await examiners.insert({"examiner_id": "E1", "name": "Ann"})
    second = await examiners.insert({"examiner_id": "E2", "name": "Bob"})

    with pytest.raises(DuplicateKeyError):
        await examiners.update_by_id(second["id"], {"examiner_id": "E1"})
    assert await examiners.update_by_id(99, {"name": "Nobody"}) is None


async def test_returned_documents_are_copies(examiners):
    created = await examiners.insert({"examiner_id": "E1", "name": "Ann"})
    created["name"] = "Changed"

    assert (await examiners.find_by_id(created["id"]))["name"] == "Ann"


async def test_filters_and_counts(examiners):
    await examiners.insert({"examiner_id": "E1", "name": "Ann"})
    await examiners.insert({"examiner_id": "E2", "name": "Ann"})
    await examiners.insert({"examiner_id": "E3", "name": "Bob"})

    assert await examiners.count() == 3
    assert await examiners.count({"name": "Ann"}) == 2
    assert [doc["examiner_id"] for doc in await examiners.find_many({"name": "Ann"})] == ["E1", "E2"]
    assert (await examiners.find_one({"examiner_id": "E3"}))["name"] == "Bob"
    assert await examiners.find_one({"examiner_id": "E9"}) is None


async def test_update_many_and_delete_many(examiners):
    await examiners.insert({"examiner_id": "E1", "name": "Ann"})
    await examiners.insert({"examiner_id": "E2", "name": "Bob"})

    assert await examiners.update_many({}, {"name": "Renamed"}) == 2
    assert {doc["name"] for doc in await examiners.find_many()} == {"Renamed"}

    assert await examiners.delete_many({"examiner_id": "E1"}) == 1
    assert await examiners.delete_many() == 1
    assert await examiners.count() == 0


async def test_delete_by_id(examiners):
    created = await examiners.insert({"examiner_id": "E1", "name": "Ann"})

    assert (await examiners.delete_by_id(created["id"]))["examiner_id"] == "E1"
    assert await examiners.delete_by_id(created["id"]) is None


def test_get_collection_set_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported collection backend"):
        get_collection_set("mongodb")


def test_get_collection_set_memory():
    collections = get_collection_set("memory")

    assert collections.examiners.name == "examiners"
    assert collections.feedback.name == "feedback"
