import pytest
from fastapi.testclient import TestClient

from osce_admin.dependencies.collections import get_collections
from osce_admin.main import app
from osce_admin.services.collections.factory import CollectionSet, create_memory_collection_set


@pytest.fixture
def collections() -> CollectionSet:
    return create_memory_collection_set()


@pytest.fixture
def client(collections: CollectionSet):
    app.dependency_overrides[get_collections] = lambda: collections
    # Not entered as a context manager, so the lifespan (and the database) is never started
    yield TestClient(app)
    app.dependency_overrides.clear()
