from typing import Annotated

from fastapi import Depends

from osce_admin.services.collections.factory import CollectionSet, get_collection_set

_collection_set: CollectionSet | None = None


def get_collections() -> CollectionSet:
    """Return the process-wide collection set, creating it on first use."""
    global _collection_set
    if _collection_set is None:
        _collection_set = get_collection_set()
    return _collection_set


CollectionsDep = Annotated[CollectionSet, Depends(get_collections)]
