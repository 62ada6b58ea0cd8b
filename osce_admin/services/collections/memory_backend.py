"""In-memory collection backend implementation."""

import copy
from collections.abc import Iterable
from datetime import datetime

from osce_admin.services.collections.base import (
    Collection,
    CollectionError,
    Document,
    DuplicateKeyError,
    Filter,
)


def _matches(document: Document, filter: Filter | None) -> bool:
    if not filter:
        return True
    return all(document.get(field) == value for field, value in filter.items())


class InMemoryCollection(Collection):
    """Dict-backed collection enforcing the same unique and required fields as the SQL tables.

    Used for tests and for running the API without a database.
    """

    def __init__(
        self,
        name: str,
        unique_fields: Iterable[str] = (),
        required_fields: Iterable[str] = (),
    ):
        """
        Initialize in-memory collection.

        Args:
            name: Collection name, used in error messages
            unique_fields: Fields whose values must be unique across documents
            required_fields: Fields that must be present and non-empty on insert
        """
        self.name = name
        self.unique_fields = tuple(unique_fields)
        self.required_fields = tuple(required_fields)
        self._documents: dict[int, Document] = {}
        self._next_id = 1

    def _check_required(self, document: Document) -> None:
        for field in self.required_fields:
            value = document.get(field)
            if value is None or value == "":
                raise CollectionError(f"{self.name} validation failed: {field} is required")

    def _check_unique(self, document: Document, exclude_id: int | None = None) -> None:
        for field in self.unique_fields:
            value = document.get(field)
            if value is None:
                continue
            for other_id, other in self._documents.items():
                if other_id != exclude_id and other.get(field) == value:
                    raise DuplicateKeyError(f"duplicate key value for {self.name}.{field}: {value!r}")

    async def insert(self, fields: Document) -> Document:
        now = datetime.utcnow()
        document = {**copy.deepcopy(fields), "id": self._next_id, "created_at": now, "updated_at": now}
        self._check_required(document)
        self._check_unique(document)
        self._documents[document["id"]] = document
        self._next_id += 1
        return copy.deepcopy(document)

    async def find_one(self, filter: Filter) -> Document | None:
        for document in self._documents.values():
            if _matches(document, filter):
                return copy.deepcopy(document)
        return None

    async def find_many(self, filter: Filter | None = None) -> list[Document]:
        return [copy.deepcopy(document) for document in self._documents.values() if _matches(document, filter)]

    async def find_by_id(self, document_id: int) -> Document | None:
        document = self._documents.get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def update_by_id(self, document_id: int, patch: Document) -> Document | None:
        current = self._documents.get(document_id)
        if current is None:
            return None
        updated = {**current, **copy.deepcopy(patch), "id": document_id, "updated_at": datetime.utcnow()}
        self._check_required(updated)
        self._check_unique(updated, exclude_id=document_id)
        self._documents[document_id] = updated
        return copy.deepcopy(updated)

    async def update_many(self, filter: Filter, patch: Document) -> int:
        matched = [document_id for document_id, document in self._documents.items() if _matches(document, filter)]
        for document_id in matched:
            await self.update_by_id(document_id, patch)
        return len(matched)

    async def delete_by_id(self, document_id: int) -> Document | None:
        return self._documents.pop(document_id, None)

    async def delete_many(self, filter: Filter | None = None) -> int:
        matched = [document_id for document_id, document in self._documents.items() if _matches(document, filter)]
        for document_id in matched:
            del self._documents[document_id]
        return len(matched)

    async def count(self, filter: Filter | None = None) -> int:
        return sum(1 for document in self._documents.values() if _matches(document, filter))
