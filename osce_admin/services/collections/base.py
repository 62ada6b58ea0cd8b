"""Base interface for document collections."""

from abc import ABC, abstractmethod
from typing import Any

Document = dict[str, Any]
Filter = dict[str, Any]


class CollectionError(Exception):
    """Raised when a collection operation fails."""

    pass


class DuplicateKeyError(CollectionError):
    """Raised when a write violates a unique field."""

    pass


class StorageUnavailableError(CollectionError):
    """Raised when the storage backend cannot be reached at all."""

    pass


class Collection(ABC):
    """Abstract base class for a collection of documents of one entity kind.

    Documents are plain dicts carrying a storage-assigned integer ``id``.
    Filters are field-equality dicts; an empty or missing filter matches everything.
    """

    name: str

    @abstractmethod
    async def insert(self, fields: Document) -> Document:
        """
        Insert a new document.

        Args:
            fields: Field values for the new document (without ``id``)

        Returns:
            The stored document, including its assigned ``id``

        Raises:
            DuplicateKeyError: If a unique field value already exists
            CollectionError: If a required field is missing or the write fails
        """
        pass

    @abstractmethod
    async def find_one(self, filter: Filter) -> Document | None:
        """Return the first document matching ``filter`` (lowest id), or None."""
        pass

    @abstractmethod
    async def find_many(self, filter: Filter | None = None) -> list[Document]:
        """Return all documents matching ``filter`` ordered by id."""
        pass

    @abstractmethod
    async def find_by_id(self, document_id: int) -> Document | None:
        pass

    @abstractmethod
    async def update_by_id(self, document_id: int, patch: Document) -> Document | None:
        """
        Overwrite the given fields of one document.

        Returns:
            The updated document, or None if no document has this id

        Raises:
            DuplicateKeyError: If the patch collides with another document's unique field
        """
        pass

    @abstractmethod
    async def update_many(self, filter: Filter, patch: Document) -> int:
        """Apply ``patch`` to every matching document and return how many matched."""
        pass

    @abstractmethod
    async def delete_by_id(self, document_id: int) -> Document | None:
        """Delete one document and return it, or None if it did not exist."""
        pass

    @abstractmethod
    async def delete_many(self, filter: Filter | None = None) -> int:
        """Delete every matching document and return the count."""
        pass

    @abstractmethod
    async def count(self, filter: Filter | None = None) -> int:
        pass

