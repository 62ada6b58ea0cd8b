"""Factory for creating collection sets."""

import logging
from dataclasses import dataclass

from osce_admin.config import settings
from osce_admin.dependencies.database import DatabaseSessionManager, get_sessionmanager
from osce_admin.models import (
    Administration,
    Client,
    Examinee,
    Examiner,
    Feedback,
    ParticipantKind,
    Station,
    Track,
)
from osce_admin.services.collections.base import Collection
from osce_admin.services.collections.memory_backend import InMemoryCollection
from osce_admin.services.collections.sql_backend import SQLCollection

logger = logging.getLogger(__name__)


@dataclass
class CollectionSet:
    """Every collection the application works with, passed explicitly to services."""

    administrations: Collection
    tracks: Collection
    stations: Collection
    examiners: Collection
    examinees: Collection
    clients: Collection
    feedback: Collection

    def participants(self, kind: ParticipantKind) -> Collection:
        """Return the collection holding participants of the given kind."""
        return {
            ParticipantKind.EXAMINER: self.examiners,
            ParticipantKind.EXAMINEE: self.examinees,
            ParticipantKind.CLIENT: self.clients,
        }[kind]


def create_memory_collection_set() -> CollectionSet:
    """Create an empty in-memory collection set with the SQL schema's constraints."""
    return CollectionSet(
        administrations=InMemoryCollection("administrations", required_fields=("name",)),
        tracks=InMemoryCollection("tracks", required_fields=("name", "administration_id")),
        stations=InMemoryCollection("stations", required_fields=("name", "track_id")),
        examiners=InMemoryCollection("examiners", unique_fields=("examiner_id",), required_fields=("examiner_id", "name")),
        examinees=InMemoryCollection("examinees", unique_fields=("examinee_id",), required_fields=("examinee_id", "name")),
        clients=InMemoryCollection("clients", unique_fields=("client_id",), required_fields=("client_id", "name")),
        feedback=InMemoryCollection("feedback", required_fields=("name", "email", "feedback", "rate")),
    )


def create_sql_collection_set(manager: DatabaseSessionManager) -> CollectionSet:
    """Create a collection set backed by the tables of the configured database."""
    return CollectionSet(
        administrations=SQLCollection(manager, Administration),
        tracks=SQLCollection(manager, Track),
        stations=SQLCollection(manager, Station),
        examiners=SQLCollection(manager, Examiner),
        examinees=SQLCollection(manager, Examinee),
        clients=SQLCollection(manager, Client),
        feedback=SQLCollection(manager, Feedback),
    )


def get_collection_set(
    backend_type: str | None = None,
    manager: DatabaseSessionManager | None = None,
) -> CollectionSet:
    """
    Factory function to create a collection set.

    Args:
        backend_type: Collection backend type ("sql", "memory"). Defaults to settings.collection_backend
        manager: Session manager for the "sql" backend. Defaults to the application session manager

    Returns:
        CollectionSet instance

    Raises:
        ValueError: If backend_type is unsupported
    """
    backend_type = backend_type or settings.collection_backend

    if backend_type.lower() == "sql":
        return create_sql_collection_set(manager or get_sessionmanager())

    elif backend_type.lower() == "memory":
        logger.warning("Using in-memory collections; data is lost when the process exits")
        return create_memory_collection_set()

    else:
        raise ValueError(f"Unsupported collection backend: {backend_type}. Supported backends: sql, memory")
