"""SQLAlchemy collection backend implementation."""

import contextlib
import logging
from collections.abc import AsyncIterator

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from osce_admin.dependencies.database import Base, DatabaseSessionManager
from osce_admin.services.collections.base import (
    Collection,
    CollectionError,
    Document,
    DuplicateKeyError,
    Filter,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)


def to_document(instance: Base) -> Document:
    """Convert an ORM instance into a plain document dict."""
    return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}


class SQLCollection(Collection):
    """Collection stored in one SQL table.

    Every operation runs in its own short-lived session and commits immediately,
    so a failed write never rolls back earlier ones.
    """

    def __init__(self, manager: DatabaseSessionManager, model: type[Base]):
        """
        Initialize SQL collection.

        Args:
            manager: Session manager providing sessions on the configured engine
            model: Declarative model mapped to the backing table
        """
        self.manager = manager
        self.model = model
        self.name = model.__tablename__

    def _column(self, field: str):
        column = self.model.__table__.columns.get(field)
        if column is None:
            raise CollectionError(f"Unknown field '{field}' for {self.name}")
        return column

    def _where(self, filter: Filter | None) -> list:
        return [self._column(field) == value for field, value in (filter or {}).items()]

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.manager.session() as session:
                yield session
        except IntegrityError as e:
            error_str = str(e.orig) if e.orig is not None else str(e)
            if "unique constraint" in error_str.lower() or "duplicate" in error_str.lower():
                raise DuplicateKeyError(error_str) from e
            raise CollectionError(error_str) from e
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("Storage backend unavailable", extra={"collection": self.name})
            raise StorageUnavailableError(f"Storage unavailable: {e}") from e
        except SQLAlchemyError as e:
            raise CollectionError(str(e)) from e

    async def insert(self, fields: Document) -> Document:
        async with self._session() as session:
            instance = self.model(**fields)
            session.add(instance)
            await session.commit()
            return to_document(instance)

    async def find_one(self, filter: Filter) -> Document | None:
        stmt = select(self.model).where(*self._where(filter)).order_by(self.model.id).limit(1)
        async with self._session() as session:
            result = await session.execute(stmt)
            instance = result.scalar_one_or_none()
            return to_document(instance) if instance is not None else None

    async def find_many(self, filter: Filter | None = None) -> list[Document]:
        stmt = select(self.model).where(*self._where(filter)).order_by(self.model.id)
        async with self._session() as session:
            result = await session.execute(stmt)
            return [to_document(instance) for instance in result.scalars().all()]

    async def find_by_id(self, document_id: int) -> Document | None:
        async with self._session() as session:
            instance = await session.get(self.model, document_id)
            return to_document(instance) if instance is not None else None

    async def update_by_id(self, document_id: int, patch: Document) -> Document | None:
        for field in patch:
            self._column(field)
        async with self._session() as session:
            instance = await session.get(self.model, document_id)
            if instance is None:
                return None
            for field, value in patch.items():
                setattr(instance, field, value)
            await session.commit()
            await session.refresh(instance)
            return to_document(instance)

    async def update_many(self, filter: Filter, patch: Document) -> int:
        stmt = update(self.model).where(*self._where(filter)).values(**patch)
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def delete_by_id(self, document_id: int) -> Document | None:
        async with self._session() as session:
            instance = await session.get(self.model, document_id)
            if instance is None:
                return None
            document = to_document(instance)
            await session.delete(instance)
            await session.commit()
            return document

    async def delete_many(self, filter: Filter | None = None) -> int:
        stmt = delete(self.model).where(*self._where(filter))
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def count(self, filter: Filter | None = None) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._where(filter))
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalar_one()
