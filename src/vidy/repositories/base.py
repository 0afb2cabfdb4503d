"""
Base repository interface and implementation.

Repositories take the session as an argument; the request-scoped session
from ``get_db`` owns the transaction, so repositories only flush.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.db.models import Base
from vidy.exceptions import RepositoryError

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class BaseRepository(ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Interface shared by the entity repositories."""

    @abstractmethod
    async def create(
        self, session: AsyncSession, *, obj_in: CreateSchemaType
    ) -> ModelType:
        """Create a new entity."""

    @abstractmethod
    async def get(self, session: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get entity by ID."""

    @abstractmethod
    async def update(
        self,
        session: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, dict[str, Any]],
    ) -> ModelType:
        """Update an existing entity."""


class BaseSQLAlchemyRepository(
    BaseRepository[ModelType, CreateSchemaType, UpdateSchemaType]
):
    """
    SQLAlchemy implementation of the shared create/get/update operations.

    Every entity table has a single ``id`` primary key, so lookups go
    through ``session.get``. Deletion is left to each repository because
    every entity has dependents to clean up first.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def _flush(self, session: AsyncSession, operation: str) -> None:
        try:
            await session.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to {operation} {self.model.__name__}",
                operation=operation,
                entity_type=self.model.__name__,
                original_error=e,
            ) from e

    async def create(
        self, session: AsyncSession, *, obj_in: CreateSchemaType
    ) -> ModelType:
        """Insert a new row built from a domain model or a dict."""
        if hasattr(obj_in, "model_dump"):
            obj_data = obj_in.model_dump()
        else:
            obj_data = obj_in if isinstance(obj_in, dict) else obj_in.__dict__

        db_obj = self.model(**obj_data)
        session.add(db_obj)
        await self._flush(session, "insert")
        await session.refresh(db_obj)
        return db_obj

    async def get(self, session: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get entity by primary key."""
        return await session.get(self.model, id)

    async def update(
        self,
        session: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, dict[str, Any]],
    ) -> ModelType:
        """
        Apply the fields that were explicitly set on *obj_in*.

        Unset fields of a Pydantic update model are left untouched, so a
        partial PATCH only changes what the client sent.
        """
        if hasattr(obj_in, "model_dump"):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = obj_in if isinstance(obj_in, dict) else obj_in.__dict__

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        session.add(db_obj)
        await self._flush(session, "update")
        await session.refresh(db_obj)
        return db_obj
