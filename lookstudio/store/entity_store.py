"""
Entity store — keyed persistence for models, looks and lookboards.

One store handle per process: opened at startup, passed explicitly to the
orchestrator and the lookbook manager, closed on shutdown. Tests open the same
class against an in-memory SQLite database.

Guarantees:
  - ids are store-assigned, positive, increasing per kind, never reused
  - lookboards.public_id is unique and immutable once assigned
  - bulk_add is all-or-nothing for its batch
  - remove is idempotent
No cascades happen here; cross-entity cleanup belongs to the lookbook manager.
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.database import Base, build_engine
from ..core.errors import (
    ConstraintViolationError,
    InvalidStateError,
    NotFoundError,
    StoreUnavailableError,
)
from ..models import LookRecord, LookboardRecord, ModelRecord, RecordBase
from ..schemas import Look, Lookboard, Model

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)


class EntityKind(str, Enum):
    MODEL = "models"
    LOOK = "looks"
    LOOKBOARD = "lookboards"


# kind → (table, persisted schema)
_KINDS: dict[EntityKind, tuple[Type[RecordBase], Type[BaseModel]]] = {
    EntityKind.MODEL: (ModelRecord, Model),
    EntityKind.LOOK: (LookRecord, Look),
    EntityKind.LOOKBOARD: (LookboardRecord, Lookboard),
}


def _columns(entity: BaseModel) -> dict:
    """Entity → column values. Nested models become plain JSON."""
    return entity.model_dump(mode="json", exclude={"id"})


class EntityStore:
    """Async SQLAlchemy-backed store for the three entity kinds."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    # ── Lifecycle ────────────────────────────────────────────────────

    async def open(self) -> "EntityStore":
        """Create the engine and tables. Raises StoreUnavailableError on failure."""
        if self._engine is not None:
            return self
        engine = build_engine(self.database_url, echo=self.echo)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            logger.error("Could not open entity store at %s: %s", self.database_url, e)
            raise StoreUnavailableError(f"Cannot open the entity store: {e}") from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Entity store opened")
        return self

    async def close(self) -> None:
        """Dispose the engine. Safe to call twice."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Entity store closed")

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Session wrapped in a transaction; store-level failures mapped to domain errors."""
        if self._session_factory is None:
            raise StoreUnavailableError("Entity store is not open")
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            raise ConstraintViolationError(f"Constraint violated: {e.orig}") from e
        except OperationalError as e:
            raise StoreUnavailableError(f"Entity store unavailable: {e.orig}") from e

    # ── Reads ────────────────────────────────────────────────────────

    async def get_all(self, kind: EntityKind) -> list:
        """All entities of a kind. Order is not guaranteed; sort by timestamp if needed."""
        table, schema = _KINDS[kind]
        async with self._transaction() as session:
            result = await session.execute(select(table))
            return [schema.model_validate(row) for row in result.scalars().all()]

    async def get(self, kind: EntityKind, entity_id: int):
        table, schema = _KINDS[kind]
        async with self._transaction() as session:
            row = await session.get(table, entity_id)
            if row is None:
                raise NotFoundError(f"{kind.value} #{entity_id} not found")
            return schema.model_validate(row)

    async def find_by_public_id(self, public_id: str) -> Optional[Lookboard]:
        async with self._transaction() as session:
            result = await session.execute(
                select(LookboardRecord).where(LookboardRecord.public_id == public_id)
            )
            row = result.scalar_one_or_none()
            return Lookboard.model_validate(row) if row else None

    # ── Writes ───────────────────────────────────────────────────────

    async def add(self, kind: EntityKind, draft: BaseModel):
        """Insert a draft. Returns the persisted entity with its new id."""
        table, schema = _KINDS[kind]
        async with self._transaction() as session:
            row = table(**_columns(draft))
            session.add(row)
            await session.flush()
            entity = schema.model_validate(row)
        logger.debug("Added %s #%d", kind.value, entity.id)
        return entity

    async def put(self, kind: EntityKind, entity: E) -> E:
        """Replace an existing entity. The id must refer to a stored row."""
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            raise NotFoundError(f"Cannot update {kind.value}: entity has no id")

        table, _ = _KINDS[kind]
        async with self._transaction() as session:
            row = await session.get(table, entity_id)
            if row is None:
                raise NotFoundError(f"{kind.value} #{entity_id} not found")
            values = _columns(entity)
            if kind is EntityKind.LOOKBOARD and values["public_id"] != row.public_id:
                raise InvalidStateError("A lookboard's public id cannot change once assigned")
            for column, value in values.items():
                setattr(row, column, value)
            await session.flush()
        return entity

    async def bulk_add(self, kind: EntityKind, drafts: Sequence[BaseModel]) -> None:
        """Insert a batch in one transaction. A single violation discards the whole batch."""
        if not drafts:
            return
        table, _ = _KINDS[kind]
        async with self._transaction() as session:
            session.add_all([table(**_columns(d)) for d in drafts])
            await session.flush()
        logger.info("Bulk added %d %s", len(drafts), kind.value)

    async def remove(self, kind: EntityKind, entity_id: int) -> None:
        """Delete by id. Missing ids are ignored."""
        table, _ = _KINDS[kind]
        async with self._transaction() as session:
            row = await session.get(table, entity_id)
            if row is not None:
                await session.delete(row)
