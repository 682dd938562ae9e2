"""
Base Repository

Generic base class for all repositories.
Provides common database operations.

Repositories flush but never commit: the service that owns the request
decides when the unit of work is committed, so a mutation and the
notifications it produces land in one transaction.
"""

from typing import Generic, TypeVar, Type, Optional, List, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from journal_api.db.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class with common CRUD operations.

    All repositories should inherit from this class.
    """
    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # -----------------------------
    # Get Element By id
    # -----------------------------
    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get a record by ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    # -----------------------------
    # Create Single Record
    # -----------------------------
    async def create(self, **kwargs) -> ModelType:
        """Create a new record and flush it so its id is available."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        return instance

    # -----------------------------
    # Update record
    # -----------------------------
    async def update(self, instance: ModelType, **kwargs) -> ModelType:
        """Apply field changes to a loaded record."""
        for key, value in kwargs.items():
            setattr(instance, key, value)

        await self.db.flush()
        return instance

    # -----------------------------
    # Delete record
    # -----------------------------
    async def delete(self, instance: ModelType) -> None:
        """Delete a loaded record."""
        await self.db.delete(instance)
        await self.db.flush()

    # -----------------------------
    # Insert unless it already exists
    # -----------------------------
    async def insert_ignore_conflict(self, index_elements: List[str], **values) -> bool:
        """
        INSERT ... ON CONFLICT DO NOTHING against a unique constraint.

        Concurrent callers racing on the same natural key are resolved by
        the database; exactly one row survives.

        Returns:
            True if a row was inserted, False if it already existed
        """
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(self.model)
        elif dialect == "sqlite":
            stmt = sqlite.insert(self.model)
        else:
            raise NotImplementedError(f"Upsert not supported on {dialect}")

        stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=index_elements)
        result = await self.db.execute(stmt)
        return result.rowcount == 1
