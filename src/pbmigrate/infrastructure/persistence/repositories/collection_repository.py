"""Repository for collection operations.

Provides lookup and save operations for the _collections table.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pbmigrate.infrastructure.persistence.models import CollectionModel


class CollectionRepository:
    """Repository for collection database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, collection: CollectionModel) -> CollectionModel:
        """Create a new collection.

        Args:
            collection: The collection model to create.

        Returns:
            The created collection model.
        """
        self.session.add(collection)
        await self.session.flush()
        return collection

    async def get_by_id(self, collection_id: str) -> CollectionModel | None:
        """Get a collection by ID, reusing the instance already loaded in the session.

        Args:
            collection_id: The collection ID.

        Returns:
            The collection model if found, None otherwise.
        """
        return await self.session.get(CollectionModel, collection_id)

    async def get_by_name(self, name: str) -> CollectionModel | None:
        """Get a collection by name (case-insensitive).

        Args:
            name: The collection name.

        Returns:
            The collection model if found, None otherwise.
        """
        result = await self.session.execute(
            select(CollectionModel).where(func.lower(CollectionModel.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_name_or_id(self, name_or_id: str) -> CollectionModel | None:
        """Get a collection by ID, falling back to name.

        Args:
            name_or_id: The collection ID or name.

        Returns:
            The collection model if found, None otherwise.
        """
        collection = await self.get_by_id(name_or_id)
        if collection is None:
            collection = await self.get_by_name(name_or_id)
        return collection

    async def update(self, collection: CollectionModel) -> CollectionModel:
        """Flush changes of a loaded collection.

        Args:
            collection: The collection model with updated attributes.

        Returns:
            The updated collection model.
        """
        await self.session.flush()
        return collection

    async def list_all(self) -> list[CollectionModel]:
        """List all collections ordered by name."""
        result = await self.session.execute(
            select(CollectionModel).order_by(CollectionModel.name)
        )
        return list(result.scalars().all())
