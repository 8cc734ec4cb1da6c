"""Pytest configuration for all tests."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pbmigrate.domain.entities import CollectionDefinition, FieldDefinition, FieldType
from pbmigrate.infrastructure.persistence import models  # noqa: F401
from pbmigrate.infrastructure.persistence.database import Base
from pbmigrate.infrastructure.persistence.memory_schema_store import InMemorySchemaStore

REPO_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = REPO_ROOT / "pb_migrations"

PROJECTS_COLLECTION_ID = "7kff2zw80a7rmbu"
PLANS_COLLECTION_ID = "s7nhljkrmzzu8y6"


def make_projects_collection() -> CollectionDefinition:
    """The projects collection as it exists before selectedPlan is added."""
    return CollectionDefinition(
        id=PROJECTS_COLLECTION_ID,
        name="projects",
        fields=[
            FieldDefinition(id="u0qgjbvn", name="name", type=FieldType.TEXT, required=True),
            FieldDefinition(id="m4h1qzpk", name="description", type=FieldType.EDITOR),
        ],
    )


@pytest.fixture
def projects_collection() -> CollectionDefinition:
    return make_projects_collection()


@pytest.fixture
def memory_store(projects_collection) -> InMemorySchemaStore:
    """In-memory store holding the projects collection."""
    return InMemorySchemaStore([projects_collection])


@pytest.fixture
def migrations_dir() -> Path:
    return MIGRATIONS_DIR


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with the system tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on the in-memory engine."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()
