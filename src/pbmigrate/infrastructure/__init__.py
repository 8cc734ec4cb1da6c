"""Infrastructure layer - External dependencies and implementations.

This layer contains:
- Database adapters (SQLAlchemy) and the SQL schema store
- The in-memory schema store
- Migration file discovery and generation

The infrastructure layer implements interfaces defined in the domain layer.
"""

from pbmigrate.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "init_database",
]
