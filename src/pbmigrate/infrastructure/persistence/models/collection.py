"""SQLAlchemy model for the _collections table.

Each row stores one collection definition with its field schema as JSON.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from pbmigrate.infrastructure.persistence.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionModel(Base):
    """SQLAlchemy model for the _collections table.

    Attributes:
        id: Primary key (stable collection id).
        name: Collection name, unique.
        type: Collection type ("base", "auth" or "view").
        system: Whether the collection is managed by the system.
        schema: JSON array of field definitions.
        created_at: Timestamp when the collection was created.
        updated_at: Timestamp when the collection was last saved.
    """

    __tablename__ = "_collections"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Collection ID",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Collection name",
    )
    type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="base",
        server_default="base",
    )
    system: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    schema: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="[]",
        comment="JSON array of field definitions",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name={self.name})>"
