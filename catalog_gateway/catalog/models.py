"""SQLAlchemy models for the product catalog.

Defines Category and Product tables for persistent storage. Both export
the document shape shared with the retrieval service (``_id``,
``categoryId``, ``createdAt``...).
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_gateway.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Product category.

    Attributes:
        id: Unique category identifier.
        name: Category name.
        description: Optional description.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, name={self.name})>"

    def to_document(self) -> dict[str, Any]:
        """Convert to a catalog document."""
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class Product(Base):
    """Product in the catalog.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Product description.
        brand: Brand name.
        category_id: Referenced category, if any.
        gender: Target gender tag.
        tags: Free-form tags.
        embedding: Vector written by the retrieval service; never exported
            past the API boundary.
        version_id: Optimistic concurrency counter.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)
    # Not a ForeignKey constraint: unknown category IDs are stored unresolved
    category_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    embedding: Mapped[list[float] | None] = mapped_column(JSON, nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    # Relationships
    category: Mapped[Category | None] = relationship(
        Category,
        primaryjoin="foreign(Product.category_id) == Category.id",
        lazy="raise",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]})>"

    def to_document(self, expand_category: bool = False) -> dict[str, Any]:
        """Convert to a catalog document.

        Args:
            expand_category: Embed the category document instead of its ID.
                The relationship must have been eagerly loaded.

        Returns:
            Document including internal fields; sanitize before exposing.
        """
        category_ref: Any = self.category_id
        if expand_category and self.category is not None:
            category_ref = self.category.to_document()

        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "brand": self.brand,
            "categoryId": category_ref,
            "gender": self.gender,
            "tags": list(self.tags or []),
            "embedding": self.embedding,
            "__v": self.version_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
