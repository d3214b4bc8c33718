"""SQLAlchemy model for the collections table."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from contentbase.infrastructure.persistence.database import Base


class CollectionModel(Base):
    """SQLAlchemy model for the collections table.

    Collections hold a field schema (see ``FieldModel``) and the content
    entries written against it.
    """

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning project",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Collection name")
    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="URL-friendly collection name, unique per project",
    )
    is_singleton: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="At most one non-trashed entry per locale",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (UniqueConstraint("project_id", "slug", name="uq_collections_project_slug"),)

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, slug={self.slug})>"
