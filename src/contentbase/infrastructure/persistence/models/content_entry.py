"""SQLAlchemy model for the content_entries table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from contentbase.infrastructure.persistence.database import Base


class ContentEntryModel(Base):
    """SQLAlchemy model for the content_entries table.

    One row per entry and locale. Field values live in the typed value
    tables keyed by ``entry_id``.

    Attributes:
        translation_group_id: Shared id of entries translating each other.
        published_at: Set on first publish and kept afterwards.
        deleted_at: Soft-trash marker; trashed entries are hidden from
            default searches.
    """

    __tablename__ = "content_entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, comment="Public id")
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    collection_id: Mapped[int] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
    )
    locale: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    translation_group_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        index=True,
        comment="Shared id of linked translations",
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
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
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_content_entries_collection_locale", "collection_id", "locale"),
        Index("ix_content_entries_collection_deleted", "collection_id", "deleted_at"),
    )

    def __repr__(self) -> str:
        return f"<ContentEntry(id={self.id}, collection_id={self.collection_id}, locale={self.locale})>"
