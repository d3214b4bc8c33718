"""SQLAlchemy model for the content_media_values table."""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from contentbase.infrastructure.persistence.database import Base


class ContentMediaValueModel(Base):
    """One asset of a media value, in display order."""

    __tablename__ = "content_media_values"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("content_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
    )
    group_instance_id: Mapped[int | None] = mapped_column(
        ForeignKey("content_field_groups.id", ondelete="CASCADE"),
        nullable=True,
    )
    asset_id: Mapped[int] = mapped_column(Integer, nullable=False, comment="Asset identifier")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
