"""SQLAlchemy model for the content_relation_values table."""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from contentbase.infrastructure.persistence.database import Base


class ContentRelationValueModel(Base):
    """One related entry of a relation value, in relation order."""

    __tablename__ = "content_relation_values"

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
    related_entry_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Entry of the relation's target collection",
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
