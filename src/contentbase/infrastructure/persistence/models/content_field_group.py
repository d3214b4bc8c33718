"""SQLAlchemy model for the content_field_groups table."""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from contentbase.infrastructure.persistence.database import Base


class ContentFieldGroupModel(Base):
    """One instance of a group field within an entry.

    Child values reference their instance through ``group_instance_id``.
    """

    __tablename__ = "content_field_groups"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("content_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
        comment="The group field",
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
