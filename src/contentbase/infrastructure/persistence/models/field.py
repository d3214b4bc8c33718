"""SQLAlchemy model for the fields table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from contentbase.infrastructure.persistence.database import Base


class FieldModel(Base):
    """SQLAlchemy model for the fields table.

    Fields are stored flat; group children point at their group through
    ``parent_field_id``.

    Attributes:
        type: One of the ``FieldType`` values.
        options: Type-specific configuration (repeatable, multiple, slug source...).
        validations: Required/unique/charcount rules.
        order: Display and storage sequence.
    """

    __tablename__ = "fields"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_field_id: Mapped[int | None] = mapped_column(
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=True,
        comment="Enclosing group field",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Machine name")
    label: Mapped[str] = mapped_column(String(255), nullable=False, comment="Display label")
    type: Mapped[str] = mapped_column(String(32), nullable=False, comment="Field type")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    options: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    validations: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
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

    __table_args__ = (
        UniqueConstraint("collection_id", "parent_field_id", "name", name="uq_fields_name"),
    )

    def __repr__(self) -> str:
        return f"<Field(id={self.id}, name={self.name}, type={self.type})>"
