"""SQLAlchemy model for the content_field_values table."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from contentbase.infrastructure.persistence.database import Base


class ContentFieldValueModel(Base):
    """One scalar field value of an entry.

    Exactly the typed column matching the field type is populated.
    Repeatable fields store one row per item, ordered by ``sort_order``.

    Attributes:
        text_value: Text-like values; rich text HTML.
        number_value: Numeric values.
        boolean_value: Boolean values.
        date_value: Date, or start of a date range.
        date_value_end: End of a date range.
        datetime_value: Date with time, or start of such a range.
        datetime_value_end: End of a date-time range.
        json_value: JSON values, enumerations, rich text documents.
    """

    __tablename__ = "content_field_values"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("content_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_instance_id: Mapped[int | None] = mapped_column(
        ForeignKey("content_field_groups.id", ondelete="CASCADE"),
        nullable=True,
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    text_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    number_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    boolean_value: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    date_value: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_value_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    datetime_value: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    datetime_value_end: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    json_value: Mapped[Any] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )
