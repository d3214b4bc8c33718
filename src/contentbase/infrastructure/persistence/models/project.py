"""SQLAlchemy model for the projects table."""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from contentbase.infrastructure.persistence.database import Base


class ProjectModel(Base):
    """SQLAlchemy model for the projects table.

    Attributes:
        id: Primary key.
        name: Display name.
        default_locale: Locale used when none is chosen.
        locales: JSON list of configured locale codes.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Project name")
    default_locale: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="en",
        comment="Default locale code",
    )
    locales: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
        comment="Configured locale codes",
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

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name})>"
