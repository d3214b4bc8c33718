"""create_content_tables

Revision ID: 5f1c2a9d7e40
Revises:
Create Date: 2026-10-18 09:12:44.310215

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5f1c2a9d7e40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _value_owner_columns() -> list[sa.Column]:
    """Columns shared by the value tables: owning entry, field and group instance."""
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("field_id", sa.Integer(), nullable=False),
        sa.Column("group_instance_id", sa.Integer(), nullable=True),
    ]


def _value_owner_constraints() -> list[sa.Constraint]:
    return [
        sa.ForeignKeyConstraint(["entry_id"], ["content_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["field_id"], ["fields.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_instance_id"], ["content_field_groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    """Create schema and content tables."""
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Project name"),
        sa.Column("default_locale", sa.String(length=16), nullable=False, comment="Default locale code"),
        sa.Column("locales", JSON_TYPE, nullable=False, comment="Configured locale codes"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False, comment="Owning project"),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Collection name"),
        sa.Column(
            "slug",
            sa.String(length=255),
            nullable=False,
            comment="URL-friendly collection name, unique per project",
        ),
        sa.Column(
            "is_singleton",
            sa.Boolean(),
            nullable=False,
            comment="At most one non-trashed entry per locale",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "slug", name="uq_collections_project_slug"),
    )
    op.create_index("ix_collections_project_id", "collections", ["project_id"])

    op.create_table(
        "fields",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("parent_field_id", sa.Integer(), nullable=True, comment="Enclosing group field"),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Machine name"),
        sa.Column("label", sa.String(length=255), nullable=False, comment="Display label"),
        sa.Column("type", sa.String(length=32), nullable=False, comment="Field type"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("options", JSON_TYPE, nullable=False),
        sa.Column("validations", JSON_TYPE, nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_field_id"], ["fields.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("collection_id", "parent_field_id", "name", name="uq_fields_name"),
    )
    op.create_index("ix_fields_collection_id", "fields", ["collection_id"])

    op.create_table(
        "content_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.String(length=36), nullable=False, comment="Public id"),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("locale", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column(
            "translation_group_id",
            sa.String(length=36),
            nullable=True,
            comment="Shared id of linked translations",
        ),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
    )
    op.create_index("ix_content_entries_translation_group_id", "content_entries", ["translation_group_id"])
    op.create_index("ix_content_entries_collection_locale", "content_entries", ["collection_id", "locale"])
    op.create_index(
        "ix_content_entries_collection_deleted", "content_entries", ["collection_id", "deleted_at"]
    )

    op.create_table(
        "content_field_groups",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("field_id", sa.Integer(), nullable=False, comment="The group field"),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["entry_id"], ["content_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["field_id"], ["fields.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_content_field_groups_entry_id", "content_field_groups", ["entry_id"])

    op.create_table(
        "content_field_values",
        *_value_owner_columns(),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("text_value", sa.Text(), nullable=True),
        sa.Column("number_value", sa.Float(), nullable=True),
        sa.Column("boolean_value", sa.Boolean(), nullable=True),
        sa.Column("date_value", sa.Date(), nullable=True),
        sa.Column("date_value_end", sa.Date(), nullable=True),
        sa.Column("datetime_value", sa.DateTime(), nullable=True),
        sa.Column("datetime_value_end", sa.DateTime(), nullable=True),
        sa.Column("json_value", JSON_TYPE, nullable=True),
        *_value_owner_constraints(),
    )
    op.create_index("ix_content_field_values_entry_id", "content_field_values", ["entry_id"])
    op.create_index("ix_content_field_values_field_id", "content_field_values", ["field_id"])

    op.create_table(
        "content_relation_values",
        *_value_owner_columns(),
        sa.Column(
            "related_entry_id",
            sa.Integer(),
            nullable=False,
            comment="Entry of the relation's target collection",
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_value_owner_constraints(),
    )
    op.create_index("ix_content_relation_values_entry_id", "content_relation_values", ["entry_id"])
    op.create_index(
        "ix_content_relation_values_related_entry_id", "content_relation_values", ["related_entry_id"]
    )

    op.create_table(
        "content_media_values",
        *_value_owner_columns(),
        sa.Column("asset_id", sa.Integer(), nullable=False, comment="Asset identifier"),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_value_owner_constraints(),
    )
    op.create_index("ix_content_media_values_entry_id", "content_media_values", ["entry_id"])


def downgrade() -> None:
    """Drop content and schema tables."""
    for table in (
        "content_media_values",
        "content_relation_values",
        "content_field_values",
        "content_field_groups",
        "content_entries",
        "fields",
        "collections",
        "projects",
    ):
        op.drop_table(table)
