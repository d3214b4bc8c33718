"""Unit tests for typed entry value storage."""

from datetime import date, datetime
from uuid import uuid4

import pytest
from sqlalchemy import select

from contentbase.domain.entities import Field
from contentbase.infrastructure.persistence.entry_value_store import (
    EntryValueStore,
    to_columns,
    value_column,
)
from contentbase.infrastructure.persistence.models import ContentEntryModel, ContentFieldValueModel
from contentbase.infrastructure.security import is_password_hash, verify_password


async def _entry(db_session, project, collection) -> ContentEntryModel:
    entry = ContentEntryModel(
        uuid=str(uuid4()),
        project_id=project.id,
        collection_id=collection.id,
        locale="en",
        status="draft",
    )
    db_session.add(entry)
    await db_session.flush()
    return entry


class TestColumns:
    """Tests for the typed column mapping."""

    def test_value_columns(self):
        assert value_column(Field(id=1, name="t", label="T", type="text")) == "text_value"
        assert value_column(Field(id=1, name="n", label="N", type="number")) == "number_value"
        assert value_column(Field(id=1, name="d", label="D", type="date")) == "date_value"
        assert (
            value_column(Field(id=1, name="d", label="D", type="date", options={"includeTime": True}))
            == "datetime_value"
        )
        assert value_column(Field(id=1, name="j", label="J", type="json")) is None

    def test_date_range_columns(self):
        field = Field(id=1, name="period", label="Period", type="date", options={"mode": "range"})

        columns = to_columns(field, "2026-01-01 - 2026-01-31")

        assert columns == {"date_value": date(2026, 1, 1), "date_value_end": date(2026, 1, 31)}

    def test_timezone_is_normalized_to_utc(self):
        field = Field(id=1, name="at", label="At", type="date", options={"includeTime": True})

        columns = to_columns(field, "2026-01-01T10:00:00+02:00")

        assert columns["datetime_value"] == datetime(2026, 1, 1, 8, 0)

    def test_group_values_are_not_scalars(self):
        with pytest.raises(ValueError):
            to_columns(Field(id=1, name="g", label="G", type="group"), [])

    def test_invalid_number(self):
        with pytest.raises(ValueError):
            to_columns(Field(id=1, name="n", label="N", type="number"), "abc")


class TestEntryValueStore:
    """Tests for writing and reading entry values."""

    async def test_round_trip(self, db_session, post_schema):
        project, collection = post_schema
        fields = collection.organized_fields
        entry = await _entry(db_session, project, collection)
        store = EntryValueStore(db_session)

        await store.write(
            entry.id,
            fields,
            {
                "title": "Hello",
                "views": "12",
                "cover": [{"id": 7}],
                "tags": [{"value": "a"}, {"value": "b"}],
                "related": [3, 1],
                "address": [{"street": "Main St"}],
            },
        )
        data = (await store.read([entry.id], fields))[entry.id]

        assert data["title"] == "Hello"
        assert data["views"] == 12
        assert data["cover"] == [{"id": 7}]
        assert data["tags"] == [{"value": "a"}, {"value": "b"}]
        assert data["related"] == [3, 1]
        assert data["address"] == [{"street": "Main St", "pin": ""}]
        assert data["code"] == ""

    async def test_missing_group_reads_as_one_empty_instance(self, db_session, post_schema):
        project, collection = post_schema
        entry = await _entry(db_session, project, collection)
        store = EntryValueStore(db_session)

        await store.write(entry.id, collection.organized_fields, {"title": "x"})
        data = (await store.read([entry.id], collection.organized_fields))[entry.id]

        assert data["address"] == [{"street": "", "pin": ""}]
        assert data["tags"] == []

    async def test_passwords_are_hashed_and_kept(self, db_session, post_schema):
        """Test that an empty password keeps the stored hash, top level and in groups."""
        project, collection = post_schema
        fields = collection.organized_fields
        entry = await _entry(db_session, project, collection)
        store = EntryValueStore(db_session)

        await store.write(entry.id, fields, {"secret": "s3cret", "address": [{"pin": "1234"}]})
        await store.write(entry.id, fields, {"secret": "", "address": [{"pin": ""}]})

        rows = (
            await db_session.execute(
                select(ContentFieldValueModel).where(ContentFieldValueModel.entry_id == entry.id)
            )
        ).scalars().all()
        hashes = [row.text_value for row in rows]
        assert len(hashes) == 2
        assert all(is_password_hash(h) for h in hashes)
        assert any(verify_password("s3cret", h) for h in hashes)
        assert any(verify_password("1234", h) for h in hashes)

        data = (await store.read([entry.id], fields))[entry.id]
        assert data["secret"] == ""

    async def test_copy_duplicates_every_value(self, db_session, post_schema):
        project, collection = post_schema
        fields = collection.organized_fields
        source = await _entry(db_session, project, collection)
        target = await _entry(db_session, project, collection)
        store = EntryValueStore(db_session)
        values = {"title": "Copy me", "tags": [{"value": "x"}], "address": [{"street": "Elm"}]}

        await store.write(source.id, fields, values)
        await store.copy(source.id, target.id)
        data = await store.read([source.id, target.id], fields)

        assert data[target.id] == data[source.id]

    async def test_clear(self, db_session, post_schema):
        project, collection = post_schema
        entry = await _entry(db_session, project, collection)
        store = EntryValueStore(db_session)

        await store.write(entry.id, collection.organized_fields, {"title": "Gone"})
        await store.clear(entry.id)
        data = (await store.read([entry.id], collection.organized_fields))[entry.id]

        assert data["title"] == ""
