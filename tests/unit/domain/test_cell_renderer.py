"""Unit tests for content list cell rendering."""

from datetime import date

from contentbase.domain.entities import Field
from contentbase.domain.entities.field import organize_fields
from contentbase.domain.services.cell_renderer import (
    EMPTY_CELL,
    CellKind,
    format_date_value,
    render_cell,
    richtext_plain_text,
    truncate,
)


class TestRenderCell:
    """Tests for render_cell."""

    def test_empty_values(self):
        field = Field(id=1, name="title", label="Title", type="text")
        assert render_cell(field, None) is EMPTY_CELL
        assert render_cell(field, "") is EMPTY_CELL

    def test_long_text_is_truncated(self):
        field = Field(id=1, name="title", label="Title", type="text")
        text = "x" * 40

        cell = render_cell(field, text)

        assert cell.text == "x" * 30 + "..."
        assert cell.full_text == text

    def test_boolean(self):
        field = Field(id=1, name="featured", label="Featured", type="boolean")
        assert render_cell(field, True).text == "Yes"
        assert render_cell(field, False).text == "No"
        assert render_cell(field, False).kind is CellKind.BOOLEAN

    def test_repeatable_shows_first_and_count(self):
        field = Field(id=1, name="tags", label="Tags", type="text", options={"repeatable": True})

        cell = render_cell(field, [{"value": "a"}, {"value": "b"}, {"value": "c"}])

        assert cell.text == "a (+2 more)"
        assert cell.items == ("a", "b", "c")

    def test_repeatable_without_values_is_empty(self):
        field = Field(id=1, name="tags", label="Tags", type="text", options={"repeatable": True})
        assert render_cell(field, [{"value": None}]) is EMPTY_CELL

    def test_media_thumbnails(self):
        field = Field(id=1, name="gallery", label="Gallery", type="media")

        cell = render_cell(field, [{"id": 1, "thumbnail_url": "/t/1.jpg"}, 2])

        assert cell.kind is CellKind.THUMBNAILS
        assert cell.count == 2
        assert cell.items[0].url == "/t/1.jpg"
        assert cell.items[1].url is None

    def test_relation_counts_ids(self):
        field = Field(id=1, name="related", label="Related", type="relation")

        cell = render_cell(field, [3, 4])

        assert cell.kind is CellKind.RELATION
        assert cell.count == 2
        assert cell.items == (3, 4)

    def test_group_previews_first_child_value(self):
        fields = organize_fields(
            [
                Field(id=1, name="blocks", label="Blocks", type="group", options={"repeatable": True}),
                Field(id=2, name="heading", label="Heading", type="text", parent_field_id=1),
            ]
        )

        cell = render_cell(fields[0], [{"heading": "Intro"}, {"heading": "Outro"}])

        assert cell.kind is CellKind.GROUP
        assert cell.text == "Intro (+1 more)"
        assert cell.count == 2

    def test_number_formatting(self):
        field = Field(id=1, name="price", label="Price", type="number")
        assert render_cell(field, 12.0).text == "12"
        assert render_cell(field, "3.5").text == "3.5"

    def test_password_is_masked(self):
        field = Field(id=1, name="secret", label="Secret", type="password")
        assert render_cell(field, "hunter2").text == "********"


class TestFormatting:
    def test_date_range(self):
        assert format_date_value("2026-01-01 - 2026-01-31", is_range=True) == "2026-01-01 / 2026-01-31"

    def test_datetime(self):
        assert format_date_value("2026-05-06T07:08:09", include_time=True) == "2026-05-06 07:08"

    def test_date_object(self):
        assert format_date_value(date(2026, 2, 3)) == "2026-02-03"

    def test_unparseable_is_shown_as_given(self):
        assert format_date_value("someday") == "someday"

    def test_richtext_html(self):
        assert richtext_plain_text("<p>Hello <b>world</b> &amp; more</p>") == "Hello world & more"

    def test_richtext_document(self):
        document = {"root": {"children": [{"children": [{"text": "Hello"}, {"text": "there"}]}]}}
        assert richtext_plain_text({"json": document}) == "Hello there"

    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("abcdef", limit=3) == "abc..."
