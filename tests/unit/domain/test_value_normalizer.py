"""Unit tests for value normalization."""

from contentbase.domain.entities import Field
from contentbase.domain.entities.field import organize_fields
from contentbase.domain.services.value_normalizer import (
    coerce_media_change,
    defaults_for,
    normalize_for_edit,
    normalize_media_value,
    parse_enumeration,
    parse_id_list,
)


def _schema() -> list[Field]:
    return organize_fields(
        [
            Field(id=1, name="title", label="Title", type="text"),
            Field(id=2, name="cover", label="Cover", type="media"),
            Field(id=3, name="gallery", label="Gallery", type="media", options={"multiple": True}),
            Field(id=4, name="tags", label="Tags", type="text", options={"repeatable": True}),
            Field(id=5, name="address", label="Address", type="group"),
            Field(id=6, name="street", label="Street", type="text", parent_field_id=5),
            Field(id=7, name="photo", label="Photo", type="media", parent_field_id=5),
            Field(id=8, name="blocks", label="Blocks", type="group", options={"repeatable": True}),
            Field(id=9, name="heading", label="Heading", type="text", parent_field_id=8),
            Field(id=10, name="featured", label="Featured", type="boolean"),
            Field(id=11, name="related", label="Related", type="relation"),
            Field(id=12, name="meta", label="Meta", type="json"),
            Field(id=13, name="colors", label="Colors", type="enumeration", options={"multiple": True}),
        ]
    )


class TestMediaNormalization:
    """Tests for media values, which are always lists of ids."""

    def test_single_asset_object_becomes_list(self):
        field = Field(id=1, name="cover", label="Cover", type="media")
        assert normalize_media_value(field, {"id": 7}) == [7]

    def test_multiple_drops_missing_ids(self):
        field = Field(id=1, name="gallery", label="Gallery", type="media", options={"multiple": True})
        assert normalize_media_value(field, [{"id": 1}, {"id": 2}, None]) == [1, 2]

    def test_list_on_single_field_keeps_every_id(self):
        """Test that a stored list is not truncated on a single media field."""
        field = Field(id=1, name="cover", label="Cover", type="media")
        assert normalize_media_value(field, [{"id": 1}, {"id": 2}]) == [1, 2]

    def test_empty_values(self):
        field = Field(id=1, name="cover", label="Cover", type="media")
        assert normalize_media_value(field, None) == []
        assert normalize_media_value(field, {"name": "no id"}) == []

    def test_media_change_is_coerced_to_list(self):
        assert coerce_media_change(5) == [5]
        assert coerce_media_change(None) == []
        assert coerce_media_change([1, 2]) == [1, 2]


class TestDefaults:
    """Tests for defaults_for."""

    def test_every_field_has_a_value(self):
        """Test that new entry state has a key for every top-level field."""
        fields = _schema()
        state = defaults_for(fields)

        assert set(state) == {f.name for f in fields}
        assert state["title"] == ""
        assert state["cover"] == []
        assert state["tags"] == [{"value": None}]
        assert state["featured"] is False
        assert state["related"] == []
        assert state["meta"] is None
        assert state["colors"] == []

    def test_groups(self):
        """Test that a plain group holds one empty instance and a repeatable one none."""
        state = defaults_for(_schema())

        assert state["address"] == [{"street": "", "photo": []}]
        assert state["blocks"] == []


class TestNormalizeForEdit:
    """Tests for normalize_for_edit."""

    def test_none_yields_defaults(self):
        fields = _schema()
        assert normalize_for_edit(None, fields) == defaults_for(fields)

    def test_missing_fields_fall_back_to_defaults(self):
        state = normalize_for_edit({"title": "Hello"}, _schema())

        assert state["title"] == "Hello"
        assert state["cover"] == []
        assert state["tags"] == [{"value": None}]

    def test_unknown_keys_are_kept(self):
        state = normalize_for_edit({"title": "Hello", "legacy": 1}, _schema())
        assert state["legacy"] == 1

    def test_group_object_becomes_single_instance(self):
        """Test that a stored group object is read as a one-element list."""
        state = normalize_for_edit(
            {"address": {"street": "Main St", "photo": {"id": 4}}}, _schema()
        )
        assert state["address"] == [{"street": "Main St", "photo": [4]}]

    def test_non_repeatable_group_keeps_first_instance(self):
        state = normalize_for_edit(
            {"address": [{"street": "A", "photo": []}, {"street": "B", "photo": []}]}, _schema()
        )
        assert state["address"] == [{"street": "A", "photo": []}]

    def test_repeatable_group_round_trip(self):
        """Test that normalizing already-normalized state changes nothing."""
        raw = {"blocks": [{"heading": "One"}, {"heading": "Two"}]}
        once = normalize_for_edit(raw, _schema())
        twice = normalize_for_edit(once, _schema())

        assert once["blocks"] == [{"heading": "One"}, {"heading": "Two"}]
        assert twice == once

    def test_repeatable_scalars_are_wrapped(self):
        state = normalize_for_edit({"tags": ["a", {"value": "b"}]}, _schema())
        assert state["tags"] == [{"value": "a"}, {"value": "b"}]

    def test_boolean_and_relation(self):
        state = normalize_for_edit({"featured": "true", "related": "3,4"}, _schema())
        assert state["featured"] is True
        assert state["related"] == [3, 4]


class TestParsers:
    def test_parse_id_list_accepts_json_and_objects(self):
        assert parse_id_list("[1, 2]") == [1, 2]
        assert parse_id_list([{"id": 9}, 10]) == [9, 10]
        assert parse_id_list("") == []

    def test_parse_enumeration_tolerates_scalars(self):
        assert parse_enumeration('["red", "blue"]') == ["red", "blue"]
        assert parse_enumeration("red") == ["red"]
        assert parse_enumeration(None) == []
