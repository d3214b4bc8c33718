"""Unit tests for EntryValidator."""

from contentbase.domain.entities import Field
from contentbase.domain.entities.field import organize_fields
from contentbase.domain.services.entry_validator import EntryValidator, errors_by_field


def _fields(*fields: Field) -> list[Field]:
    return organize_fields(list(fields))


def _errors(data, fields, **kwargs) -> dict[str, list[str]]:
    return errors_by_field(EntryValidator.validate(data, fields, **kwargs))


class TestRequired:
    """Tests for the required rule."""

    def test_missing_required_field(self):
        fields = _fields(
            Field(id=1, name="title", label="Title", type="text", validations={"required": {"status": True}})
        )

        errors = _errors({"title": "  "}, fields)

        assert errors == {"title": ["The Title field is required."]}

    def test_custom_message(self):
        fields = _fields(
            Field(
                id=1,
                name="title",
                label="Title",
                type="text",
                validations={"required": {"status": True, "message": "Give it a name"}},
            )
        )

        assert _errors({}, fields) == {"title": ["Give it a name"]}

    def test_repeatable_items_are_keyed_by_position(self):
        """Test that each repeatable item reports under name.index.value."""
        fields = _fields(
            Field(
                id=1,
                name="tags",
                label="Tags",
                type="text",
                options={"repeatable": True},
                validations={"required": {"status": True}},
            )
        )

        errors = _errors({"tags": [{"value": "a"}, {"value": ""}]}, fields)

        assert list(errors) == ["tags.1.value"]

    def test_group_children_are_keyed_by_instance(self):
        fields = _fields(
            Field(id=1, name="address", label="Address", type="group"),
            Field(
                id=2,
                name="street",
                label="Street",
                type="text",
                parent_field_id=1,
                validations={"required": {"status": True}},
            ),
        )

        errors = _errors({"address": [{"street": ""}]}, fields)

        assert errors == {"address.0.street": ["The Street field is required."]}

    def test_missing_non_repeatable_group_validates_one_empty_instance(self):
        fields = _fields(
            Field(id=1, name="address", label="Address", type="group"),
            Field(
                id=2,
                name="street",
                label="Street",
                type="text",
                parent_field_id=1,
                validations={"required": {"status": True}},
            ),
        )

        assert "address.0.street" in _errors({}, fields)


class TestTypeRules:
    """Tests for per-type checks."""

    def test_email(self):
        fields = _fields(Field(id=1, name="email", label="Email", type="email"))

        assert _errors({"email": "nope"}, fields) == {
            "email": ["The Email must be a valid email address."]
        }
        assert _errors({"email": "someone@example.com"}, fields) == {}

    def test_number(self):
        fields = _fields(Field(id=1, name="price", label="Price", type="number"))

        assert _errors({"price": "abc"}, fields) == {"price": ["The Price must be numeric."]}
        assert _errors({"price": "12.5"}, fields) == {}
        assert _errors({"price": True}, fields) == {"price": ["The Price must be numeric."]}

    def test_number_out_of_float_range(self):
        """Test that numbers a float column cannot hold are reported as invalid."""
        fields = _fields(Field(id=1, name="price", label="Price", type="number"))

        for value in (10**400, "1e400", "nan", "-inf"):
            assert _errors({"price": value}, fields) == {"price": ["The Price must be numeric."]}
        assert _errors({"price": 10**15}, fields) == {}

    def test_enumeration_must_use_configured_values(self):
        fields = _fields(
            Field(
                id=1,
                name="color",
                label="Color",
                type="enumeration",
                options={"enumeration": {"list": ["red", "blue"]}},
            )
        )

        assert _errors({"color": "red"}, fields) == {}
        assert "color" in _errors({"color": "green"}, fields)

    def test_date_range(self):
        fields = _fields(
            Field(id=1, name="period", label="Period", type="date", options={"mode": "range"})
        )

        assert _errors({"period": "2026-01-01 - 2026-01-31"}, fields) == {}
        assert "period" in _errors({"period": "2026-13-01"}, fields)

    def test_empty_optional_values_pass(self):
        fields = _fields(
            Field(id=1, name="email", label="Email", type="email"),
            Field(id=2, name="price", label="Price", type="number"),
        )

        assert _errors({"email": "", "price": None}, fields) == {}


class TestCharCount:
    def test_between(self):
        fields = _fields(
            Field(
                id=1,
                name="title",
                label="Title",
                type="text",
                validations={"charcount": {"status": True, "type": "Between", "min": 3, "max": 5}},
            )
        )

        assert _errors({"title": "ab"}, fields) == {"title": ["The Title must be between 3 and 5"]}
        assert _errors({"title": "abcd"}, fields) == {}

    def test_number_bounds_use_the_value(self):
        fields = _fields(
            Field(
                id=1,
                name="qty",
                label="Qty",
                type="number",
                validations={"charcount": {"status": True, "type": "Max", "max": 10}},
            )
        )

        assert _errors({"qty": 11}, fields) == {"qty": ["The Qty may not be greater than 10"]}


class TestEntryLevel:
    def test_locale_must_be_configured(self):
        errors = _errors({}, [], locale="it", allowed_locales=["en", "fr"])
        assert errors == {"locale": ["The selected locale is invalid for this project."]}

    def test_status_must_be_known(self):
        errors = _errors({}, [], status="archived")
        assert errors == {"status": ["The selected status is invalid."]}

    def test_data_must_be_an_object(self):
        errors = _errors(["not", "a", "dict"], [])
        assert errors == {"data": ["The data field must be an object."]}
