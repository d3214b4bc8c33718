"""Entry validation service.

Validates submitted entry values against a collection's field schema.
Errors are keyed by a dotted path into the submitted ``data``:

- ``title`` for a plain field;
- ``tags.1.value`` for one item of a repeatable field;
- ``address.0.street`` for a child of a group instance.

Uniqueness needs storage access and is checked by the content service.
"""

import json
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, assert_never

from contentbase.domain.entities.field import Field, FieldType
from contentbase.domain.services.slug_generator import SlugGenerator


# Email validation pattern (simplified but effective)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Hex colours (#rgb, #rgba, #rrggbb, #rrggbbaa) and rgb()/rgba() notation
COLOR_PATTERN = re.compile(
    r"^(#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})"
    r"|rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*(,\s*(0|1|0?\.\d+)\s*)?\))$"
)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")

DATE_RANGE_SEPARATOR = " - "


@dataclass
class EntryValidationError:
    """A single entry validation error."""

    field: str
    message: str
    code: str


def is_empty(value: Any) -> bool:
    """Whether a value counts as missing for ``required``."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


class EntryValidator:
    """Validator for entry data against collection schemas.

    Checks required, type and character count rules per field, descending
    into repeatable wrappers and group instances.
    """

    @classmethod
    def validate_required(
        cls, field: Field, value: Any, key: str
    ) -> EntryValidationError | None:
        """Check the ``required`` rule for one (unwrapped) value."""
        if not field.validations.required.status or not is_empty(value):
            return None
        return EntryValidationError(
            field=key,
            message=field.validations.required.message
            or f"The {field.label} field is required.",
            code="required",
        )

    @classmethod
    def validate_type(cls, field: Field, value: Any, key: str) -> EntryValidationError | None:
        """Check that a non-empty value matches the field type.

        Empty values are always accepted here; ``required`` handles them.
        """
        if is_empty(value):
            return None

        match field.type:
            case FieldType.EMAIL:
                if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
                    return cls._error(key, f"The {field.label} must be a valid email address.", "email")
            case FieldType.NUMBER:
                if not _is_numeric(value):
                    return cls._error(key, f"The {field.label} must be numeric.", "numeric")
            case FieldType.COLOR:
                if not isinstance(value, str) or not COLOR_PATTERN.match(value.strip()):
                    return cls._error(key, f"The {field.label} must be a valid color.", "color")
            case FieldType.DATE:
                if not _is_valid_date(value, field.is_date_range):
                    return cls._error(key, f"The {field.label} is not a valid date.", "date")
            case FieldType.TIME:
                if not isinstance(value, str) or not TIME_PATTERN.match(value):
                    return cls._error(key, f"The {field.label} is not a valid time.", "time")
            case FieldType.SLUG:
                if not isinstance(value, str) or not SlugGenerator.is_valid(value):
                    return cls._error(
                        key,
                        f"The {field.label} may only contain lowercase letters, numbers and hyphens.",
                        "slug",
                    )
            case FieldType.ENUMERATION:
                allowed = field.enumeration_options
                values = value if isinstance(value, list) else [value]
                if allowed and any(str(v) not in allowed for v in values):
                    return cls._error(key, f"The selected {field.label} is invalid.", "enumeration")
            case FieldType.JSON:
                if isinstance(value, str):
                    try:
                        json.loads(value)
                    except ValueError:
                        return cls._error(key, f"The {field.label} must be valid JSON.", "json")
            case FieldType.MEDIA | FieldType.RELATION:
                if not isinstance(value, (list, int, str)):
                    return cls._error(key, f"The {field.label} must be a list of ids.", "invalid_type")
            case FieldType.GROUP:
                if not isinstance(value, (list, dict)):
                    return cls._error(key, f"The {field.label} must be a list of groups.", "invalid_type")
            case (
                FieldType.TEXT
                | FieldType.LONGTEXT
                | FieldType.PASSWORD
                | FieldType.BOOLEAN
                | FieldType.RICHTEXT
            ):
                return None
            case _:
                assert_never(field.type)
        return None

    @classmethod
    def validate_charcount(
        cls, field: Field, value: Any, key: str
    ) -> EntryValidationError | None:
        """Check the character count rule (numeric bounds for number fields)."""
        rule = field.validations.charcount
        if not rule.status or is_empty(value):
            return None

        if field.type is FieldType.NUMBER:
            if not _is_numeric(value):
                return None
            size: float = float(value)
        else:
            size = len(value if isinstance(value, str) else str(value))

        too_small = rule.min is not None and size < rule.min
        too_large = rule.max is not None and size > rule.max

        if rule.type == "Between" and (too_small or too_large):
            message = f"The {field.label} must be between {rule.min} and {rule.max}"
            code = "between"
        elif rule.type == "Min" and too_small:
            message = f"The {field.label} must be at least {rule.min}"
            code = "min"
        elif rule.type == "Max" and too_large:
            message = f"The {field.label} may not be greater than {rule.max}"
            code = "max"
        else:
            return None
        return cls._error(key, rule.message or message, code)

    @classmethod
    def validate_value(cls, field: Field, value: Any, key: str) -> list[EntryValidationError]:
        """Run required, type and charcount rules on one unwrapped value."""
        required_error = cls.validate_required(field, value, key)
        if required_error:
            return [required_error]
        errors = [cls.validate_type(field, value, key), cls.validate_charcount(field, value, key)]
        return [e for e in errors if e is not None]

    @classmethod
    def validate_field(cls, field: Field, value: Any) -> list[EntryValidationError]:
        """Validate the submitted value of one top-level field."""
        if field.type is FieldType.GROUP:
            return cls._validate_group(field, value)

        if field.wraps_repeatable_items:
            return cls._validate_repeatable(field, value)

        return cls.validate_value(field, value, field.name)

    @classmethod
    def validate(
        cls,
        data: dict[str, Any],
        fields: list[Field],
        locale: str | None = None,
        allowed_locales: list[str] | None = None,
        status: str | None = None,
    ) -> list[EntryValidationError]:
        """Validate submitted entry data.

        Args:
            data: Submitted values keyed by field name.
            fields: Organized fields of the collection.
            locale: Submitted locale, checked against ``allowed_locales``.
            allowed_locales: The project's configured locales.
            status: Submitted status, if any.

        Returns:
            List of validation errors. Empty list if the data is valid.
        """
        errors: list[EntryValidationError] = []

        if not isinstance(data, dict):
            return [cls._error("data", "The data field must be an object.", "invalid_type")]

        for f in fields:
            errors.extend(cls.validate_field(f, data.get(f.name)))

        if allowed_locales is not None:
            if not locale:
                errors.append(cls._error("locale", "The locale field is required.", "required"))
            elif locale not in allowed_locales:
                errors.append(
                    cls._error("locale", "The selected locale is invalid for this project.", "locale")
                )

        if status is not None and status not in ("draft", "published"):
            errors.append(cls._error("status", "The selected status is invalid.", "status"))

        return errors

    @classmethod
    def _validate_repeatable(cls, field: Field, value: Any) -> list[EntryValidationError]:
        items = value if isinstance(value, list) else ([] if value is None else [value])

        if not items:
            required_error = cls.validate_required(field, None, field.name)
            return [required_error] if required_error else []

        errors: list[EntryValidationError] = []
        for index, item in enumerate(items):
            item_value = item.get("value") if isinstance(item, dict) else item
            errors.extend(cls.validate_value(field, item_value, f"{field.name}.{index}.value"))
        return errors

    @classmethod
    def _validate_group(cls, field: Field, value: Any) -> list[EntryValidationError]:
        type_error = cls.validate_type(field, value, field.name)
        if type_error:
            return [type_error]

        if isinstance(value, dict):
            instances = [value]
        else:
            instances = value or []

        if not field.is_repeatable:
            # A non-repeatable group is validated as its single instance
            instances = instances[:1] or [{}]

        errors: list[EntryValidationError] = []
        for index, instance in enumerate(instances):
            if not isinstance(instance, dict):
                errors.append(
                    cls._error(f"{field.name}.{index}", f"The {field.label} entry is invalid.", "invalid_type")
                )
                continue
            for child in field.children:
                key = f"{field.name}.{index}.{child.name}"
                errors.extend(cls.validate_value(child, instance.get(child.name), key))
        return errors

    @staticmethod
    def _error(key: str, message: str, code: str) -> EntryValidationError:
        return EntryValidationError(field=key, message=message, code=code)


def errors_by_field(errors: list[EntryValidationError]) -> dict[str, list[str]]:
    """Group error messages by field path, preserving order."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(error.field, []).append(error.message)
    return grouped


def _is_numeric(value: Any) -> bool:
    """Whether a value is a finite number that fits a float column."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return False
    try:
        return math.isfinite(float(value))
    except (ValueError, OverflowError):
        return False


def _parse_date(text: str) -> bool:
    text = text.strip()
    for parser in (date.fromisoformat, datetime.fromisoformat):
        try:
            parser(text.replace("Z", "+00:00"))
            return True
        except ValueError:
            continue
    return False


def _is_valid_date(value: Any, is_range: bool) -> bool:
    if not isinstance(value, str):
        return False
    if is_range:
        parts = value.split(DATE_RANGE_SEPARATOR)
        return len(parts) == 2 and all(_parse_date(part) for part in parts)
    return _parse_date(value)
