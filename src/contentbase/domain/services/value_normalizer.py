"""Value normalization between API payloads and editable form state.

Canonical in-memory shapes:

- media values are always a list of asset ids, even for single media
  fields (length 0 or 1);
- relation values are an ordered list of entry ids;
- repeatable (non-group, non-media) values are a list of ``{"value": ...}``
  wrappers;
- groups are a list of instance dicts; non-repeatable groups hold exactly
  one instance;
- booleans are ``True``/``False`` and json values default to ``None``.

Every function here is pure and never raises on malformed input.
"""

import json
from typing import Any, assert_never

from contentbase.domain.entities.field import MEDIA_TYPE_MULTIPLE, Field, FieldType


def extract_id(value: Any) -> Any:
    """Pull an identifier off an asset/entry object or return the scalar."""
    if isinstance(value, dict):
        return value.get("id")
    return value


def media_allows_multiple(field: Field, raw: Any = None) -> bool:
    """Whether a media field holds several assets.

    A raw value that is already a list is treated as multiple so no
    stored asset is silently dropped.
    """
    return (
        field.allows_multiple
        or field.media_type == MEDIA_TYPE_MULTIPLE
        or isinstance(raw, list)
    )


def normalize_media_value(field: Field, raw: Any) -> list[Any]:
    """Normalize a media value to a list of asset ids.

    Args:
        field: The media field.
        raw: Asset objects, ids, a list of either, or ``None``.

    Returns:
        List of ids; at most one id for single media fields.

    Examples:
        >>> single = Field(id=1, name="cover", label="Cover", type="media")
        >>> normalize_media_value(single, {"id": 7})
        [7]
    """
    if media_allows_multiple(field, raw):
        if not isinstance(raw, list):
            return []
        return [item_id for item_id in (extract_id(item) for item in raw) if item_id is not None]

    item_id = extract_id(raw)
    return [item_id] if item_id is not None else []


def parse_id_list(raw: Any) -> list[Any]:
    """Parse relation ids from a list, JSON string or comma separated string."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [item_id for item_id in map(extract_id, raw) if item_id is not None]
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [item for item in parsed if item is not None]
        return [_coerce_id(part.strip()) for part in text.split(",") if part.strip()]
    return [extract_id(raw)]


def parse_enumeration(raw: Any) -> list[str]:
    """Tolerant parse of an enumeration payload into a list of strings."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw if item is not None]
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return [raw]
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item is not None]
        return [str(parsed)]
    return [str(raw)]


def empty_value(field: Field) -> Any:
    """Empty value of a single, unwrapped item of ``field``.

    This is the value a group child starts with and the value stored in
    each repeatable wrapper. Groups never appear as children, but an empty
    instance list keeps the function total.
    """
    match field.type:
        case FieldType.BOOLEAN:
            return False
        case FieldType.ENUMERATION:
            return [] if field.allows_multiple else ""
        case FieldType.MEDIA | FieldType.RELATION | FieldType.GROUP:
            return []
        case FieldType.JSON:
            return None
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.PASSWORD
            | FieldType.NUMBER
            | FieldType.COLOR
            | FieldType.DATE
            | FieldType.TIME
            | FieldType.RICHTEXT
        ):
            return ""
        case _:
            assert_never(field.type)


def default_instance(group: Field) -> dict[str, Any]:
    """A group instance with every child at its empty value."""
    return {child.name: empty_value(child) for child in group.children}


def default_value(field: Field) -> Any:
    """Default form value for a top-level field of a new entry."""
    if field.type is FieldType.GROUP:
        return [] if field.is_repeatable else [default_instance(field)]
    if field.wraps_repeatable_items:
        return [{"value": None}]
    return empty_value(field)


def defaults_for(fields: list[Field]) -> dict[str, Any]:
    """Form state for a brand new entry.

    Args:
        fields: Organized (top-level, children attached) fields.

    Returns:
        A value for every field; never a missing key.
    """
    return {f.name: default_value(f) for f in fields}


def _normalize_instance(group: Field, instance: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(instance)
    for child in group.children:
        if child.type is FieldType.MEDIA and child.name in instance:
            normalized[child.name] = normalize_media_value(child, instance[child.name])
    return normalized


def _normalize_group(field: Field, raw: Any) -> list[dict[str, Any]]:
    if isinstance(raw, dict):
        instances = [raw]
    elif isinstance(raw, list):
        instances = [item for item in raw if isinstance(item, dict)]
    else:
        instances = []

    normalized = [_normalize_instance(field, instance) for instance in instances]
    if field.is_repeatable:
        return normalized
    # Non-repeatable groups always hold exactly one instance
    return normalized[:1] or [default_instance(field)]


def _normalize_repeatable(raw: Any) -> list[dict[str, Any]]:
    if raw is None:
        return [{"value": None}]
    items = raw if isinstance(raw, list) else [raw]
    return [item if isinstance(item, dict) and "value" in item else {"value": item} for item in items]


def normalize_value(field: Field, raw: Any) -> Any:
    """Normalize one raw value for editing.

    Args:
        field: Organized field (groups carry their children).
        raw: Value as returned by the API.

    Returns:
        The canonical in-memory value.
    """
    if field.wraps_repeatable_items:
        return _normalize_repeatable(raw)

    match field.type:
        case FieldType.MEDIA:
            return normalize_media_value(field, raw)
        case FieldType.GROUP:
            return _normalize_group(field, raw)
        case FieldType.RELATION:
            return parse_id_list(raw)
        case FieldType.BOOLEAN:
            return _to_bool(raw)
        case FieldType.ENUMERATION:
            if field.allows_multiple:
                return parse_enumeration(raw)
            return empty_value(field) if raw is None else raw
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.PASSWORD
            | FieldType.NUMBER
            | FieldType.COLOR
            | FieldType.DATE
            | FieldType.TIME
            | FieldType.RICHTEXT
            | FieldType.JSON
        ):
            return raw
        case _:
            assert_never(field.type)


def normalize_for_edit(raw_values: dict[str, Any] | None, fields: list[Field]) -> dict[str, Any]:
    """Convert an entry's API values into editable form state.

    Keys of ``raw_values`` that do not belong to a field are kept untouched.
    Fields with no raw value fall back to ``default_value``.

    Args:
        raw_values: Values keyed by field name, or ``None`` for a new entry.
        fields: Organized fields.

    Returns:
        Form state keyed by field name.
    """
    if not isinstance(raw_values, dict) or not raw_values:
        return defaults_for(fields)

    state: dict[str, Any] = dict(raw_values)
    for f in fields:
        if f.name not in raw_values:
            state[f.name] = default_value(f)
        else:
            state[f.name] = normalize_value(f, raw_values[f.name])
    return state


def coerce_media_change(value: Any) -> list[Any]:
    """Coerce a media edit to a list: wrap scalars, empty list for falsy."""
    if isinstance(value, list):
        return value
    if not value:
        return []
    return [value]


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return bool(raw)


def _coerce_id(text: str) -> Any:
    return int(text) if text.isdigit() else text
