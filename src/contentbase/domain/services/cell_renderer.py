"""Content list cell rendering.

Turns one entry value into a display model for a table cell. The model is
presentation-neutral: a UI layer decides how a thumbnail strip or a
relation badge looks.
"""

import html
import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, assert_never

from contentbase.domain.entities.field import Field, FieldType
from contentbase.domain.services.value_normalizer import parse_enumeration, parse_id_list

EMPTY_TEXT = "-"
TRUNCATE_AT = 30
DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"
RANGE_SEPARATOR = " - "
RANGE_JOINER = " / "

_TAG_PATTERN = re.compile(r"<[^>]+>")


class CellKind(str, Enum):
    """How a rendered cell should be presented."""

    EMPTY = "empty"
    TEXT = "text"
    BOOLEAN = "boolean"
    THUMBNAILS = "thumbnails"
    RELATION = "relation"
    GROUP = "group"
    RICHTEXT = "richtext"


@dataclass(frozen=True)
class Thumbnail:
    """One media item in a thumbnail strip; ``url`` is None for non-images."""

    id: Any
    url: str | None = None


@dataclass(frozen=True)
class RenderedCell:
    """Display model of one table cell.

    Attributes:
        kind: Presentation kind.
        text: Short text shown in the cell.
        full_text: Untruncated text, for tooltips and detail views.
        items: Thumbnails, related ids or the full list of repeatable values.
        count: Number of related entries or group instances.
    """

    kind: CellKind
    text: str = EMPTY_TEXT
    full_text: str | None = None
    items: tuple[Any, ...] = field(default_factory=tuple)
    count: int = 0


EMPTY_CELL = RenderedCell(kind=CellKind.EMPTY)


def truncate(text: str, limit: int = TRUNCATE_AT) -> str:
    return f"{text[:limit]}..." if len(text) > limit else text


def format_date_value(value: Any, include_time: bool = False, is_range: bool = False) -> str:
    """Format a stored date (or ``"start - end"`` range) for display.

    Unparseable parts are shown as given.
    """
    fmt = DATETIME_FORMAT if include_time else DATE_FORMAT
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)

    text = str(value)
    parts = text.split(RANGE_SEPARATOR) if is_range else [text]
    return RANGE_JOINER.join(_format_date_part(part.strip(), fmt) for part in parts)


def richtext_plain_text(value: Any) -> str:
    """Plain-text preview of a rich-text value.

    Accepts HTML, a serialized editor document (JSON string or dict) or a
    ``{"json": ..., "html": ...}`` pair.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        if value.get("html"):
            return richtext_plain_text(value["html"])
        if "json" in value:
            return richtext_plain_text(value["json"])
        return " ".join(_collect_text(value)).strip()
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("{"):
            try:
                document = json.loads(stripped)
            except ValueError:
                document = None
            if isinstance(document, dict):
                return " ".join(_collect_text(document)).strip()
        text = html.unescape(_TAG_PATTERN.sub(" ", value))
        return " ".join(text.split())
    return str(value)


def scalar_text(field: Field, value: Any) -> str:
    """Text of one scalar value of ``field`` (no truncation)."""
    match field.type:
        case FieldType.DATE:
            return format_date_value(value, field.include_time, field.is_date_range)
        case FieldType.BOOLEAN:
            return "Yes" if value else "No"
        case FieldType.NUMBER:
            return _format_number(value)
        case FieldType.ENUMERATION:
            return ", ".join(parse_enumeration(value))
        case FieldType.RICHTEXT:
            return richtext_plain_text(value)
        case (
            FieldType.TEXT
            | FieldType.LONGTEXT
            | FieldType.EMAIL
            | FieldType.SLUG
            | FieldType.PASSWORD
            | FieldType.COLOR
            | FieldType.TIME
            | FieldType.JSON
            | FieldType.MEDIA
            | FieldType.RELATION
            | FieldType.GROUP
        ):
            return value if isinstance(value, str) else json.dumps(value, default=str)
        case _:
            assert_never(field.type)


def render_cell(field: Field, value: Any) -> RenderedCell:
    """Render one entry value for the content list.

    Args:
        field: Organized field (groups carry their children).
        value: Value of the entry for ``field``.

    Returns:
        The cell display model.
    """
    if value is None or value == "":
        return EMPTY_CELL

    if field.wraps_repeatable_items:
        return _render_repeatable(field, value)

    match field.type:
        case FieldType.TEXT | FieldType.LONGTEXT:
            text = str(value)
            return RenderedCell(kind=CellKind.TEXT, text=truncate(text), full_text=text)
        case FieldType.EMAIL | FieldType.SLUG | FieldType.COLOR | FieldType.TIME:
            return RenderedCell(kind=CellKind.TEXT, text=str(value))
        case FieldType.RICHTEXT:
            plain = richtext_plain_text(value)
            if not plain:
                return EMPTY_CELL
            return RenderedCell(kind=CellKind.RICHTEXT, text=truncate(plain), full_text=plain)
        case FieldType.DATE:
            return RenderedCell(
                kind=CellKind.TEXT,
                text=format_date_value(value, field.include_time, field.is_date_range),
            )
        case FieldType.BOOLEAN:
            return RenderedCell(kind=CellKind.BOOLEAN, text="Yes" if value else "No")
        case FieldType.ENUMERATION:
            return RenderedCell(kind=CellKind.TEXT, text=scalar_text(field, value))
        case FieldType.NUMBER:
            return RenderedCell(kind=CellKind.TEXT, text=_format_number(value))
        case FieldType.MEDIA:
            return _render_media(value)
        case FieldType.RELATION:
            ids = parse_id_list(value)
            if not ids:
                return EMPTY_CELL
            return RenderedCell(
                kind=CellKind.RELATION, text=str(len(ids)), items=tuple(ids), count=len(ids)
            )
        case FieldType.GROUP:
            return _render_group(field, value)
        case FieldType.PASSWORD | FieldType.JSON:
            # Hidden from the list by default; shown masked/serialized if forced
            text = "********" if field.type is FieldType.PASSWORD else json.dumps(value, default=str)
            return RenderedCell(kind=CellKind.TEXT, text=truncate(text), full_text=text)
        case _:
            assert_never(field.type)


def _render_repeatable(field: Field, value: Any) -> RenderedCell:
    items = value if isinstance(value, list) else [value]
    values = [item.get("value") if isinstance(item, dict) and "value" in item else item for item in items]
    values = [v for v in values if v is not None and v != ""]
    if not values:
        return EMPTY_CELL

    texts = tuple(scalar_text(field, v) for v in values)
    label = texts[0]
    if len(texts) > 1:
        label = f"{label} (+{len(texts) - 1} more)"
    return RenderedCell(kind=CellKind.TEXT, text=label, full_text=", ".join(texts), items=texts)


def _render_media(value: Any) -> RenderedCell:
    if not isinstance(value, list) or not value:
        return EMPTY_CELL
    thumbnails = []
    for asset in value:
        if isinstance(asset, dict):
            thumbnails.append(Thumbnail(id=asset.get("id"), url=asset.get("thumbnail_url")))
        elif asset is not None:
            thumbnails.append(Thumbnail(id=asset))
    if not thumbnails:
        return EMPTY_CELL
    return RenderedCell(
        kind=CellKind.THUMBNAILS, text=str(len(thumbnails)), items=tuple(thumbnails), count=len(thumbnails)
    )


def _render_group(field: Field, value: Any) -> RenderedCell:
    instances = value if isinstance(value, list) else [value]
    instances = [i for i in instances if isinstance(i, dict)]
    if not instances:
        return EMPTY_CELL

    preview = ""
    first = instances[0]
    for child in field.children:
        child_value = first.get(child.name)
        if child_value not in (None, "", []):
            preview = truncate(scalar_text(child, child_value))
            break

    text = preview or str(len(instances))
    if preview and len(instances) > 1:
        text = f"{preview} (+{len(instances) - 1} more)"
    return RenderedCell(kind=CellKind.GROUP, text=text, items=tuple(instances), count=len(instances))


def _format_number(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return str(int(number)) if number.is_integer() else str(number)


def _format_date_part(text: str, fmt: str) -> str:
    if not text:
        return text
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime(fmt)
    except ValueError:
        return text


def _collect_text(node: Any) -> list[str]:
    if isinstance(node, list):
        return [text for child in node for text in _collect_text(child)]
    if not isinstance(node, dict):
        return []
    parts = [node["text"]] if isinstance(node.get("text"), str) else []
    if isinstance(node.get("root"), dict):
        parts.extend(_collect_text(node["root"]))
    parts.extend(_collect_text(node.get("children") or []))
    return parts
