"""Field entity and schema organization for collection content.

A collection's schema is a flat list of fields. Group fields own child
fields through ``parent_field_id``; nesting is exactly one level deep.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Closed set of field types a collection schema may use."""

    TEXT = "text"
    LONGTEXT = "longtext"
    EMAIL = "email"
    SLUG = "slug"
    PASSWORD = "password"
    NUMBER = "number"
    ENUMERATION = "enumeration"
    BOOLEAN = "boolean"
    COLOR = "color"
    DATE = "date"
    TIME = "time"
    MEDIA = "media"
    RELATION = "relation"
    RICHTEXT = "richtext"
    JSON = "json"
    GROUP = "group"


# Media picker mode that always allows several assets
MEDIA_TYPE_MULTIPLE = 2

# Relation cardinality: 1 = single related entry, 2 = many
RELATION_TYPE_SINGLE = 1


@dataclass
class ValidationRule:
    """A toggleable rule such as ``required`` or ``unique``."""

    status: bool = False
    message: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ValidationRule":
        if isinstance(data, bool):
            return cls(status=data)
        if not isinstance(data, dict):
            return cls()
        return cls(status=bool(data.get("status", False)), message=data.get("message") or None)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "message": self.message}


@dataclass
class CharCountRule:
    """Character count constraint.

    Attributes:
        status: Whether the rule is enforced.
        type: One of ``Between``, ``Min`` or ``Max``.
        min: Lower bound (used by ``Between`` and ``Min``).
        max: Upper bound (used by ``Between`` and ``Max``).
        message: Optional custom error message.
    """

    status: bool = False
    type: str = "Between"
    min: int | None = None
    max: int | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "CharCountRule":
        if not isinstance(data, dict):
            return cls()
        return cls(
            status=bool(data.get("status", False)),
            type=data.get("type") or "Between",
            min=_to_int(data.get("min")),
            max=_to_int(data.get("max")),
            message=data.get("message") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "type": self.type,
            "min": self.min,
            "max": self.max,
            "message": self.message,
        }


@dataclass
class FieldValidations:
    """Validation metadata attached to a field."""

    required: ValidationRule = field(default_factory=ValidationRule)
    unique: ValidationRule = field(default_factory=ValidationRule)
    charcount: CharCountRule = field(default_factory=CharCountRule)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FieldValidations":
        data = data or {}
        return cls(
            required=ValidationRule.from_dict(data.get("required")),
            unique=ValidationRule.from_dict(data.get("unique")),
            charcount=CharCountRule.from_dict(data.get("charcount")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "required": self.required.to_dict(),
            "unique": self.unique.to_dict(),
            "charcount": self.charcount.to_dict(),
        }


@dataclass
class Field:
    """A typed schema node of a collection.

    Attributes:
        id: Stable identity of the field.
        name: Machine key, unique within the collection.
        label: Human readable label.
        type: Field type.
        order: Display and storage sequence.
        parent_field_id: Enclosing group field, if any.
        options: Type-specific configuration bag.
        validations: Required/unique/charcount rules.
        description: Optional help text.
        children: Child fields, populated by ``organize_fields`` for groups.
    """

    id: int
    name: str
    label: str
    type: FieldType
    order: int = 0
    parent_field_id: int | None = None
    options: dict[str, Any] = field(default_factory=dict)
    validations: FieldValidations = field(default_factory=FieldValidations)
    description: str | None = None
    children: list["Field"] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate and coerce field data after initialization."""
        if not self.name:
            raise ValueError("Field name is required")
        if not isinstance(self.type, FieldType):
            try:
                self.type = FieldType(self.type)
            except ValueError:
                raise ValueError(f"Unknown field type '{self.type}'") from None
        if self.options is None:
            self.options = {}
        if isinstance(self.validations, dict):
            self.validations = FieldValidations.from_dict(self.validations)
        if not self.label:
            self.label = self.name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Field":
        """Build a field from its API representation.

        Args:
            data: Field payload as returned by the collections endpoints.

        Returns:
            The field, with ``children`` built recursively when present.
        """
        return cls(
            id=data["id"],
            name=data["name"],
            label=data.get("label") or data["name"],
            type=data["type"],
            order=data.get("order") or 0,
            parent_field_id=data.get("parent_field_id"),
            options=dict(data.get("options") or {}),
            validations=FieldValidations.from_dict(data.get("validations")),
            description=data.get("description"),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "order": self.order,
            "parent_field_id": self.parent_field_id,
            "options": self.options,
            "validations": self.validations.to_dict(),
            "description": self.description,
            "children": [child.to_dict() for child in self.children],
        }

    @property
    def is_group(self) -> bool:
        return self.type is FieldType.GROUP

    @property
    def is_repeatable(self) -> bool:
        return bool(self.options.get("repeatable"))

    @property
    def wraps_repeatable_items(self) -> bool:
        """Whether values are stored as a list of ``{"value": ...}`` wrappers.

        Groups manage their own instance list and media keeps its id array,
        so neither is wrapped even when marked repeatable.
        """
        return self.is_repeatable and self.type not in (FieldType.GROUP, FieldType.MEDIA)

    @property
    def allows_multiple(self) -> bool:
        return bool(self.options.get("multiple"))

    @property
    def media_type(self) -> int | None:
        media = self.options.get("media")
        if isinstance(media, dict):
            return _to_int(media.get("type"))
        return None

    @property
    def slug_source(self) -> str | None:
        """Name of the field this slug field is derived from."""
        slug = self.options.get("slug")
        if isinstance(slug, dict):
            return slug.get("field") or None
        return None

    @property
    def is_date_range(self) -> bool:
        return self.options.get("mode") == "range"

    @property
    def include_time(self) -> bool:
        return bool(self.options.get("includeTime"))

    @property
    def relation_collection_id(self) -> int | None:
        relation = self.options.get("relation")
        if isinstance(relation, dict):
            return _to_int(relation.get("collection"))
        return None

    @property
    def is_single_relation(self) -> bool:
        relation = self.options.get("relation")
        return isinstance(relation, dict) and _to_int(relation.get("type")) == RELATION_TYPE_SINGLE

    @property
    def hide_in_content_list(self) -> bool:
        return bool(self.options.get("hideInContentList"))

    @property
    def enumeration_options(self) -> list[str]:
        enumeration = self.options.get("enumeration")
        if isinstance(enumeration, dict):
            values = enumeration.get("list") or []
            return [str(v) for v in values]
        return []


def organize_fields(fields: list[Field]) -> list[Field]:
    """Attach child fields to their groups.

    Top-level fields keep their relative input order. Each group's children
    are sorted by ``order`` (stable, so ties keep input order). A field whose
    parent is missing or is not a top-level group is returned as a top-level
    field at its input position instead of being dropped.

    The input list is not mutated; returned fields are copies.

    Args:
        fields: Flat list of a collection's fields.

    Returns:
        Top-level fields with ``children`` populated for groups.
    """
    groups = {
        f.id: f for f in fields if f.type is FieldType.GROUP and f.parent_field_id is None
    }

    children_by_parent: dict[int, list[Field]] = {}
    top_level: list[Field] = []
    for f in fields:
        if f.parent_field_id is not None and f.parent_field_id in groups:
            children_by_parent.setdefault(f.parent_field_id, []).append(replace(f, children=[]))
        else:
            top_level.append(f)

    organized: list[Field] = []
    for f in top_level:
        if f.id in groups:
            children = sorted(children_by_parent.get(f.id, []), key=lambda c: c.order)
            organized.append(replace(f, children=children))
        else:
            organized.append(replace(f, children=[]))
    return organized


def flatten_fields(fields: list[Field]) -> list[Field]:
    """Flatten an organized field tree back into parent-then-children order."""
    flat: list[Field] = []
    for f in fields:
        flat.append(f)
        flat.extend(f.children)
    return flat


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
