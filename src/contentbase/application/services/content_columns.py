"""Column definitions of a collection's content list."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contentbase.domain.entities import (
    TRASHED_FILTER,
    Collection,
    EntryStatus,
    Field,
    FieldType,
    Project,
)
from contentbase.domain.services.cell_renderer import (
    EMPTY_CELL,
    CellKind,
    RenderedCell,
    format_date_value,
    render_cell,
)

# Field types never shown as list columns
HIDDEN_COLUMN_TYPES = frozenset({FieldType.PASSWORD, FieldType.JSON})


class FilterType(str, Enum):
    TEXT = "text"
    SELECT = "select"
    DATE = "date"


@dataclass(frozen=True)
class FilterOption:
    value: str
    label: str


@dataclass(frozen=True)
class ColumnFilter:
    type: FilterType
    options: tuple[FilterOption, ...] = ()


@dataclass(frozen=True)
class Column:
    """One list column.

    Attributes:
        header: Column title.
        accessor_key: Row key (standard column) or field name.
        sortable: Whether clicking the header sorts.
        filter: Filter control, if the column is filterable.
        field: Schema field for field-value columns.
    """

    header: str
    accessor_key: str
    sortable: bool = True
    filter: ColumnFilter | None = None
    field: Field | None = field(default=None, compare=False)

    def render(self, row: dict[str, Any]) -> RenderedCell:
        """Render this column's cell for an entry row."""
        if self.field is not None:
            data = row.get("data") or {}
            return render_cell(self.field, data.get(self.accessor_key))

        value = row.get(self.accessor_key)
        if value in (None, ""):
            return EMPTY_CELL
        if self.filter is not None and self.filter.type is FilterType.DATE:
            text = format_date_value(value, include_time=True)
        else:
            text = str(value)
        return RenderedCell(kind=CellKind.TEXT, text=text, full_text=text)


def is_list_column(f: Field) -> bool:
    """Whether a top-level field is displayed in the content list."""
    return f.type not in HIDDEN_COLUMN_TYPES and not f.hide_in_content_list


def build_columns(project: Project, collection: Collection) -> list[Column]:
    """Columns for a collection: status, locale, fields, then timestamps."""
    status_options = (
        FilterOption(EntryStatus.DRAFT.value, "Draft"),
        FilterOption(EntryStatus.PUBLISHED.value, "Published"),
        FilterOption(TRASHED_FILTER, "Trashed"),
    )
    locale_options = tuple(FilterOption(locale, locale.upper()) for locale in project.locales)

    columns = [
        Column("Status", "status", filter=ColumnFilter(FilterType.SELECT, status_options)),
        Column("Locale", "locale", filter=ColumnFilter(FilterType.SELECT, locale_options)),
    ]
    # organized_fields only yields top-level fields, so group children are excluded
    for f in collection.organized_fields:
        if is_list_column(f):
            columns.append(Column(f.label, f.name, field=f))
    columns.extend(
        [
            Column("Created", "created_at", filter=ColumnFilter(FilterType.DATE)),
            Column("Updated", "updated_at", filter=ColumnFilter(FilterType.DATE)),
        ]
    )
    return columns
