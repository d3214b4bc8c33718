"""Domain services for ContentBase.

Services contain content logic that doesn't naturally fit within a single
entity. They are synchronous and have no dependencies on infrastructure.
"""

from contentbase.domain.services.cell_renderer import (
    CellKind,
    RenderedCell,
    Thumbnail,
    format_date_value,
    render_cell,
    richtext_plain_text,
)
from contentbase.domain.services.entry_validator import (
    EntryValidationError,
    EntryValidator,
    errors_by_field,
    is_empty,
)
from contentbase.domain.services.slug_generator import (
    SlugGenerator,
    SlugValidationError,
)
from contentbase.domain.services.table_settings import (
    DateRange,
    SettingsEnvelope,
    TableSettings,
    decode_settings,
    encode_settings,
    migrate_settings,
)
from contentbase.domain.services.value_normalizer import (
    coerce_media_change,
    default_value,
    defaults_for,
    extract_id,
    normalize_for_edit,
    normalize_media_value,
    normalize_value,
    parse_enumeration,
    parse_id_list,
)

__all__ = [
    "CellKind",
    "DateRange",
    "EntryValidationError",
    "EntryValidator",
    "RenderedCell",
    "SettingsEnvelope",
    "SlugGenerator",
    "SlugValidationError",
    "TableSettings",
    "Thumbnail",
    "coerce_media_change",
    "decode_settings",
    "default_value",
    "defaults_for",
    "encode_settings",
    "errors_by_field",
    "extract_id",
    "format_date_value",
    "is_empty",
    "migrate_settings",
    "normalize_for_edit",
    "normalize_media_value",
    "normalize_value",
    "parse_enumeration",
    "parse_id_list",
    "render_cell",
    "richtext_plain_text",
]
