"""Content list settings and their persisted encoding.

Settings are stored as a versioned envelope ``{"version": N, "payload": {...}}``.
Two legacy, unversioned shapes are still accepted when loading:

- the settings object stored as plain JSON;
- the same JSON, URI-component encoded and then base64 encoded.

``decode_settings`` runs once per load and migrates whatever it finds into
the current ``TableSettings`` model.
"""

import base64
import binascii
import json
from datetime import date, datetime
from typing import Any, Literal
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contentbase.core.logging import get_logger

logger = get_logger(__name__)

SETTINGS_VERSION = 1
DEFAULT_PER_PAGE = 10
FILTER_PREFIX = "filter_"

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


class DateRange(BaseModel):
    """Inclusive date range selected in a date filter."""

    model_config = ConfigDict(populate_by_name=True)

    from_: date | None = Field(default=None, alias="from")
    to: date | None = None

    @field_validator("from_", "to", mode="before")
    @classmethod
    def parse_day(cls, v: Any) -> Any:
        """Accept ISO dates and datetimes (legacy blobs stored full timestamps)."""
        if v in (None, ""):
            return None
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    @property
    def is_active(self) -> bool:
        return self.from_ is not None


class TableSettings(BaseModel):
    """Persisted state of one content list (one ``page_name``).

    Attributes:
        column_visibility: Visibility per column accessor key.
        filters: Query parameters keyed ``filter_<column>``.
        date_ranges: Selected date ranges keyed by column.
        sort_column: Column currently sorted on, if any.
        sort_direction: ``asc`` or ``desc``.
        per_page: Page size.
        search: Free-text search.
        current_page: One-based page number.
    """

    model_config = ConfigDict(populate_by_name=True)

    column_visibility: dict[str, bool] = Field(default_factory=dict, alias="columnVisibility")
    filters: dict[str, str] = Field(default_factory=dict)
    date_ranges: dict[str, DateRange] = Field(default_factory=dict, alias="dateRanges")
    sort_column: str | None = Field(default=None, alias="sortColumn")
    sort_direction: Literal["asc", "desc"] = Field(default="asc", alias="sortDirection")
    per_page: int = Field(default=DEFAULT_PER_PAGE, alias="itemsPerPage", ge=1)
    search: str = ""
    current_page: int = Field(default=1, alias="currentPage", ge=1)

    @field_validator("filters", mode="before")
    @classmethod
    def normalize_filter_keys(cls, v: Any) -> Any:
        """Prefix filter keys and drop empty values."""
        if not isinstance(v, dict):
            return {}
        normalized = {}
        for key, value in v.items():
            if value in (None, ""):
                continue
            name = key if key.startswith(FILTER_PREFIX) else f"{FILTER_PREFIX}{key}"
            normalized[name] = str(value)
        return normalized

    @field_validator("sort_direction", mode="before")
    @classmethod
    def default_direction(cls, v: Any) -> Any:
        return v if v in ("asc", "desc") else "asc"

    @field_validator("search", mode="before")
    @classmethod
    def default_search(cls, v: Any) -> Any:
        return "" if v is None else v


class SettingsEnvelope(BaseModel):
    """Versioned container written to the settings store."""

    version: int
    payload: dict[str, Any]


def encode_settings(settings: TableSettings, obfuscate: bool = False) -> str:
    """Serialize settings into a versioned envelope.

    Args:
        settings: Settings to persist.
        obfuscate: Wrap the JSON in URI-component + base64 encoding.

    Returns:
        The string to store.
    """
    envelope = SettingsEnvelope(
        version=SETTINGS_VERSION,
        payload=settings.model_dump(mode="json", by_alias=True),
    )
    text = envelope.model_dump_json()
    if obfuscate:
        return _obfuscate(text)
    return text


def decode_settings(raw: str | None) -> TableSettings | None:
    """Load settings from any supported encoding.

    Plain JSON is tried first, then the obfuscated form. Anything that does
    not decode, or decodes to an invalid settings object, yields ``None``.

    Args:
        raw: Stored string, or ``None`` when nothing was stored.

    Returns:
        The migrated settings, or ``None`` to keep defaults.
    """
    if not raw:
        return None

    document = _parse_plain(raw)
    if document is None:
        document = _parse_obfuscated(raw)
    if not isinstance(document, dict):
        logger.warning("Discarding undecodable table settings", length=len(raw))
        return None

    try:
        return migrate_settings(document)
    except (ValidationError, ValueError) as e:
        logger.warning("Discarding invalid table settings", error=str(e))
        return None


def migrate_settings(document: dict[str, Any]) -> TableSettings:
    """Migrate a decoded document to the current settings model.

    Args:
        document: Either a versioned envelope or a legacy settings object.

    Returns:
        Current settings.

    Raises:
        ValueError: If the envelope version is newer than this code knows.
        ValidationError: If the payload does not fit the settings model.
    """
    if "version" in document and "payload" in document:
        envelope = SettingsEnvelope.model_validate(document)
        if envelope.version > SETTINGS_VERSION:
            raise ValueError(f"Unsupported table settings version {envelope.version}")
        return TableSettings.model_validate(envelope.payload)
    return migrate_legacy_settings(document)


def migrate_legacy_settings(document: dict[str, Any]) -> TableSettings:
    """Convert an unversioned settings object.

    Legacy blobs stored ``itemsPerPage`` as a string and ``sortColumn``
    without a direction when unsorted.
    """
    payload = dict(document)
    items_per_page = payload.get("itemsPerPage")
    if isinstance(items_per_page, str):
        payload["itemsPerPage"] = int(items_per_page) if items_per_page.isdigit() else DEFAULT_PER_PAGE
    if not payload.get("currentPage"):
        payload.pop("currentPage", None)
    return TableSettings.model_validate(payload)


def _parse_plain(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _parse_obfuscated(raw: str) -> Any:
    try:
        decoded = base64.b64decode(raw, validate=True).decode("ascii")
        return json.loads(unquote(decoded))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def _obfuscate(text: str) -> str:
    return base64.b64encode(quote(text, safe=_URI_COMPONENT_SAFE).encode("ascii")).decode("ascii")
