"""Unit tests for persisted content list settings."""

import base64
import json
from datetime import date
from urllib.parse import quote

import pytest
from pydantic import ValidationError

from contentbase.domain.services.table_settings import (
    SETTINGS_VERSION,
    DateRange,
    TableSettings,
    decode_settings,
    encode_settings,
    migrate_settings,
)


def _settings() -> TableSettings:
    return TableSettings(
        column_visibility={"created_at": False},
        filters={"status": "published"},
        date_ranges={"updated_at": DateRange(from_=date(2026, 1, 1), to=date(2026, 1, 31))},
        sort_column="title",
        sort_direction="desc",
        per_page=25,
        search="hello",
        current_page=3,
    )


class TestTableSettingsModel:
    def test_filter_keys_are_prefixed(self):
        settings = TableSettings(filters={"locale": "fr", "filter_status": "draft", "empty": ""})
        assert settings.filters == {"filter_locale": "fr", "filter_status": "draft"}

    def test_invalid_direction_falls_back_to_asc(self):
        assert TableSettings(sort_direction="sideways").sort_direction == "asc"

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            TableSettings(per_page=0)


class TestEncodeDecode:
    """Tests for the versioned settings envelope."""

    def test_plain_round_trip(self):
        raw = encode_settings(_settings())

        assert json.loads(raw)["version"] == SETTINGS_VERSION
        assert decode_settings(raw) == _settings()

    def test_obfuscated_round_trip(self):
        raw = encode_settings(_settings(), obfuscate=True)

        assert not raw.startswith("{")
        assert decode_settings(raw) == _settings()

    def test_payload_uses_stored_key_names(self):
        payload = json.loads(encode_settings(_settings()))["payload"]
        assert payload["itemsPerPage"] == 25
        assert payload["dateRanges"]["updated_at"] == {"from": "2026-01-01", "to": "2026-01-31"}

    @pytest.mark.parametrize("raw", [None, "", "not json or base64!", "[1, 2]"])
    def test_undecodable_input_keeps_defaults(self, raw):
        assert decode_settings(raw) is None

    def test_newer_version_is_discarded(self):
        raw = json.dumps({"version": SETTINGS_VERSION + 1, "payload": {}})
        assert decode_settings(raw) is None

    def test_invalid_payload_is_discarded(self):
        raw = json.dumps({"version": SETTINGS_VERSION, "payload": {"itemsPerPage": -5}})
        assert decode_settings(raw) is None


class TestLegacyMigration:
    """Tests for unversioned settings written by older clients."""

    def test_plain_legacy_document(self):
        legacy = {
            "columnVisibility": {"status": False},
            "filters": {"status": "draft"},
            "dateRanges": {"created_at": {"from": "2025-12-01T00:00:00.000Z", "to": None}},
            "sortColumn": "updated_at",
            "itemsPerPage": "50",
            "search": None,
        }

        settings = decode_settings(json.dumps(legacy))

        assert settings.per_page == 50
        assert settings.filters == {"filter_status": "draft"}
        assert settings.date_ranges["created_at"].from_ == date(2025, 12, 1)
        assert settings.sort_direction == "asc"
        assert settings.search == ""
        assert settings.current_page == 1

    def test_obfuscated_legacy_document(self):
        legacy = json.dumps({"itemsPerPage": "20", "currentPage": 2})
        raw = base64.b64encode(quote(legacy).encode("ascii")).decode("ascii")

        settings = decode_settings(raw)

        assert settings.per_page == 20
        assert settings.current_page == 2

    def test_non_numeric_page_size_uses_default(self):
        settings = migrate_settings({"itemsPerPage": "lots"})
        assert settings.per_page == 10
