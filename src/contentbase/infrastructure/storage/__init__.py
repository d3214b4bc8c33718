"""Persisted table settings stores."""

from contentbase.infrastructure.storage.settings_store import (
    FileSettingsStore,
    MemorySettingsStore,
    SettingsStore,
    settings_key,
)

__all__ = ["FileSettingsStore", "MemorySettingsStore", "SettingsStore", "settings_key"]
