"""Stores for persisted content list settings.

One serialized settings blob is kept per logical table (``page_name``).
Concurrent writers are not coordinated; the last save wins.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from contentbase.core.config import get_settings
from contentbase.core.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "table_settings:"

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]")


def settings_key(page_name: str) -> str:
    """Storage key for a table's settings."""
    return f"{KEY_PREFIX}{page_name}"


class SettingsStore(ABC):
    """Abstract base class for table settings stores."""

    @abstractmethod
    async def load(self, page_name: str) -> str | None:
        """Return the stored blob, or None when nothing was saved."""
        ...

    @abstractmethod
    async def save(self, page_name: str, value: str) -> None:
        """Store the blob, replacing any previous value."""
        ...

    @abstractmethod
    async def delete(self, page_name: str) -> None:
        """Forget the stored blob."""
        ...


class MemorySettingsStore(SettingsStore):
    """Process-local store, used by tests and short-lived sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def load(self, page_name: str) -> str | None:
        return self._values.get(settings_key(page_name))

    async def save(self, page_name: str, value: str) -> None:
        self._values[settings_key(page_name)] = value

    async def delete(self, page_name: str) -> None:
        self._values.pop(settings_key(page_name), None)


class FileSettingsStore(SettingsStore):
    """Store keeping one file per table under a directory."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory or get_settings().table_settings_path)

    def _path(self, page_name: str) -> Path:
        filename = _UNSAFE_FILENAME.sub("_", settings_key(page_name))
        return self.directory / f"{filename}.txt"

    async def load(self, page_name: str) -> str | None:
        path = self._path(page_name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read table settings", page_name=page_name, error=str(e))
            return None

    async def save(self, page_name: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(page_name).write_text(value, encoding="utf-8")
        logger.debug("Saved table settings", page_name=page_name)

    async def delete(self, page_name: str) -> None:
        self._path(page_name).unlink(missing_ok=True)
