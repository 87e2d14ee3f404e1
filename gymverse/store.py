# File: store.py
"""Handles persistent data storage for GymVerse progression state.

Keeps users' workout history, progress vectors, unlocked achievements,
challenge participants and leaderboard snapshots in a single JSON document,
so state survives restarts. Without a path the store is memory-only.
"""

from __future__ import annotations

from datetime import date, datetime
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from . import const
from .utils import dt_utils


def _json_default(value: Any) -> Any:
    """Serialize dates and datetimes as ISO strings."""
    if isinstance(value, datetime):
        return dt_utils.dt_format_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class ProgressionStore:
    """Handles persistent storage operations for progression data.

    The on-disk format is a versioned envelope::

        {"version": 1, "key": "gymverse_progression", "data": {...}}

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash never leaves a half-written file behind.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        storage_key: str = const.STORAGE_KEY,
    ) -> None:
        """Initialize the store.

        Args:
            path: JSON file location, or None for an in-memory store.
            storage_key: Key written into the envelope (default: const.STORAGE_KEY).
        """
        self._path = Path(path) if path is not None else None
        self._storage_key = storage_key
        self._data: dict[str, Any] = self.get_default_structure()

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
                const.DATA_META_LAST_SAVED: None,
            },
            const.DATA_USERS: {},
            const.DATA_CHALLENGES: {},
            const.DATA_LEADERBOARD_SNAPSHOTS: {},
        }

    @property
    def path(self) -> Path | None:
        """Storage file path (None for in-memory stores)."""
        return self._path

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def load(self) -> dict[str, Any]:
        """Load data from storage.

        If no file exists, initializes with the default structure. Buckets
        missing from an older file are added.

        Raises:
            ValueError: If the file exists but is not valid JSON.
        """
        if self._path is None or not self._path.exists():
            const.LOGGER.info("No existing storage found. Initializing new data")
            self._data = self.get_default_structure()
            return self._data

        with self._path.open(encoding="utf-8") as handle:
            envelope = json.load(handle)

        version = envelope.get("version")
        if version != const.STORAGE_VERSION:
            const.LOGGER.warning(
                "Storage version %s differs from expected %s for %s",
                version,
                const.STORAGE_VERSION,
                self._path,
            )

        data = envelope.get("data") or {}
        for key, default in self.get_default_structure().items():
            data.setdefault(key, default)
        self._data = data

        const.LOGGER.debug(
            "Loaded existing data from storage: %s",
            {
                "users": len(self._data[const.DATA_USERS]),
                "challenges": len(self._data[const.DATA_CHALLENGES]),
                "leaderboard_snapshots": len(self._data[const.DATA_LEADERBOARD_SNAPSHOTS]),
            },
        )
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    def save(self) -> bool:
        """Write the current data to storage.

        Errors are logged, not raised.

        Returns:
            True if the data was written (always True for in-memory stores).
        """
        self._data[const.DATA_META][const.DATA_META_LAST_SAVED] = dt_utils.dt_format_iso(
            dt_utils.dt_now_utc()
        )
        if self._path is None:
            return True

        envelope = {
            "version": const.STORAGE_VERSION,
            "key": self._storage_key,
            "data": self._data,
        }
        temp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                json.dump(envelope, handle, indent=2, default=_json_default)
            os.replace(temp_name, self._path)
            temp_name = None
        except OSError as err:
            const.LOGGER.error(
                "Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._path,
            )
            return False
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "Failed to save storage due to non-serializable data: %s", err
            )
            return False
        finally:
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)

        const.LOGGER.debug("Data saved successfully to %s", self._path)
        return True

    def clear_data(self) -> None:
        """Clear all stored data and reset to the default structure."""
        const.LOGGER.warning("Clearing all GymVerse progression data")
        self._data = self.get_default_structure()
        self.save()

    def update_data(self, key: str, value: Any) -> None:
        """Replace one top-level bucket and save.

        Unknown keys are logged and ignored.
        """
        if key not in self._data:
            const.LOGGER.warning(
                "Attempted to update unknown data key '%s'. Valid keys: %s",
                key,
                ", ".join(self._data.keys()),
            )
            return
        self._data[key] = value
        self.save()
