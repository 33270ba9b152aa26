from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from squaregame.constants import DEFAULT_SAVE_PATH

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Small durable key-value store backed by one JSON document.

    Reads never raise: a missing, unreadable or corrupt file behaves like an
    empty store. Writes are best effort; an ``OSError`` is logged and the
    in-memory value is kept so play continues.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: Dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Any]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.warning("ignoring unreadable store %s: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("ignoring store %s: top level is %s", self._path, type(payload).__name__)
            return {}
        return payload

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key`` and flush. Returns False if the write failed."""
        self._data[key] = value
        return self.flush()

    def delete(self, key: str) -> bool:
        if key not in self._data:
            return True
        del self._data[key]
        return self.flush()

    def reload(self) -> None:
        self._data = self._load()

    def flush(self) -> bool:
        """Write the whole document to a sibling temp file, then swap it into place."""
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(self._data, handle, indent=2)
            tmp_path.replace(self._path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("could not write store %s: %s", self._path, exc)
            tmp_path.unlink(missing_ok=True)
            return False
        return True


def resolve_store(world, store: KeyValueStore | None = None, save_path: Path | str | None = None) -> KeyValueStore:
    """Pick the store a system should use: explicit store, explicit path, the world's store, the default file."""
    if store is not None:
        return store
    if save_path is not None:
        return KeyValueStore(save_path)
    existing = getattr(world, "store", None)
    if existing is not None:
        return existing
    return KeyValueStore(DEFAULT_SAVE_PATH)
