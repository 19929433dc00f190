"""
Persistent user preferences.

Only the FetchLimit is stored today. The preference survives restarts
independently of the result cache, which never persists.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from catalog_admin.cache.normalizer import validate_limit
from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)

FETCH_LIMIT_KEY = "fetch_limit"


@runtime_checkable
class PreferenceStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryPreferenceStore:
    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFilePreferenceStore:
    """
    String preferences in a small JSON object on disk.

    The file is rewritten whole on every `set` (write to a sibling temp
    file, then rename) so a crash never leaves it half-written.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Ignoring unreadable preferences file", extra={"path": str(self.path), "error": str(exc)})
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        tmp_path.replace(self.path)


def load_fetch_limit(store: PreferenceStore, default: int) -> int:
    """Stored FetchLimit, or `default` when missing or malformed."""
    raw = store.get(FETCH_LIMIT_KEY)
    if raw is None:
        return default
    try:
        return validate_limit(int(raw))
    except ValueError:  # includes InvalidInput
        log.warning("Ignoring invalid stored fetch limit", extra={"value": raw})
        return default


def save_fetch_limit(store: PreferenceStore, limit: int) -> int:
    """Validate and persist a FetchLimit; returns the stored value."""
    limit = validate_limit(limit)
    store.set(FETCH_LIMIT_KEY, str(limit))
    log.info("Fetch limit saved", extra={"fetch_limit": limit})
    return limit


__all__ = [
    "FETCH_LIMIT_KEY",
    "InMemoryPreferenceStore",
    "JsonFilePreferenceStore",
    "PreferenceStore",
    "load_fetch_limit",
    "save_fetch_limit",
]
