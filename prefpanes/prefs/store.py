"""Persistent preference store: flat dotted keys in one JSON file.

File layout::

    ~/.prefpanes/prefs.json
      {"prefpanes.lastSelectedPrefPane": "general", "sync.autoSync": true, ...}

Observers are registered per key and fire only when the stored value
actually changes.
"""

from __future__ import annotations

import itertools
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from loguru import logger

Scalar = bool | int | float | str
PrefObserver = Callable[[Any], None]


def coerce_like(current: Any, value: Any) -> Any:
    """Convert a UI value (usually a string) to the type of ``current``."""
    if current is None or value is None or type(value) is type(current):
        return value
    try:
        if isinstance(current, bool):
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(current, int):
            return int(str(value).strip())
        if isinstance(current, float):
            return float(str(value).strip())
        if isinstance(current, str):
            return str(value)
    except ValueError:
        logger.debug(f"[prefs] cannot coerce {value!r} to {type(current).__name__}")
    return value


@dataclass
class _Observer:
    key: str
    callback: PrefObserver


class PreferenceStore:
    """Scalar settings addressed by dotted path, with change observers."""

    def __init__(
        self,
        path: Path | None = None,
        defaults: Mapping[str, Scalar] | None = None,
        auto_save: bool = True,
    ) -> None:
        self._path = path
        self._defaults: dict[str, Scalar] = dict(defaults or {})
        self._values: dict[str, Scalar] = {}
        self._observers: dict[int, _Observer] = {}
        self._handles = itertools.count(1)
        self._auto_save = auto_save and path is not None
        if path is not None:
            self._values.update(self._read(path))

    @property
    def path(self) -> Path | None:
        return self._path

    # ------------------------------------------------------------------ #
    # Read / write                                                         #
    # ------------------------------------------------------------------ #

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._values:
            return self._values[key]
        return self._defaults.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._values or key in self._defaults

    def set(self, key: str, value: Any) -> None:
        if value is not None and not isinstance(value, (bool, int, float, str)):
            raise TypeError(f"Preference {key} must be a scalar, got {type(value).__name__}")
        old = self.get(key)
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        new = self.get(key)
        if old == new and type(old) is type(new):
            return
        if self._auto_save:
            self.save()
        self._notify(key, new)

    def clear(self, key: str) -> None:
        """Drop a user value so the default applies again."""
        self.set(key, None)

    def keys(self) -> list[str]:
        return sorted(set(self._values) | set(self._defaults))

    # ------------------------------------------------------------------ #
    # Observers                                                            #
    # ------------------------------------------------------------------ #

    def register_observer(self, key: str, callback: PrefObserver) -> int:
        handle = next(self._handles)
        self._observers[handle] = _Observer(key, callback)
        return handle

    def unregister_observer(self, handle: int) -> None:
        self._observers.pop(handle, None)

    def observer_count(self, key: str | None = None) -> int:
        if key is None:
            return len(self._observers)
        return sum(1 for obs in self._observers.values() if obs.key == key)

    def _notify(self, key: str, value: Any) -> None:
        for handle, obs in list(self._observers.items()):
            if obs.key != key or handle not in self._observers:
                continue
            obs.callback(value)

    # ------------------------------------------------------------------ #
    # Persistence                                                          #
    # ------------------------------------------------------------------ #

    def save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")

    @staticmethod
    def _read(path: Path) -> dict[str, Scalar]:
        if not path.exists():
            return {}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"[prefs] ignoring unreadable store {path}: {exc}")
            return {}
        if not isinstance(payload, dict):
            logger.warning(f"[prefs] ignoring store {path}: top level is not an object")
            return {}
        return {
            str(k): v for k, v in payload.items()
            if isinstance(v, (bool, int, float, str))
        }
