"""Localized string tables for pane labels, markup entities and search metadata."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

from loguru import logger

from prefpanes.prefs.errors import MissingStringError


def _read_properties(path: Path) -> dict[str, str]:
    strings: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        strings[key.strip()] = value.strip().replace("\\n", "\n")
    return strings


def _read_json(path: Path) -> dict[str, str]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: string table must be an object")
    return {str(k): str(v) for k, v in payload.items()}


class Localizer:
    """Key → display string lookup."""

    def __init__(self, strings: Mapping[str, str] | None = None) -> None:
        self._strings: dict[str, str] = dict(strings or {})

    @classmethod
    def from_files(cls, paths: Iterable[Path]) -> "Localizer":
        """Load ``.json`` and ``.properties`` tables; later files win."""
        strings: dict[str, str] = {}
        for path in paths:
            if not path.exists():
                logger.warning(f"[strings] string table not found: {path}")
                continue
            if path.suffix == ".properties":
                strings.update(_read_properties(path))
            else:
                strings.update(_read_json(path))
        return cls(strings)

    def update(self, strings: Mapping[str, str]) -> None:
        self._strings.update(strings)

    def has(self, key: str) -> bool:
        return key in self._strings

    def resolve(self, key: str) -> str:
        try:
            return self._strings[key]
        except KeyError:
            raise MissingStringError(key) from None

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._strings.get(key, default)

    def resolve_or_key(self, key: str) -> str:
        """Resolve ``key``, falling back to the key itself so something is shown."""
        try:
            return self.resolve(key)
        except MissingStringError:
            logger.warning(f"[strings] missing string {key!r}, showing key")
            return key

    def entities(self) -> dict[str, str]:
        """Mapping used for ``&key;`` substitution in pane markup."""
        return dict(self._strings)
