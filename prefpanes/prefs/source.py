"""Resolve pane fragment and script URIs to text."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

from prefpanes.prefs.errors import FragmentIOError, FragmentNotFoundError


class FragmentSource:
    """Reads pane markup and scripts.

    URIs are looked up in the in-memory overrides first, then resolved as
    ``file://`` URIs or paths relative to ``base_dir``.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir
        self._overrides: dict[str, str] = {}
        self.fetch_count: dict[str, int] = {}

    def register(self, uri: str, text: str) -> None:
        """Serve ``text`` for ``uri`` without touching the filesystem."""
        self._overrides[uri] = text

    def resolve_path(self, uri: str) -> Path:
        parsed = urlparse(uri)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        if parsed.scheme and len(parsed.scheme) > 1:
            raise FragmentNotFoundError(f"Unsupported URI scheme: {uri}")
        path = Path(uri).expanduser()
        if not path.is_absolute() and self._base_dir is not None:
            path = self._base_dir / path
        return path

    def fetch_text(self, uri: str) -> str:
        self.fetch_count[uri] = self.fetch_count.get(uri, 0) + 1
        if uri in self._overrides:
            return self._overrides[uri]
        path = self.resolve_path(uri)
        if not path.is_file():
            raise FragmentNotFoundError(f"Not found: {uri}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FragmentIOError(f"Cannot read {uri}: {exc}") from exc
