"""Text normalization shared by search matching and search-string metadata."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_PLACEHOLDER_RE = re.compile(r"%(\d+\$)?S")


def trim_internal(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def remove_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped)


def normalize_search(text: str) -> str:
    """Trim, lowercase and strip diacritics."""
    return remove_diacritics(trim_internal(text).lower())


def display_term(text: str) -> str:
    """Trimmed and lowercased, diacritics kept (for tooltips)."""
    return trim_internal(text).lower()


def strip_placeholders(text: str) -> str:
    """Drop positional format placeholders such as ``%S`` and ``%1$S``."""
    return _PLACEHOLDER_RE.sub("", text)


def find_span(raw: str, term: str) -> tuple[int, int] | None:
    """Offsets in ``raw`` of the first occurrence of a normalized ``term``.

    ``raw`` is normalized character by character so the match can be mapped
    back onto the original text, including collapsed whitespace and
    characters whose diacritics were removed.
    """
    if not term:
        return None
    pieces: list[str] = []
    owners: list[int] = []
    in_space = True
    for idx, ch in enumerate(raw):
        if ch.isspace():
            if in_space:
                continue
            in_space = True
            pieces.append(" ")
            owners.append(idx)
            continue
        in_space = False
        for out in remove_diacritics(ch.lower()):
            pieces.append(out)
            owners.append(idx)
    haystack = "".join(pieces)
    pos = haystack.find(term)
    if pos == -1:
        return None
    start = owners[pos]
    end = owners[pos + len(term) - 1] + 1
    return start, end
