"""Markup cleanup for text fields of upstream dictionary entries.

Upstream text carries inline formatting tokens in curly braces, for
example ``{bc}to move {it}quickly{/it}`` or ``{sx|stroll||}``. Link tokens
are replaced by the word they display, a small set of emphasis tokens is
kept for rendering, and everything else is dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

logger = logging.getLogger(__name__)

EMPHASIS_TOKENS = frozenset({
    "it", "/it", "b", "/b", "wi", "/wi", "phrase", "/phrase",
})

LINK_TOKENS = frozenset({
    "sx", "a_link", "d_link", "i_link", "et_link", "mat", "dxt",
})

CROSS_REFERENCE_PREFIXES = ("{dx}", "{sx|", "{bc}{sx|")

_TOKEN_RE = re.compile(r"\{([^{}]*)\}")
_WHITESPACE_RE = re.compile(r"\s+")


def _coerce(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    logger.warning("Non-string text field encountered: %r", value)
    return str(value)


def normalize_text(value: Any, *, keep_emphasis: bool = True) -> str | None:
    """Strip markup tokens and collapse whitespace.

    Returns None when nothing is left. Non-string input is coerced with
    ``str()`` after logging a warning.
    """
    text = _coerce(value)
    if text is None:
        return None

    def replace(match: re.Match[str]) -> str:
        body = match.group(1)
        name, sep, rest = body.partition("|")
        if sep and name in LINK_TOKENS:
            return rest.split("|", 1)[0].split(":", 1)[0]
        if keep_emphasis and body in EMPHASIS_TOKENS:
            return match.group(0)
        return ""

    text = _TOKEN_RE.sub(replace, text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text or None


def strip_markup(value: Any) -> str | None:
    """Remove every markup token, emphasis included."""
    return normalize_text(value, keep_emphasis=False)


def is_cross_reference(value: Any) -> bool:
    """True for definition text that only points at another entry."""
    return isinstance(value, str) and value.startswith(CROSS_REFERENCE_PREFIXES)


def clean_headword(value: Any) -> str | None:
    """Headword without syllable break asterisks or markup."""
    text = _coerce(value)
    if text is None:
        return None
    return strip_markup(text.replace("*", ""))


def join_labels(values: Iterable[Any] | None) -> str | None:
    """Join a label list with commas, dropping empty entries."""
    if not values:
        return None
    cleaned = [strip_markup(v) for v in values]
    return ", ".join(v for v in cleaned if v) or None


def join_notes(values: Iterable[str | None]) -> str | None:
    """Join independent notes with `` | ``, dropping empty entries."""
    kept = [v.strip() for v in values if v and v.strip()]
    return " | ".join(kept) or None


def audio_url(base_url: str, filename: str, language: str = "en",
              country: str = "us") -> str:
    """Build the media URL for an upstream audio file name."""
    if filename.startswith("bix"):
        subdir = "bix"
    elif filename.startswith("gg"):
        subdir = "gg"
    elif not filename[:1].isalpha():
        subdir = "number"
    else:
        subdir = filename[0]
    return f"{base_url.rstrip('/')}/{language}/{country}/mp3/{subdir}/{filename}.mp3"
