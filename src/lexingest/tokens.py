"""Typed decoding of the ``[tag, payload]`` pairs found in sense trees.

Every recognised tag becomes its own frozen dataclass so the sense walker
can dispatch on type. Shapes that do not match raise ParseDefect; callers
skip the offending token and keep going.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Union

from lexingest.exceptions import ParseDefect

# dt tags that carry nothing the pipeline stores
IGNORED_DT_TAGS = frozenset({
    "ca", "ri", "bnw", "snotebox", "srefs", "urefs", "g",
})

# ---------------------------------------------------------------------------
# dt (defining text) tokens
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TextToken:
    text: Any


@dataclass(frozen=True, slots=True)
class VisToken:
    """Verbal illustrations (example sentences)."""

    examples: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class WsgramToken:
    """Grammatical note applying to the examples that follow it."""

    note: str


@dataclass(frozen=True, slots=True)
class UsageNote:
    """One group of a usage-notes token."""

    text: Any
    examples: tuple[Any, ...]
    nested: tuple[UsageNote, ...]


@dataclass(frozen=True, slots=True)
class UnsToken:
    notes: tuple[UsageNote, ...]


@dataclass(frozen=True, slots=True)
class SnoteToken:
    """Supplemental note: its text and examples, in upstream order."""

    parts: tuple[tuple[str, Any], ...]


DtToken = Union[TextToken, VisToken, WsgramToken, UnsToken, SnoteToken]

# ---------------------------------------------------------------------------
# sseq (sense sequence) tokens
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SenseMeta:
    """Labels carried by a ``sen`` token onto the senses that follow it."""

    subject_status_labels: tuple[Any, ...] = ()
    general_labels: tuple[Any, ...] = ()
    sgram: str | None = None
    bnote: str | None = None
    phrasal_variants: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SenseData:
    dt: tuple[DtToken, ...]
    subject_status_labels: tuple[Any, ...] = ()
    phrasal_subject_status_labels: tuple[Any, ...] = ()
    general_labels: tuple[Any, ...] = ()
    sgram: str | None = None
    bnote: str | None = None
    phrasal_variants: tuple[str, ...] = ()
    sen: SenseMeta | None = None


@dataclass(frozen=True, slots=True)
class SenToken:
    meta: SenseMeta


@dataclass(frozen=True, slots=True)
class SenseToken:
    sense: SenseData


@dataclass(frozen=True, slots=True)
class PseqToken:
    """Parenthesized sense sequence, walked like its parent."""

    tokens: tuple[SseqToken, ...]


SseqToken = Union[SenToken, SenseToken, PseqToken]

# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------

def _pair(raw: Any) -> tuple[str, Any]:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2 or not isinstance(raw[0], str):
        raise ParseDefect(f"Expected a [tag, payload] pair, got {raw!r}")
    return raw[0], raw[1]


def _strings(raw: Any) -> tuple[Any, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list):
        return tuple(raw)
    raise ParseDefect(f"Expected a label list, got {raw!r}")


def _optional_str(raw: Any) -> str | None:
    if raw is None or isinstance(raw, str):
        return raw
    raise ParseDefect(f"Expected a string, got {raw!r}")


def _mapping(raw: Any, what: str) -> dict:
    if not isinstance(raw, dict):
        raise ParseDefect(f"Expected a mapping for {what}, got {type(raw).__name__}")
    return raw


def phrasal_variants(raw: Any) -> tuple[str, ...]:
    """Collect ``pva`` forms from a ``phrasev`` / ``phrs`` list."""
    if not isinstance(raw, list):
        return ()
    return tuple(
        p["pva"] for p in raw
        if isinstance(p, dict) and isinstance(p.get("pva"), str) and p["pva"]
    )


# ---------------------------------------------------------------------------
# dt decoding
# ---------------------------------------------------------------------------

def _decode_usage_group(group: Any) -> UsageNote:
    if not isinstance(group, list):
        raise ParseDefect(f"Expected a usage-note group, got {group!r}")
    text = None
    examples: tuple[Any, ...] = ()
    nested: list[UsageNote] = []
    for raw in group:
        tag, payload = _pair(raw)
        if tag == "text":
            text = payload
        elif tag == "vis":
            if not isinstance(payload, list):
                raise ParseDefect(f"Expected a vis list, got {payload!r}")
            examples += tuple(payload)
        elif isinstance(payload, list):
            nested.extend(_decode_usage_group(g) for g in payload)
    return UsageNote(text=text, examples=examples, nested=tuple(nested))


def decode_dt_token(raw: Any) -> DtToken | None:
    """Decode one ``dt`` entry; None for tags with nothing to store."""
    tag, payload = _pair(raw)
    if tag == "text":
        return TextToken(payload)
    if tag == "vis":
        if not isinstance(payload, list):
            raise ParseDefect(f"Expected a vis list, got {payload!r}")
        return VisToken(tuple(payload))
    if tag == "wsgram":
        if not isinstance(payload, str):
            raise ParseDefect(f"Expected a wsgram string, got {payload!r}")
        return WsgramToken(payload)
    if tag == "uns":
        if not isinstance(payload, list):
            raise ParseDefect(f"Expected a uns list, got {payload!r}")
        return UnsToken(tuple(_decode_usage_group(g) for g in payload))
    if tag == "snote":
        if not isinstance(payload, list):
            raise ParseDefect(f"Expected a snote list, got {payload!r}")
        return SnoteToken(tuple(_pair(p) for p in payload))
    if tag in IGNORED_DT_TAGS:
        return None
    raise ParseDefect(f"Unknown dt tag {tag!r}")


# ---------------------------------------------------------------------------
# sseq decoding
# ---------------------------------------------------------------------------

def decode_sen(raw: Any) -> SenseMeta:
    data = _mapping(raw, "sen")
    return SenseMeta(
        subject_status_labels=_strings(data.get("sls")),
        general_labels=_strings(data.get("lbs")),
        sgram=_optional_str(data.get("sgram")),
        bnote=_optional_str(data.get("bnote")),
        phrasal_variants=phrasal_variants(data.get("phrasev")),
    )


def decode_sense(raw: Any, on_defect=None) -> SenseData:
    """Decode a ``sense`` / ``sdsense`` payload.

    Malformed dt entries are reported to *on_defect* and skipped; without
    a callback the first one raises.
    """
    data = _mapping(raw, "sense")
    dt = data.get("dt")
    if not isinstance(dt, list):
        raise ParseDefect("Sense has no dt list")
    tokens: list[DtToken] = []
    for item in dt:
        try:
            token = decode_dt_token(item)
        except ParseDefect as exc:
            if on_defect is None:
                raise
            on_defect(exc)
            continue
        if token is not None:
            tokens.append(token)

    sphrasev = data.get("sphrasev") if isinstance(data.get("sphrasev"), dict) else {}
    return SenseData(
        dt=tuple(tokens),
        subject_status_labels=_strings(data.get("sls")),
        phrasal_subject_status_labels=_strings(sphrasev.get("phsls")),
        general_labels=_strings(data.get("lbs")),
        sgram=_optional_str(data.get("sgram")),
        bnote=_optional_str(data.get("bnote")),
        phrasal_variants=(
            phrasal_variants(data.get("phrasev"))
            + phrasal_variants(sphrasev.get("phrs"))
        ),
        sen=decode_sen(data["sen"]) if "sen" in data else None,
    )


def decode_sseq_item(raw: Any, on_defect=None) -> Iterator[SseqToken]:
    """Yield the tokens of one sense-sequence item.

    A ``sense`` holding a divided sense (``sdsense``) yields it as a
    second token right after the sense itself.
    """
    if not isinstance(raw, list):
        raise ParseDefect(f"Expected a sense-sequence item list, got {raw!r}")
    for entry in raw:
        try:
            tag, payload = _pair(entry)
            if tag == "sen":
                yield SenToken(decode_sen(payload))
            elif tag in ("sense", "sdsense"):
                yield SenseToken(decode_sense(payload, on_defect))
                if isinstance(payload, dict) and "sdsense" in payload:
                    yield SenseToken(decode_sense(payload["sdsense"], on_defect))
            elif tag == "bs":
                inner = _mapping(payload, "bs").get("sense")
                yield SenseToken(decode_sense(inner, on_defect))
            elif tag == "pseq":
                yield PseqToken(tuple(decode_sseq_item(payload, on_defect)))
            else:
                raise ParseDefect(f"Unknown sense-sequence tag {tag!r}")
        except ParseDefect as exc:
            if on_defect is None:
                raise
            on_defect(exc)
