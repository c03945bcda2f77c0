"""Sense-tree walking.

Two folds thread carried context across sibling tokens:

* :func:`step_sense` folds the tokens of one sense-sequence item. A ``sen``
  token, or a ``sen`` embedded in a sense, sets the carried sense metadata;
  it applies to that sense and every later sense of the same item until
  another ``sen`` replaces it.
* :func:`step_dt` folds the defining text of one sense. A ``wsgram`` token
  sets the grammatical note that every later example receives until the
  next ``wsgram`` or the end of the defining text.

Both steps are pure: ``(accumulator, token) -> (accumulator, emitted)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from lexingest.exceptions import ParseDefect
from lexingest.models import DefinitionNode, ExampleNode, PartOfSpeech, SourceType
from lexingest.text import (
    is_cross_reference,
    join_labels,
    join_notes,
    normalize_text,
    strip_markup,
)
from lexingest.tokens import (
    DtToken,
    PseqToken,
    SenseData,
    SenseMeta,
    SenseToken,
    SenToken,
    SnoteToken,
    SseqToken,
    TextToken,
    UnsToken,
    UsageNote,
    VisToken,
    WsgramToken,
    decode_sseq_item,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WalkContext:
    """Per-owner values that every definition of one walk shares."""

    part_of_speech: PartOfSpeech
    source: SourceType
    language: str
    entry_gram: str | None = None
    entry_labels: tuple[Any, ...] = ()
    short_definitions: frozenset[str] = frozenset()
    owner: str = ""


@dataclass(frozen=True, slots=True)
class SenseResult:
    """A definition emitted by the walker plus the phrasal-verb variants
    listed next to it."""

    definition: DefinitionNode
    phrasal_variants: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Defining text
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DtAccumulator:
    grammatical_note: str | None = None
    text: str | None = None
    usages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DtSummary:
    text: str | None
    examples: tuple[ExampleNode, ...]
    usages: tuple[str, ...]

    @property
    def usage_note(self) -> str | None:
        return format_usage_note(self.usages)


def _examples(visses: Iterable[Any], note: str | None, language: str) -> list[ExampleNode]:
    out = []
    for vis in visses:
        raw = vis.get("t") if isinstance(vis, dict) else vis
        text = normalize_text(raw)
        if text:
            out.append(ExampleNode(text, note or None, language))
    return out


def _usage_examples(
    notes: Iterable[UsageNote], parent_note: str | None, language: str
) -> tuple[list[str], list[ExampleNode]]:
    usages: list[str] = []
    examples: list[ExampleNode] = []
    for note in notes:
        usage_text = normalize_text(note.text) or ""
        prefix = (f"{usage_text} ({parent_note})" if parent_note else usage_text).strip()
        examples.extend(_examples(note.examples, prefix, language))
        if note.nested:
            nested_usages, nested_examples = _usage_examples(
                note.nested, prefix, language
            )
            usages.extend(nested_usages)
            examples.extend(nested_examples)
        if usage_text:
            usages.append(usage_text)
    return usages, examples


def step_dt(
    acc: DtAccumulator, token: DtToken, language: str
) -> tuple[DtAccumulator, list[ExampleNode]]:
    """Fold one defining-text token."""
    if isinstance(token, WsgramToken):
        return replace(acc, grammatical_note=normalize_text(token.note)), []
    if isinstance(token, TextToken):
        if acc.text is None and not is_cross_reference(token.text):
            return replace(acc, text=normalize_text(token.text)), []
        return acc, []
    if isinstance(token, VisToken):
        return acc, _examples(token.examples, acc.grammatical_note, language)
    if isinstance(token, UnsToken):
        usages, examples = _usage_examples(token.notes, acc.grammatical_note, language)
        return replace(acc, usages=acc.usages + tuple(usages)), examples
    if isinstance(token, SnoteToken):
        usages = list(acc.usages)
        examples: list[ExampleNode] = []
        snote_text = None
        for tag, payload in token.parts:
            if tag == "t":
                snote_text = normalize_text(payload)
                if snote_text:
                    usages.append(snote_text)
            elif tag == "vis" and isinstance(payload, list):
                note = join_notes([acc.grammatical_note, snote_text])
                examples.extend(_examples(payload, note, language))
        return replace(acc, usages=tuple(usages)), examples
    raise ParseDefect(f"Unhandled dt token {token!r}")


def merge_examples(examples: Iterable[ExampleNode]) -> list[ExampleNode]:
    """Collapse examples with equal text, preferring one with a note."""
    merged: dict[str, ExampleNode] = {}
    for example in examples:
        existing = merged.get(example.text)
        if existing is None or (existing.grammatical_note is None
                                and example.grammatical_note is not None):
            merged[example.text] = example
    return list(merged.values())


def format_usage_note(usages: Iterable[str]) -> str | None:
    """Number usage texts as ``1: text; 2: text``."""
    return "; ".join(f"{i}: {text}" for i, text in enumerate(usages, 1)) or None


def summarize_dt(tokens: Iterable[DtToken], language: str) -> DtSummary:
    """Fold a whole defining text into its text, examples and usage note."""
    acc = DtAccumulator()
    examples: list[ExampleNode] = []
    for token in tokens:
        acc, emitted = step_dt(acc, token, language)
        examples.extend(emitted)
    return DtSummary(
        text=acc.text,
        examples=tuple(merge_examples(examples)),
        usages=acc.usages,
    )


# ---------------------------------------------------------------------------
# Sense sequences
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SenseAccumulator:
    carried: SenseMeta | None = None
    seen: frozenset[tuple[str, PartOfSpeech]] = field(default_factory=frozenset)


def _is_plural(*values: Any) -> bool:
    return any(isinstance(v, str) and v.strip().lower() == "plural" for v in values)


def build_definition(
    sense: SenseData, carried: SenseMeta | None, ctx: WalkContext
) -> SenseResult | None:
    """Turn one sense into a definition, or None when it has no text."""
    summary = summarize_dt(sense.dt, ctx.language)
    text = summary.text
    if text is None and summary.usages:
        # senses made only of usage notes are defined by their first note
        text = summary.usages[0]
    if not text:
        return None

    meta = carried or SenseMeta()
    definition = DefinitionNode(
        text=text,
        part_of_speech=ctx.part_of_speech,
        source=ctx.source,
        language=ctx.language,
        subject_status_labels=join_notes([
            join_labels(meta.subject_status_labels),
            join_labels(sense.phrasal_subject_status_labels)
            or join_labels(sense.subject_status_labels),
        ]),
        general_labels=join_notes([
            join_labels(meta.general_labels),
            join_labels(ctx.entry_labels),
            join_labels(sense.general_labels),
        ]),
        grammatical_note=join_notes([
            ctx.entry_gram, meta.bnote, meta.sgram, sense.sgram, sense.bnote,
        ]),
        usage_note=summary.usage_note,
        in_short_def=strip_markup(text) in ctx.short_definitions,
        plural_only=_is_plural(
            ctx.entry_gram, meta.sgram, sense.sgram,
            *meta.general_labels, *sense.general_labels,
        ),
        examples=list(summary.examples),
    )
    return SenseResult(
        definition,
        meta.phrasal_variants + sense.phrasal_variants,
    )


def step_sense(
    acc: SenseAccumulator, token: SseqToken, ctx: WalkContext
) -> tuple[SenseAccumulator, list[SenseResult]]:
    """Fold one sense-sequence token."""
    if isinstance(token, SenToken):
        return replace(acc, carried=token.meta), []
    if isinstance(token, PseqToken):
        emitted: list[SenseResult] = []
        for inner in token.tokens:
            acc, out = step_sense(acc, inner, ctx)
            emitted.extend(out)
        return acc, emitted
    if isinstance(token, SenseToken):
        if token.sense.sen is not None:
            acc = replace(acc, carried=token.sense.sen)
        result = build_definition(token.sense, acc.carried, ctx)
        if result is None:
            return acc, []
        key = (result.definition.text, result.definition.part_of_speech)
        if key in acc.seen:
            return acc, []
        return replace(acc, seen=acc.seen | {key}), [result]
    raise ParseDefect(f"Unhandled sense token {token!r}")


def walk_senses(definitions: Any, ctx: WalkContext) -> list[SenseResult]:
    """Walk a ``def`` block (list of ``{"sseq": [...]}``) in order.

    Carried metadata resets at each sense-sequence item; the duplicate
    (text, part of speech) check spans the whole walk.
    """
    if not definitions:
        return []
    if not isinstance(definitions, list):
        _report(ParseDefect(f"Expected a def list, got {type(definitions).__name__}"), ctx)
        return []

    results: list[SenseResult] = []
    seen: frozenset[tuple[str, PartOfSpeech]] = frozenset()
    for block in definitions:
        sseq = block.get("sseq") if isinstance(block, dict) else None
        if not isinstance(sseq, list):
            continue
        for item in sseq:
            acc = SenseAccumulator(seen=seen)
            try:
                tokens = list(decode_sseq_item(item, lambda exc: _report(exc, ctx)))
            except ParseDefect as exc:
                _report(exc, ctx)
                continue
            for token in tokens:
                acc, emitted = step_sense(acc, token, ctx)
                results.extend(emitted)
            seen = acc.seen
    return results


def _report(exc: ParseDefect, ctx: WalkContext) -> None:
    logger.warning("Skipping malformed sense data in %r: %s", ctx.owner, exc)
