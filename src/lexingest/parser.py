"""Turns one upstream dictionary entry into an intermediate word graph."""

from __future__ import annotations

import logging
import re
from typing import Any

from lexingest.config import IngestConfig
from lexingest.exceptions import ParseDefect, UpstreamDataAbsent
from lexingest.models import (
    MAIN_WORD,
    DefinitionNode,
    ParsedEntry,
    PartOfSpeech,
    Provenance,
    RelationshipEdge,
    RelationshipType,
    SourceType,
    SubWordDescriptor,
    Symbol,
    WordKey,
    WordNode,
)
from lexingest.resolver import (
    Resolution,
    classify_cross_reference,
    describe,
    form_definition,
    part_of_speech_for,
    resolve,
)
from lexingest.senses import WalkContext, summarize_dt, walk_senses
from lexingest.text import audio_url, clean_headword, normalize_text, strip_markup
from lexingest.tokens import decode_dt_token

logger = logging.getLogger(__name__)

SOURCE_TYPES = {
    "learners": SourceType.MERRIAM_LEARNERS,
    "int_dict": SourceType.MERRIAM_INTERMEDIATE,
}

PARTS_OF_SPEECH = {
    "noun": PartOfSpeech.NOUN,
    "verb": PartOfSpeech.VERB,
    "phrasal verb": PartOfSpeech.PHRASAL_VERB,
    "adjective": PartOfSpeech.ADJECTIVE,
    "adverb": PartOfSpeech.ADVERB,
    "pronoun": PartOfSpeech.PRONOUN,
    "preposition": PartOfSpeech.PREPOSITION,
    "conjunction": PartOfSpeech.CONJUNCTION,
    "interjection": PartOfSpeech.INTERJECTION,
    "abbreviation": PartOfSpeech.ABBREVIATION,
}

# Inflection labels that repeat the label of the form before them
# ("plural cacti or cactuses").
_CONTINUATION_LABELS = frozenset({"or", "also", "or less commonly"})

_HOMOGRAPH_SUFFIX = re.compile(r":\d+$")


def map_part_of_speech(fl: Any) -> PartOfSpeech:
    """Map the upstream ``fl`` field to a part of speech."""
    if isinstance(fl, str) and fl.strip().lower() in PARTS_OF_SPEECH:
        return PARTS_OF_SPEECH[fl.strip().lower()]
    if fl:
        logger.warning("Unknown functional label %r, using 'undefined'", fl)
    return PartOfSpeech.UNDEFINED


def headword_of(document: Any) -> str | None:
    """The cleaned headword of an entry, or None when it has none."""
    if not isinstance(document, dict):
        return None
    hwi = document.get("hwi")
    if not isinstance(hwi, dict):
        return None
    return clean_headword(hwi.get("hw"))


def parse_entry(document: Any, config: IngestConfig | None = None) -> ParsedEntry:
    """Parse one upstream entry.

    Raises:
        UpstreamDataAbsent: If the document has no usable headword (the
            upstream answers unknown words with a list of suggestions).
    """
    config = config or IngestConfig()
    headword = headword_of(document)
    if not headword:
        if isinstance(document, dict):
            raise UpstreamDataAbsent("Entry has no headword")
        raise UpstreamDataAbsent(
            f"Expected an entry object, got {type(document).__name__}"
        )
    return _EntryParser(document, headword, config).parse()


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


class _EntryParser:
    """Accumulates the sub-words of one entry, keyed by natural key."""

    def __init__(self, doc: dict, headword: str, config: IngestConfig) -> None:
        self._doc = doc
        self._config = config
        self._language = config.language
        self._main = headword
        self._meta = _dict(doc.get("meta"))
        src = self._meta.get("src")
        if not isinstance(src, str):
            src = None
        self._source = SOURCE_TYPES.get(src, SourceType.USER)
        self._pos = map_part_of_speech(doc.get("fl"))
        self._short_defs = self._short_definitions()
        self._definitions: list[DefinitionNode] = []
        self._subs: dict[WordKey, SubWordDescriptor] = {}

    def parse(self) -> ParsedEntry:
        main_word = self._main_word()
        ctx = WalkContext(
            part_of_speech=self._pos,
            source=self._source,
            language=self._language,
            entry_gram=self._doc.get("gram") if isinstance(self._doc.get("gram"), str) else None,
            entry_labels=tuple(_list(self._doc.get("lbs"))),
            short_definitions=self._short_defs,
            owner=self._main,
        )
        for result in walk_senses(self._doc.get("def"), ctx):
            self._add_definition(self._definitions, result.definition)

        self._variants()
        self._inflections()
        self._cross_references(main_word)
        self._related_words("syns", Provenance.SYNONYM)
        self._related_words("ants", Provenance.ANTONYM)
        self._defined_run_ons()
        self._undefined_run_ons()

        return ParsedEntry(
            main_word=main_word,
            source=self._source,
            definitions=self._definitions,
            sub_words=list(self._subs.values()),
        )

    # ------------------------------------------------------------------
    # Main word
    # ------------------------------------------------------------------

    def _main_word(self) -> WordNode:
        hwi = _dict(self._doc.get("hwi"))
        prs = _list(hwi.get("prs"))
        altprs = _list(hwi.get("altprs"))
        entry_id = self._meta.get("id")
        variant = None
        if isinstance(entry_id, str) and ":" in entry_id:
            variant = entry_id.rsplit(":", 1)[1] or None
        highlight = self._meta.get("highlight")
        return WordNode(
            text=self._main,
            language=self._language,
            phonetic=self._phonetic(prs) or self._phonetic(altprs),
            audio=self._audio(prs + altprs),
            etymology=self._etymology(self._doc.get("et")),
            source_id=f"{self._source.value}-{entry_id}-{self._meta.get('uuid')}",
            variant=variant,
            is_highlighted=None if highlight is None else highlight == "yes",
        )

    def _short_definitions(self) -> frozenset[str]:
        app = _dict(self._meta.get("app-shortdef"))
        raw = app.get("def") if app.get("def") else self._doc.get("shortdef")
        cleaned = (strip_markup(d) for d in _list(raw))
        return frozenset(d for d in cleaned if d)

    @staticmethod
    def _phonetic(prs: list) -> str | None:
        if not prs or not isinstance(prs[0], dict):
            return None
        return normalize_text(prs[0].get("ipa")) or normalize_text(prs[0].get("mw"))

    def _audio(self, prs: list) -> list[str]:
        urls: list[str] = []
        for pr in prs:
            name = _dict(_dict(pr).get("sound")).get("audio")
            if not isinstance(name, str) or not name:
                continue
            url = audio_url(self._config.audio_base_url, name, self._language)
            if url not in urls:
                urls.append(url)
        return urls

    @staticmethod
    def _etymology(et: Any) -> str | None:
        parts = [
            item[1] for item in _list(et)
            if isinstance(item, list) and len(item) >= 2 and isinstance(item[1], str)
        ]
        return strip_markup(" ".join(parts)) if parts else None

    # ------------------------------------------------------------------
    # Arena
    # ------------------------------------------------------------------

    def _sub_word(self, text: str, prs: Any = None, etymology: str | None = None) -> WordNode:
        prs = _list(prs)
        return WordNode(
            text=text,
            language=self._language,
            phonetic=self._phonetic(prs),
            audio=self._audio(prs),
            etymology=etymology,
        )

    @staticmethod
    def _add_definition(target: list[DefinitionNode], definition: DefinitionNode) -> None:
        key = (definition.text, definition.part_of_speech)
        if any((d.text, d.part_of_speech) == key for d in target):
            return
        target.append(definition)

    def _add_sub(
        self,
        word: WordNode,
        provenance: Provenance,
        definitions: list[DefinitionNode] | None = None,
    ) -> SubWordDescriptor | None:
        """Register a sub-word, merging with an earlier one of the same key."""
        if word.text == self._main:
            return None
        existing = self._subs.get(word.key)
        if existing is None:
            existing = SubWordDescriptor(word=word, provenance=provenance)
            self._subs[word.key] = existing
        else:
            old = existing.word
            old.phonetic = old.phonetic or word.phonetic
            old.etymology = old.etymology or word.etymology
            old.audio.extend(url for url in word.audio if url not in old.audio)
        for definition in definitions or ():
            self._add_definition(existing.definitions, definition)
        return existing

    @staticmethod
    def _connect(sub: SubWordDescriptor, from_word: Symbol, to_word: Symbol,
                 resolution: Resolution | None) -> None:
        if resolution is None:
            return
        for rel_type in resolution.types:
            edge = RelationshipEdge(from_word, to_word, rel_type, describe(rel_type))
            if edge not in sub.edges:
                sub.edges.append(edge)

    def _definition(self, text: str, pos: PartOfSpeech | None = None,
                    **kwargs: Any) -> DefinitionNode:
        return DefinitionNode(
            text=text,
            part_of_speech=pos or self._pos,
            source=self._source,
            language=self._language,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _variants(self) -> None:
        for vr in _list(self._doc.get("vrs")):
            vr = _dict(vr)
            form = clean_headword(vr.get("va"))
            if not form or form == self._main:
                continue
            word = self._sub_word(form, vr.get("prs"), strip_markup(vr.get("vl")))
            sub = self._add_sub(
                word, Provenance.VARIANT,
                [self._definition(f'Variant form of "{self._main}"')],
            )
            if sub is not None:
                self._connect(sub, MAIN_WORD, word.key, resolve(Provenance.VARIANT))

    def _inflections(self) -> None:
        previous_label: str | None = None
        for inflection in _list(self._doc.get("ins")):
            inflection = _dict(inflection)
            label = strip_markup(inflection.get("il"))
            if label and label.lower() in _CONTINUATION_LABELS:
                label = previous_label
            else:
                previous_label = label
            form = clean_headword(inflection.get("if"))
            if not form or form == self._main:
                continue

            resolution = resolve(
                Provenance.INFLECTION,
                form=form, base=self._main, label=label, part_of_speech=self._pos,
            )
            definitions = []
            pos = part_of_speech_for(resolution.primary) or self._pos
            text = form_definition(resolution.primary, self._main, pos)
            if text:
                definitions.append(self._definition(text, pos))
            word = self._sub_word(form, inflection.get("prs"), self._main)
            sub = self._add_sub(word, Provenance.INFLECTION, definitions)
            if sub is not None:
                self._connect(sub, MAIN_WORD, word.key, resolution)

    def _cross_references(self, main_word: WordNode) -> None:
        for cx in _list(self._doc.get("cxs")):
            cx = _dict(cx)
            label = strip_markup(cx.get("cxl"))
            targets = _list(cx.get("cxtis"))
            target = _dict(targets[0]).get("cxt") if targets else None
            target = clean_headword(_HOMOGRAPH_SUFFIX.sub("", target)) if isinstance(target, str) else None
            matched = classify_cross_reference(label)
            if matched is None or not target:
                logger.debug("Ignoring cross-reference %r -> %r in %r", label, target, self._main)
                continue

            text = f'{matched[1]} of "{target}"'
            self._add_definition(self._definitions, self._definition(text))
            main_word.etymology = text
            word = self._sub_word(target)
            sub = self._add_sub(word, Provenance.CROSS_REFERENCE)
            if sub is not None:
                self._connect(sub, word.key, MAIN_WORD,
                              resolve(Provenance.CROSS_REFERENCE, label=label))

    def _related_words(self, field: str, provenance: Provenance) -> None:
        for group in _list(self._meta.get(field)):
            for raw in _list(group):
                text = clean_headword(raw)
                if not text:
                    continue
                word = self._sub_word(text)
                sub = self._add_sub(word, provenance)
                if sub is not None:
                    self._connect(sub, MAIN_WORD, word.key, resolve(provenance))

    def _defined_run_ons(self) -> None:
        for dro in _list(self._doc.get("dros")):
            dro = _dict(dro)
            text = clean_headword(dro.get("drp"))
            if not text:
                continue
            is_phrasal = str(dro.get("gram") or "").strip().lower() == "phrasal verb"
            provenance = Provenance.PHRASAL_VERB if is_phrasal else Provenance.PHRASE
            pos = PartOfSpeech.PHRASAL_VERB if is_phrasal else PartOfSpeech.PHRASE
            ctx = WalkContext(
                part_of_speech=pos,
                source=self._source,
                language=self._language,
                entry_labels=tuple(_list(dro.get("lbs"))),
                owner=text,
            )
            results = walk_senses(dro.get("def"), ctx)
            word = self._sub_word(text, dro.get("prs"))
            sub = self._add_sub(word, provenance, [r.definition for r in results])
            if sub is None:
                continue
            self._connect(sub, MAIN_WORD, word.key, resolve(provenance))
            if is_phrasal:
                for result in results:
                    self._phrasal_variants(word.key, result.phrasal_variants,
                                           result.definition)

    def _phrasal_variants(self, owner: WordKey, variants: tuple[str, ...],
                          definition: DefinitionNode) -> None:
        for raw in variants:
            text = clean_headword(raw)
            if not text or text == owner.text:
                continue
            word = self._sub_word(text)
            sub = self._add_sub(word, Provenance.PHRASAL_VERB_VARIANT, [definition])
            if sub is not None:
                self._connect(sub, owner, word.key,
                              resolve(Provenance.PHRASAL_VERB_VARIANT))

    def _undefined_run_ons(self) -> None:
        for uro in _list(self._doc.get("uros")):
            uro = _dict(uro)
            text = clean_headword(uro.get("ure"))
            if not text:
                continue
            form_of = f'Form of "{self._main}"'
            summary = summarize_dt(self._dt_tokens(uro.get("utxt"), text), self._language)
            gram = uro.get("gram") if isinstance(uro.get("gram"), str) else None
            definition = self._definition(
                form_of,
                map_part_of_speech(uro.get("fl")),
                grammatical_note=normalize_text(gram),
                usage_note=summary.usage_note,
                examples=list(summary.examples),
            )
            word = self._sub_word(text, uro.get("prs"), form_of)
            sub = self._add_sub(word, Provenance.RUN_ON, [definition])
            if sub is None:
                continue
            self._connect(sub, MAIN_WORD, word.key, resolve(Provenance.RUN_ON))
            self._run_on_inflections(word.key, uro)

    def _run_on_inflections(self, owner: WordKey, uro: dict) -> None:
        pos = map_part_of_speech(uro.get("fl"))
        for inflection in _list(uro.get("ins")):
            inflection = _dict(inflection)
            form = clean_headword(inflection.get("if"))
            if not form or form == owner.text:
                continue
            label = strip_markup(inflection.get("il"))
            resolution = resolve(Provenance.RUN_ON_INFLECTION, label=label)
            is_plural = resolution.primary is RelationshipType.PLURAL_EN
            category = strip_markup(inflection.get("ifc"))
            definition = self._definition(
                f'{"Plural" if is_plural else "Inflected"} form of "{owner.text}"',
                PartOfSpeech.NOUN if is_plural else pos,
                grammatical_note=f"Inflection category: {category}" if category else None,
            )
            word = self._sub_word(form, inflection.get("prs"), owner.text)
            sub = self._add_sub(word, Provenance.RUN_ON_INFLECTION, [definition])
            if sub is not None:
                self._connect(sub, owner, word.key, resolution)

    def _dt_tokens(self, raw: Any, owner: str) -> list:
        tokens = []
        for item in _list(raw):
            try:
                token = decode_dt_token(item)
            except ParseDefect as exc:
                logger.warning("Skipping malformed run-on text in %r: %s", owner, exc)
                continue
            if token is not None:
                tokens.append(token)
        return tokens
