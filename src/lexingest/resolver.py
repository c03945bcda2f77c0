"""Relationship classification tables and helpers for lexingest."""

from __future__ import annotations

from typing import NamedTuple

from lexingest.models import PartOfSpeech, Provenance, RelationshipType

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

# Checked in order; the first keyword contained in the label wins.
CROSS_REFERENCE_FORMS: tuple[tuple[str, RelationshipType, str], ...] = (
    ("past tense and past participle", RelationshipType.PAST_TENSE_EN,
     "Past tense and past participle"),
    ("past participle", RelationshipType.PAST_PARTICIPLE_EN, "Past participle"),
    ("past tense", RelationshipType.PAST_TENSE_EN, "Past tense"),
    ("present participle", RelationshipType.PRESENT_PARTICIPLE_EN,
     "Present participle"),
    ("third person singular", RelationshipType.THIRD_PERSON_EN,
     "Third person singular"),
    ("less common spelling", RelationshipType.ALTERNATIVE_SPELLING,
     "Less common spelling"),
)

INFLECTION_LABELS: dict[str, RelationshipType] = {
    "past": RelationshipType.PAST_TENSE_EN,
    "past tense": RelationshipType.PAST_TENSE_EN,
    "past participle": RelationshipType.PAST_PARTICIPLE_EN,
    "present participle": RelationshipType.PRESENT_PARTICIPLE_EN,
    "third person singular": RelationshipType.THIRD_PERSON_EN,
    "present tense third person singular": RelationshipType.THIRD_PERSON_EN,
    "plural": RelationshipType.PLURAL_EN,
    "comparative": RelationshipType.COMPARATIVE_EN,
    "superlative": RelationshipType.SUPERLATIVE_EN,
}

RELATIONSHIP_DESCRIPTIONS: dict[RelationshipType, str] = {
    RelationshipType.SYNONYM: "Synonym relationship",
    RelationshipType.ANTONYM: "Antonym relationship",
    RelationshipType.RELATED: "Related term",
    RelationshipType.STEM: "Stem relationship",
    RelationshipType.PHRASAL_VERB: "Phrasal verb",
    RelationshipType.PHRASE: "Phrase",
    RelationshipType.ALTERNATIVE_SPELLING: "Alternative spelling",
    RelationshipType.PLURAL_EN: "Plural form",
    RelationshipType.PAST_TENSE_EN: "Past tense form",
    RelationshipType.PAST_PARTICIPLE_EN: "Past participle form",
    RelationshipType.PRESENT_PARTICIPLE_EN: "Present participle form",
    RelationshipType.THIRD_PERSON_EN: "Third person singular form",
    RelationshipType.COMPARATIVE_EN: "Comparative form",
    RelationshipType.SUPERLATIVE_EN: "Superlative form",
    RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN: "Variant form of phrasal verb",
}

FORM_NAMES: dict[RelationshipType, str] = {
    RelationshipType.PLURAL_EN: "Plural",
    RelationshipType.PAST_TENSE_EN: "Past tense",
    RelationshipType.PAST_PARTICIPLE_EN: "Past participle",
    RelationshipType.PRESENT_PARTICIPLE_EN: "Present participle",
    RelationshipType.THIRD_PERSON_EN: "Third person singular",
    RelationshipType.COMPARATIVE_EN: "Comparative",
    RelationshipType.SUPERLATIVE_EN: "Superlative",
}

_VERB_FORMS = frozenset({
    RelationshipType.PAST_TENSE_EN,
    RelationshipType.PAST_PARTICIPLE_EN,
    RelationshipType.PRESENT_PARTICIPLE_EN,
    RelationshipType.THIRD_PERSON_EN,
})

_GRADED_POS = frozenset({PartOfSpeech.ADJECTIVE, PartOfSpeech.ADVERB})

# verb endings are only guessed for verbs and forms of unknown part of speech
_VERB_PATTERN_POS = frozenset({PartOfSpeech.VERB, PartOfSpeech.UNDEFINED, None})


class Resolution(NamedTuple):
    """A primary edge type, optionally paired with a ``related`` edge."""

    primary: RelationshipType
    with_related: bool = False

    @property
    def types(self) -> tuple[RelationshipType, ...]:
        if self.with_related and self.primary is not RelationshipType.RELATED:
            return (self.primary, RelationshipType.RELATED)
        return (self.primary,)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_cross_reference(label: str | None) -> tuple[RelationshipType, str] | None:
    """Return the edge type and form name for a cross-reference label."""
    if not label:
        return None
    lowered = label.lower()
    for keyword, rel_type, form_name in CROSS_REFERENCE_FORMS:
        if keyword in lowered:
            return rel_type, form_name
    return None


def classify_by_label(label: str | None) -> RelationshipType | None:
    if not label:
        return None
    return INFLECTION_LABELS.get(" ".join(label.lower().split()))


def classify_by_pattern(
    form: str, base: str | None, part_of_speech: PartOfSpeech | None
) -> RelationshipType | None:
    """Guess an inflection type from the form's ending."""
    if part_of_speech in _GRADED_POS:
        if form.endswith("est"):
            return RelationshipType.SUPERLATIVE_EN
        if form.endswith("er"):
            return RelationshipType.COMPARATIVE_EN
        return None
    if part_of_speech not in _VERB_PATTERN_POS:
        return None

    if form.endswith("ing"):
        return RelationshipType.PRESENT_PARTICIPLE_EN
    if base and form.endswith("s"):
        if len(form) == len(base) + 1:
            return RelationshipType.THIRD_PERSON_EN
        if form.endswith("es") and len(form) == len(base) + 2:
            return RelationshipType.THIRD_PERSON_EN
    if form.endswith("ed"):
        # past tense and past participle collapse into one edge
        return RelationshipType.PAST_TENSE_EN
    return None


def classify_inflection(
    form: str,
    base: str | None = None,
    label: str | None = None,
    part_of_speech: PartOfSpeech | None = None,
) -> RelationshipType | None:
    """Explicit labels first, surface patterns second."""
    return classify_by_label(label) or classify_by_pattern(form, base, part_of_speech)


def resolve(
    provenance: Provenance,
    *,
    form: str | None = None,
    base: str | None = None,
    label: str | None = None,
    part_of_speech: PartOfSpeech | None = None,
) -> Resolution | None:
    """Pick the edge type(s) connecting a sub-word to its owner.

    Returns None when nothing connects them (an unrecognised
    cross-reference label).
    """
    if provenance is Provenance.VARIANT:
        return Resolution(RelationshipType.ALTERNATIVE_SPELLING, True)
    if provenance is Provenance.INFLECTION:
        found = classify_inflection(form or "", base, label, part_of_speech)
        if found is None:
            return Resolution(RelationshipType.RELATED)
        return Resolution(found, True)
    if provenance is Provenance.CROSS_REFERENCE:
        matched = classify_cross_reference(label)
        if matched is None:
            return None
        return Resolution(matched[0], True)
    if provenance is Provenance.SYNONYM:
        return Resolution(RelationshipType.SYNONYM)
    if provenance is Provenance.ANTONYM:
        return Resolution(RelationshipType.ANTONYM)
    if provenance is Provenance.PHRASAL_VERB:
        return Resolution(RelationshipType.PHRASAL_VERB, True)
    if provenance is Provenance.PHRASAL_VERB_VARIANT:
        return Resolution(RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN)
    if provenance is Provenance.PHRASE:
        return Resolution(RelationshipType.PHRASE, True)
    if provenance is Provenance.RUN_ON:
        return Resolution(RelationshipType.STEM, True)
    if provenance is Provenance.RUN_ON_INFLECTION:
        if classify_by_label(label) is RelationshipType.PLURAL_EN:
            return Resolution(RelationshipType.PLURAL_EN, True)
        return Resolution(RelationshipType.RELATED)
    raise ValueError(f"Unknown provenance: {provenance!r}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def describe(rel_type: RelationshipType) -> str:
    """Human-readable description stored with an edge."""
    return RELATIONSHIP_DESCRIPTIONS.get(rel_type, "Related term")


def part_of_speech_for(rel_type: RelationshipType) -> PartOfSpeech | None:
    """Part of speech implied by a form relationship, if any."""
    if rel_type in _VERB_FORMS:
        return PartOfSpeech.VERB
    if rel_type is RelationshipType.PLURAL_EN:
        return PartOfSpeech.NOUN
    if rel_type in (RelationshipType.COMPARATIVE_EN, RelationshipType.SUPERLATIVE_EN):
        return PartOfSpeech.ADJECTIVE
    if rel_type in (RelationshipType.PHRASAL_VERB,
                    RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN):
        return PartOfSpeech.PHRASAL_VERB
    if rel_type is RelationshipType.PHRASE:
        return PartOfSpeech.PHRASE
    return None


def form_definition(rel_type: RelationshipType, base: str,
                    part_of_speech: PartOfSpeech | None = None) -> str | None:
    """Generated definition text for an inflected form, e.g.
    ``Present participle form of the verb "walk"``."""
    name = FORM_NAMES.get(rel_type)
    if name is None:
        return None
    if part_of_speech is PartOfSpeech.VERB:
        return f'{name} form of the verb "{base}"'
    return f'{name} form of "{base}"'
