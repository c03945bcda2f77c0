"""Domain model dataclasses and enums for lexingest."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Union

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PartOfSpeech(str, Enum):
    """Part-of-speech tags attached to definitions."""

    NOUN = "noun"
    VERB = "verb"
    PHRASAL_VERB = "phrasal_verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PRONOUN = "pronoun"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    INTERJECTION = "interjection"
    ABBREVIATION = "abbreviation"
    PHRASE = "phrase"
    UNDEFINED = "undefined"


class RelationshipType(str, Enum):
    """Closed vocabulary of typed word-to-word edges."""

    SYNONYM = "synonym"
    ANTONYM = "antonym"
    RELATED = "related"
    STEM = "stem"
    PHRASAL_VERB = "phrasal_verb"
    PHRASE = "phrase"
    ALTERNATIVE_SPELLING = "alternative_spelling"
    PLURAL_EN = "plural_en"
    PAST_TENSE_EN = "past_tense_en"
    PAST_PARTICIPLE_EN = "past_participle_en"
    PRESENT_PARTICIPLE_EN = "present_participle_en"
    THIRD_PERSON_EN = "third_person_en"
    COMPARATIVE_EN = "comparative_en"
    SUPERLATIVE_EN = "superlative_en"
    VARIANT_FORM_PHRASAL_VERB_EN = "variant_form_phrasal_verb_en"


class SourceType(str, Enum):
    """Dictionary a definition or audio file was taken from."""

    MERRIAM_LEARNERS = "merriam_learners"
    MERRIAM_INTERMEDIATE = "merriam_intermediate"
    USER = "user"


class Provenance(str, Enum):
    """Entry section a sub-word was extracted from."""

    VARIANT = "variant"
    INFLECTION = "inflection"
    CROSS_REFERENCE = "cross_reference"
    SYNONYM = "synonym"
    ANTONYM = "antonym"
    PHRASAL_VERB = "phrasal_verb"
    PHRASAL_VERB_VARIANT = "phrasal_verb_variant"
    PHRASE = "phrase"
    RUN_ON = "run_on"
    RUN_ON_INFLECTION = "run_on_inflection"


class EntryStatus(str, Enum):
    """Outcome of ingesting one upstream entry."""

    SUCCESS = "success"
    NO_RESULT = "no_result"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Intermediate graph (parser output)
# ---------------------------------------------------------------------------

class WordKey(NamedTuple):
    """Natural key of a word: its text and language code."""

    text: str
    language: str


MAIN_WORD = "main"

# An edge endpoint: the MAIN_WORD sentinel or a sub-word's natural key.
Symbol = Union[str, WordKey]


@dataclass(slots=True)
class ExampleNode:
    """An example sentence attached to a definition."""

    text: str
    grammatical_note: str | None = None
    language: str = "en"


@dataclass(slots=True)
class DefinitionNode:
    """A parsed definition and its examples."""

    text: str
    part_of_speech: PartOfSpeech
    source: SourceType
    language: str
    subject_status_labels: str | None = None
    general_labels: str | None = None
    grammatical_note: str | None = None
    usage_note: str | None = None
    in_short_def: bool = False
    plural_only: bool = False
    examples: list[ExampleNode] = field(default_factory=list)

    def identity(self) -> tuple:
        """The full content tuple that makes a definition row unique."""
        return (
            self.text,
            self.part_of_speech.value,
            self.language,
            self.source.value,
            self.subject_status_labels,
            self.general_labels,
            self.grammatical_note,
            self.usage_note,
            self.in_short_def,
            self.plural_only,
        )


@dataclass(slots=True)
class WordNode:
    """A word as extracted from an entry, before it has a row id."""

    text: str
    language: str
    phonetic: str | None = None
    audio: list[str] = field(default_factory=list)
    etymology: str | None = None
    source_id: str | None = None
    variant: str | None = None
    is_highlighted: bool | None = None

    @property
    def key(self) -> WordKey:
        return WordKey(self.text, self.language)


@dataclass(frozen=True, slots=True)
class RelationshipEdge:
    """A typed edge between two symbols of the intermediate graph."""

    from_word: Symbol
    to_word: Symbol
    type: RelationshipType
    description: str | None = None


@dataclass(slots=True)
class SubWordDescriptor:
    """A sub-word with its own definitions and the edges that reach it."""

    word: WordNode
    provenance: Provenance
    definitions: list[DefinitionNode] = field(default_factory=list)
    edges: list[RelationshipEdge] = field(default_factory=list)


@dataclass(slots=True)
class ParsedEntry:
    """Intermediate graph for one upstream entry."""

    main_word: WordNode
    source: SourceType
    definitions: list[DefinitionNode] = field(default_factory=list)
    sub_words: list[SubWordDescriptor] = field(default_factory=list)

    @property
    def edges(self) -> list[RelationshipEdge]:
        return [edge for sub in self.sub_words for edge in sub.edges]

    def find_sub_word(self, key: WordKey) -> SubWordDescriptor | None:
        for sub in self.sub_words:
            if sub.word.key == key:
                return sub
        return None


# ---------------------------------------------------------------------------
# Persisted rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WordModel:
    """A stored word."""

    id: int
    word: str
    language: str
    phonetic: str | None
    etymology: str | None
    source_id: str | None
    variant: str | None
    is_highlighted: bool | None


@dataclass(frozen=True, slots=True)
class ExampleModel:
    """A stored example sentence."""

    id: int
    example: str
    grammatical_note: str | None
    language: str


@dataclass(frozen=True, slots=True)
class DefinitionModel:
    """A stored definition as linked to one word."""

    id: int
    definition: str
    part_of_speech: str
    language: str
    source: str
    subject_status_labels: str | None
    general_labels: str | None
    grammatical_note: str | None
    usage_note: str | None
    in_short_def: bool
    plural_only: bool
    is_primary: bool
    examples: tuple[ExampleModel, ...]


@dataclass(frozen=True, slots=True)
class RelationshipModel:
    """A stored edge, with both endpoints as word text."""

    from_word: str
    to_word: str
    type: str
    description: str | None


@dataclass(frozen=True, slots=True)
class AudioModel:
    """A stored audio file as linked to one word."""

    url: str
    source: str
    language: str
    is_primary: bool
    is_orphaned: bool


@dataclass(frozen=True, slots=True)
class IngestionRecord:
    """A single ingestion log entry."""

    id: int
    headword: str | None
    source_id: str | None
    status: str
    message: str | None
    timestamp: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single validation finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str


# ---------------------------------------------------------------------------
# Ingestion results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MaterializedEntry:
    """Row counts touched while materializing one entry."""

    main_word_id: int
    words: int
    definitions: int
    examples: int
    relationships: int


@dataclass(slots=True)
class EntryResult:
    """Result of ingesting a single upstream entry."""

    index: int
    headword: str | None
    status: EntryStatus
    message: str
    materialized: MaterializedEntry | None = None

    @property
    def success(self) -> bool:
        return self.status is EntryStatus.SUCCESS


@dataclass(slots=True)
class BatchResult:
    """Result of ingesting a sequence of upstream entries."""

    total_count: int
    success_count: int
    no_result_count: int
    failure_count: int
    entries: list[EntryResult]
    duration_seconds: float

    @property
    def failed(self) -> list[EntryResult]:
        return [e for e in self.entries if e.status is EntryStatus.FAILED]
