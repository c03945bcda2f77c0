"""Persist a parsed entry into a LexiconStore.

Order of work inside the caller's transaction:

1. the main word, then every sub-word (recording row ids by natural key);
2. audio for every word;
3. definitions, word links and examples;
4. relationship edges, once every endpoint has a row id.

Examples and edges are written in fixed-size batches. The writes of one
batch run concurrently on a thread pool; batches run one after another.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from lexingest import db as _db
from lexingest.config import IngestConfig
from lexingest.exceptions import GraphIntegrityError, PersistenceConflict
from lexingest.models import (
    MAIN_WORD,
    DefinitionNode,
    ExampleNode,
    MaterializedEntry,
    ParsedEntry,
    RelationshipEdge,
    Symbol,
    WordKey,
    WordNode,
)
from lexingest.store import LexiconStore

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class _Deadline:
    def __init__(self, seconds: float) -> None:
        self._seconds = seconds
        self._expires = time.monotonic() + seconds

    def check(self, step: str) -> None:
        if time.monotonic() > self._expires:
            raise PersistenceConflict(
                f"Transaction timed out after {self._seconds:.1f}s during {step}"
            )


def _batches(items: Sequence[_T], size: int) -> list[Sequence[_T]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def resolve_symbol(symbol: Symbol, main_id: int, word_ids: dict[WordKey, int]) -> int:
    """Row id of an edge endpoint."""
    if symbol == MAIN_WORD:
        return main_id
    try:
        return word_ids[symbol]
    except KeyError:
        raise GraphIntegrityError(f"Edge endpoint {symbol!r} was never materialized") from None


def materialize(
    store: LexiconStore,
    parsed: ParsedEntry,
    config: IngestConfig | None = None,
) -> MaterializedEntry:
    """Write one parsed entry. Must run inside ``store.transaction()``."""
    config = config or IngestConfig()
    deadline = _Deadline(config.transaction_timeout)
    source = parsed.source.value

    # words first: every edge endpoint needs a row id
    main_id = store.run(_db.upsert_word, parsed.main_word)
    word_ids: dict[WordKey, int] = {parsed.main_word.key: main_id}
    for sub in parsed.sub_words:
        word_ids[sub.word.key] = store.run(_db.upsert_word, sub.word)
    deadline.check("word upserts")

    owners: list[tuple[int, WordNode, list[DefinitionNode]]] = [
        (main_id, parsed.main_word, parsed.definitions)
    ]
    owners.extend((word_ids[s.word.key], s.word, s.definitions) for s in parsed.sub_words)

    for word_id, word, _ in owners:
        for url in word.audio:
            audio_id = store.run(_db.upsert_audio, url, source, word.language)
            store.run(_db.link_audio, word_id, audio_id)
    deadline.check("audio upserts")

    pending_examples: list[tuple[int, ExampleNode]] = []
    definition_ids: set[int] = set()
    for word_id, _, definitions in owners:
        for definition in definitions:
            definition_id = store.run(_db.find_or_create_definition, definition)
            store.run(_db.link_definition, word_id, definition_id)
            definition_ids.add(definition_id)
            pending_examples.extend((definition_id, ex) for ex in definition.examples)
    deadline.check("definition upserts")

    with ThreadPoolExecutor(
        max_workers=max(config.example_batch_size, config.relationship_batch_size),
        thread_name_prefix="lexingest",
    ) as pool:
        _run_batches(
            pool,
            [lambda d=d, ex=ex: store.run(_db.upsert_example, d, ex)
             for d, ex in pending_examples],
            config.example_batch_size,
            deadline,
            "example upserts",
        )

        edges = _resolve_edges(parsed.edges, main_id, word_ids)
        _run_batches(
            pool,
            [lambda e=e: store.run(_db.upsert_relationship, *e) for e in edges],
            config.relationship_batch_size,
            deadline,
            "relationship upserts",
        )

    logger.debug(
        "Materialized %r: %d words, %d definitions, %d examples, %d edges",
        parsed.main_word.text, len(word_ids), len(definition_ids),
        len(pending_examples), len(edges),
    )
    return MaterializedEntry(
        main_word_id=main_id,
        words=len(word_ids),
        definitions=len(definition_ids),
        examples=len(pending_examples),
        relationships=len(edges),
    )


def _resolve_edges(
    edges: list[RelationshipEdge], main_id: int, word_ids: dict[WordKey, int]
) -> list[tuple[int, int, str, str | None]]:
    resolved: list[tuple[int, int, str, str | None]] = []
    seen: set[tuple[int, int, str]] = set()
    for edge in edges:
        from_id = resolve_symbol(edge.from_word, main_id, word_ids)
        to_id = resolve_symbol(edge.to_word, main_id, word_ids)
        if from_id == to_id:
            logger.debug("Skipping self-loop %s edge on %r", edge.type.value, edge.to_word)
            continue
        key = (from_id, to_id, edge.type.value)
        if key in seen:
            continue
        seen.add(key)
        resolved.append((from_id, to_id, edge.type.value, edge.description))
    return resolved


def _run_batches(
    pool: ThreadPoolExecutor,
    tasks: list[Callable[[], object]],
    size: int,
    deadline: _Deadline,
    step: str,
) -> None:
    """Run tasks batch by batch; a batch finishes before the next starts."""
    for batch in _batches(tasks, size):
        deadline.check(step)
        futures = [pool.submit(task) for task in batch]
        for future in futures:
            future.result()
    deadline.check(step)
