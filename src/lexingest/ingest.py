"""
Ingestion driver: parse, materialize and log upstream entries one by one.
"""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any, List, Union

from lexingest.config import IngestConfig
from lexingest.exceptions import UpstreamDataAbsent
from lexingest.materializer import materialize
from lexingest.models import BatchResult, EntryResult, EntryStatus
from lexingest.parser import headword_of, parse_entry
from lexingest.store import LexiconStore

logger = logging.getLogger(__name__)


def ingest_entry(
    store: LexiconStore,
    document: Any,
    config: IngestConfig | None = None,
    index: int = 0,
) -> EntryResult:
    """Ingest one upstream entry in its own transaction.

    Entries without a headword give a ``no_result`` status and nothing is
    written. Persistence errors roll the entry back and propagate.

    Raises:
        PersistenceConflict: If the transaction fails or times out
    """
    config = config or IngestConfig()
    try:
        parsed = parse_entry(document, config)
    except UpstreamDataAbsent as e:
        logger.info("No result for entry #%d: %s", index + 1, e)
        store.record_ingestion(None, EntryStatus.NO_RESULT, message=str(e))
        return EntryResult(
            index=index,
            headword=None,
            status=EntryStatus.NO_RESULT,
            message=str(e),
        )

    headword = parsed.main_word.text
    with store.transaction():
        materialized = materialize(store, parsed, config)
    store.record_ingestion(
        headword, EntryStatus.SUCCESS, source_id=parsed.main_word.source_id
    )
    logger.info(
        "Ingested %r (%d words, %d definitions, %d relationships)",
        headword, materialized.words, materialized.definitions,
        materialized.relationships,
    )
    return EntryResult(
        index=index,
        headword=headword,
        status=EntryStatus.SUCCESS,
        message=f"Ingested {headword!r}",
        materialized=materialized,
    )


def ingest_batch(
    store: LexiconStore,
    documents: Iterable[Any],
    config: IngestConfig | None = None,
) -> BatchResult:
    """Ingest entries sequentially; a failed entry does not stop the batch.

    Returns:
        BatchResult with details of each entry
    """
    config = config or IngestConfig()
    start_time = time.time()
    results: List[EntryResult] = []

    for i, document in enumerate(documents):
        results.append(_ingest_one(store, document, config, i))

    duration = time.time() - start_time
    return BatchResult(
        total_count=len(results),
        success_count=sum(1 for r in results if r.status is EntryStatus.SUCCESS),
        no_result_count=sum(1 for r in results if r.status is EntryStatus.NO_RESULT),
        failure_count=sum(1 for r in results if r.status is EntryStatus.FAILED),
        entries=results,
        duration_seconds=duration,
    )


def _ingest_one(
    store: LexiconStore, document: Any, config: IngestConfig, index: int
) -> EntryResult:
    try:
        return ingest_entry(store, document, config, index)
    except Exception as e:
        # the entry's transaction has already rolled back
        headword = headword_of(document)
        logger.exception("Error ingesting entry #%d (%s)", index + 1, headword)
        store.record_ingestion(headword, EntryStatus.FAILED, message=str(e))
        return EntryResult(
            index=index,
            headword=headword,
            status=EntryStatus.FAILED,
            message=f"Error: {e}",
        )


def load_documents(source: Union[str, Path]) -> list[Any]:
    """Read upstream entries from a JSON file.

    The file holds either one entry object or a list of them, as returned
    by the upstream API.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON
    """
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if isinstance(data, list):
        return data
    return [data]
