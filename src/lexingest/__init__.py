"""
Ingestion pipeline for upstream dictionary entries.

Parses Merriam-Webster style entries into an intermediate word graph and
materializes it idempotently into SQLite.

Example usage:
    from lexingest import LexiconStore, ingest_batch, load_documents

    with LexiconStore("lexicon.db") as store:
        result = ingest_batch(store, load_documents("walk.json"))
        print(f"Ingested {result.success_count}/{result.total_count} entries")
"""

__version__ = "0.1.0"

from .config import (
    IngestConfig as IngestConfig,
    load_config as load_config,
)

from .exceptions import (
    LexIngestError as LexIngestError,
    ParseDefect as ParseDefect,
    UpstreamDataAbsent as UpstreamDataAbsent,
    PersistenceConflict as PersistenceConflict,
    GraphIntegrityError as GraphIntegrityError,
    DatabaseError as DatabaseError,
    ConfigError as ConfigError,
)

from .models import (
    PartOfSpeech as PartOfSpeech,
    RelationshipType as RelationshipType,
    SourceType as SourceType,
    Provenance as Provenance,
    EntryStatus as EntryStatus,
    ParsedEntry as ParsedEntry,
    EntryResult as EntryResult,
    BatchResult as BatchResult,
)

from .parser import parse_entry as parse_entry
from .materializer import materialize as materialize
from .store import LexiconStore as LexiconStore
from .ingest import (
    ingest_entry as ingest_entry,
    ingest_batch as ingest_batch,
    load_documents as load_documents,
)
