"""LexiconStore: the SQLite-backed store that entries are materialized into."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from lexingest import db as _db
from lexingest import history as _hist
from lexingest import validator as _val
from lexingest.exceptions import DatabaseError, PersistenceConflict
from lexingest.models import (
    AudioModel,
    DefinitionModel,
    EntryStatus,
    ExampleModel,
    IngestionRecord,
    RelationshipModel,
    RelationshipType,
    ValidationResult,
    WordModel,
)

_T = TypeVar("_T")


class LexiconStore:
    """A store of words, definitions, examples, audio and relationships.

    One connection is shared by every thread of an ingestion; statements
    are serialized through :attr:`lock`. Only one transaction runs at a
    time per store.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        try:
            self._conn = _db.connect(db_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open database {self._db_path}: {e}") from e
        try:
            _db.check_schema_version(self._conn)
            _db.init_db(self._conn)
        except BaseException:
            self._conn.close()
            raise
        self._lock = threading.RLock()
        self._txn_lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._db_path

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> LexiconStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Run a block in a single transaction.

        Commits on success. Any error rolls the whole block back; SQLite
        errors are re-raised as PersistenceConflict.
        """
        with self._txn_lock:
            with self._lock:
                self._conn.execute("BEGIN")
            try:
                yield self._conn
                with self._lock:
                    self._conn.commit()
            except sqlite3.Error as e:
                self._rollback()
                raise PersistenceConflict(str(e)) from e
            except BaseException:
                self._rollback()
                raise

    def _rollback(self) -> None:
        with self._lock:
            if self._conn.in_transaction:
                self._conn.rollback()

    def run(self, func: Callable[..., _T], *args: Any) -> _T:
        """Call ``func(conn, *args)`` while holding the statement lock."""
        with self._lock:
            return func(self._conn, *args)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_word(self, word: str, language: str = "en") -> WordModel | None:
        with self._lock:
            row = _db.get_word_row(self._conn, word, language)
        if row is None:
            return None
        return _row_to_word(row)

    def get_definitions(self, word: str, language: str = "en") -> list[DefinitionModel]:
        """Definitions linked to a word, primary first, with their examples."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT d.*, wd.is_primary FROM definitions d "
                "JOIN word_definitions wd ON wd.definition_rowid = d.rowid "
                "JOIN words w ON wd.word_rowid = w.rowid "
                "WHERE w.word = ? AND w.language_code = ? "
                "ORDER BY wd.is_primary DESC, d.rowid",
                (word, language),
            ).fetchall()
            examples = {
                row["rowid"]: self._conn.execute(
                    "SELECT * FROM examples WHERE definition_rowid = ? ORDER BY rowid",
                    (row["rowid"],),
                ).fetchall()
                for row in rows
            }
        return [_row_to_definition(row, examples[row["rowid"]]) for row in rows]

    def get_relationships(
        self,
        word: str,
        language: str = "en",
        *,
        type: RelationshipType | str | None = None,
        direction: str = "from",
    ) -> list[RelationshipModel]:
        """Edges leaving (``direction="from"``) or reaching (``"to"``) a word."""
        if direction not in ("from", "to"):
            raise ValueError(f"direction must be 'from' or 'to', got {direction!r}")
        anchor = "f" if direction == "from" else "t"
        sql = (
            "SELECT f.word AS from_word, t.word AS to_word, r.type, r.description "
            "FROM word_relationships r "
            "JOIN words f ON r.from_word_rowid = f.rowid "
            "JOIN words t ON r.to_word_rowid = t.rowid "
            f"WHERE {anchor}.word = ? AND {anchor}.language_code = ?"
        )
        params: list[Any] = [word, language]
        if type is not None:
            sql += " AND r.type = ?"
            params.append(RelationshipType(type).value)
        sql += " ORDER BY r.rowid"
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [
            RelationshipModel(
                from_word=row["from_word"],
                to_word=row["to_word"],
                type=row["type"],
                description=row["description"],
            )
            for row in rows
        ]

    def get_audio(self, word: str, language: str = "en") -> list[AudioModel]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT a.*, wa.is_primary FROM audio a "
                "JOIN word_audio wa ON wa.audio_rowid = a.rowid "
                "JOIN words w ON wa.word_rowid = w.rowid "
                "WHERE w.word = ? AND w.language_code = ? "
                "ORDER BY wa.is_primary DESC, a.rowid",
                (word, language),
            ).fetchall()
        return [
            AudioModel(
                url=row["url"],
                source=row["source"],
                language=row["language_code"],
                is_primary=bool(row["is_primary"]),
                is_orphaned=bool(row["is_orphaned"]),
            )
            for row in rows
        ]

    def counts(self) -> dict[str, int]:
        """Row count of every content table."""
        with self._lock:
            return {table: _db.count_rows(self._conn, table) for table in _db.TABLES}

    # ------------------------------------------------------------------
    # Ingestion log and validation
    # ------------------------------------------------------------------

    def record_ingestion(
        self,
        headword: str | None,
        status: EntryStatus,
        *,
        source_id: str | None = None,
        message: str | None = None,
    ) -> None:
        """Log an entry outcome in its own short transaction."""
        with self._txn_lock, self._lock, self._conn:
            _hist.record_ingestion(
                self._conn, headword, status, source_id=source_id, message=message
            )

    def history(
        self,
        *,
        headword: str | None = None,
        status: EntryStatus | str | None = None,
        since: str | None = None,
        limit: int | None = None,
    ) -> list[IngestionRecord]:
        with self._lock:
            return _hist.query_history(
                self._conn, headword=headword, status=status, since=since, limit=limit
            )

    def validate(self) -> list[ValidationResult]:
        with self._lock:
            return _val.validate_all(self._conn)


# ---------------------------------------------------------------------------
# Row converters
# ---------------------------------------------------------------------------

def _row_to_word(row: sqlite3.Row) -> WordModel:
    highlighted = row["is_highlighted"]
    return WordModel(
        id=row["rowid"],
        word=row["word"],
        language=row["language_code"],
        phonetic=row["phonetic"],
        etymology=row["etymology"],
        source_id=row["source_id"],
        variant=row["variant"],
        is_highlighted=None if highlighted is None else bool(highlighted),
    )


def _row_to_definition(row: sqlite3.Row, examples: list[sqlite3.Row]) -> DefinitionModel:
    return DefinitionModel(
        id=row["rowid"],
        definition=row["definition"],
        part_of_speech=row["part_of_speech"],
        language=row["language_code"],
        source=row["source"],
        subject_status_labels=row["subject_status_labels"],
        general_labels=row["general_labels"],
        grammatical_note=row["grammatical_note"],
        usage_note=row["usage_note"],
        in_short_def=bool(row["is_in_short_def"]),
        plural_only=bool(row["is_plural"]),
        is_primary=bool(row["is_primary"]),
        examples=tuple(
            ExampleModel(
                id=ex["rowid"],
                example=ex["example"],
                grammatical_note=ex["grammatical_note"],
                language=ex["language_code"],
            )
            for ex in examples
        ),
    )
