"""Database connection, DDL, and low-level upserts for lexingest."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from lexingest.exceptions import DatabaseError
from lexingest.models import DefinitionNode, ExampleNode, WordNode

SCHEMA_VERSION = "1.0"

TABLES = (
    "words",
    "definitions",
    "word_definitions",
    "examples",
    "audio",
    "word_audio",
    "word_relationships",
)

_NOW = "strftime('%Y-%m-%dT%H:%M:%f', 'now')"

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = f"""
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Words
CREATE TABLE IF NOT EXISTS words (
    rowid INTEGER PRIMARY KEY,
    word TEXT NOT NULL,
    language_code TEXT NOT NULL,
    phonetic TEXT,
    etymology TEXT,
    source_id TEXT,
    variant TEXT,
    is_highlighted BOOLEAN,
    created_at TEXT NOT NULL DEFAULT ({_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({_NOW}),
    UNIQUE (word, language_code)
);
CREATE INDEX IF NOT EXISTS word_text_index ON words (word);

-- Definitions (identity is the whole content tuple)
CREATE TABLE IF NOT EXISTS definitions (
    rowid INTEGER PRIMARY KEY,
    definition TEXT NOT NULL,
    part_of_speech TEXT NOT NULL,
    language_code TEXT NOT NULL,
    source TEXT NOT NULL,
    subject_status_labels TEXT,
    general_labels TEXT,
    grammatical_note TEXT,
    usage_note TEXT,
    is_in_short_def BOOLEAN NOT NULL DEFAULT 0 CHECK (is_in_short_def IN (0, 1)),
    is_plural BOOLEAN NOT NULL DEFAULT 0 CHECK (is_plural IN (0, 1)),
    created_at TEXT NOT NULL DEFAULT ({_NOW})
);
CREATE UNIQUE INDEX IF NOT EXISTS definition_content_index ON definitions (
    definition, part_of_speech, language_code, source,
    IFNULL(subject_status_labels, ''), IFNULL(general_labels, ''),
    IFNULL(grammatical_note, ''), IFNULL(usage_note, ''),
    is_in_short_def, is_plural
);

CREATE TABLE IF NOT EXISTS word_definitions (
    word_rowid INTEGER NOT NULL REFERENCES words (rowid) ON DELETE CASCADE,
    definition_rowid INTEGER NOT NULL REFERENCES definitions (rowid) ON DELETE CASCADE,
    is_primary BOOLEAN NOT NULL DEFAULT 0 CHECK (is_primary IN (0, 1)),
    UNIQUE (word_rowid, definition_rowid)
);
CREATE INDEX IF NOT EXISTS word_definition_definition_index
    ON word_definitions (definition_rowid);

CREATE TABLE IF NOT EXISTS examples (
    rowid INTEGER PRIMARY KEY,
    definition_rowid INTEGER NOT NULL REFERENCES definitions (rowid) ON DELETE CASCADE,
    example TEXT NOT NULL,
    grammatical_note TEXT,
    language_code TEXT NOT NULL,
    UNIQUE (definition_rowid, example)
);

-- Audio
CREATE TABLE IF NOT EXISTS audio (
    rowid INTEGER PRIMARY KEY,
    url TEXT NOT NULL,
    source TEXT NOT NULL,
    language_code TEXT NOT NULL,
    is_orphaned BOOLEAN NOT NULL DEFAULT 0 CHECK (is_orphaned IN (0, 1)),
    UNIQUE (url)
);

CREATE TABLE IF NOT EXISTS word_audio (
    word_rowid INTEGER NOT NULL REFERENCES words (rowid) ON DELETE CASCADE,
    audio_rowid INTEGER NOT NULL REFERENCES audio (rowid) ON DELETE CASCADE,
    is_primary BOOLEAN NOT NULL DEFAULT 0 CHECK (is_primary IN (0, 1)),
    UNIQUE (word_rowid, audio_rowid)
);

-- Relationships
CREATE TABLE IF NOT EXISTS word_relationships (
    rowid INTEGER PRIMARY KEY,
    from_word_rowid INTEGER NOT NULL REFERENCES words (rowid) ON DELETE CASCADE,
    to_word_rowid INTEGER NOT NULL REFERENCES words (rowid) ON DELETE CASCADE,
    type TEXT NOT NULL,
    description TEXT,
    UNIQUE (from_word_rowid, to_word_rowid, type),
    CHECK (from_word_rowid != to_word_rowid)
);
CREATE INDEX IF NOT EXISTS word_relationship_target_index
    ON word_relationships (to_word_rowid);

-- Ingestion log
CREATE TABLE IF NOT EXISTS ingestion_log (
    rowid INTEGER PRIMARY KEY,
    headword TEXT,
    source_id TEXT,
    status TEXT NOT NULL,
    message TEXT,
    timestamp TEXT NOT NULL DEFAULT ({_NOW})
);
CREATE INDEX IF NOT EXISTS ingestion_log_headword_index ON ingestion_log (headword);
"""


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection usable from the materializer's workers."""
    db_path_str = str(db_path)
    conn = sqlite3.connect(db_path_str, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        f"VALUES ('created_at', {_NOW})",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    if table not in TABLES and table != "ingestion_log":
        raise ValueError(f"Unknown table: {table}")
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


# ---------------------------------------------------------------------------
# Words
# ---------------------------------------------------------------------------

def get_word_rowid(conn: sqlite3.Connection, word: str, language: str) -> int | None:
    row = conn.execute(
        "SELECT rowid FROM words WHERE word = ? AND language_code = ?",
        (word, language),
    ).fetchone()
    return row[0] if row else None


def get_word_row(conn: sqlite3.Connection, word: str, language: str) -> sqlite3.Row | None:
    return conn.execute(
        "SELECT * FROM words WHERE word = ? AND language_code = ?",
        (word, language),
    ).fetchone()


def upsert_word(conn: sqlite3.Connection, node: WordNode) -> int:
    """Insert a word or fill in the fields this node supplies.

    A NULL in the node never replaces a stored value.
    """
    conn.execute(
        "INSERT INTO words "
        "(word, language_code, phonetic, etymology, source_id, variant, is_highlighted) "
        "VALUES (?, ?, ?, ?, ?, ?, ?) "
        "ON CONFLICT (word, language_code) DO UPDATE SET "
        "phonetic = COALESCE(excluded.phonetic, words.phonetic), "
        "etymology = COALESCE(excluded.etymology, words.etymology), "
        "source_id = COALESCE(excluded.source_id, words.source_id), "
        "variant = COALESCE(excluded.variant, words.variant), "
        "is_highlighted = COALESCE(excluded.is_highlighted, words.is_highlighted), "
        f"updated_at = {_NOW}",
        (
            node.text,
            node.language,
            node.phonetic,
            node.etymology,
            node.source_id,
            node.variant,
            node.is_highlighted,
        ),
    )
    return conn.execute(
        "SELECT rowid FROM words WHERE word = ? AND language_code = ?",
        (node.text, node.language),
    ).fetchone()[0]


# ---------------------------------------------------------------------------
# Definitions and examples
# ---------------------------------------------------------------------------

_DEFINITION_MATCH = (
    "definition = ? AND part_of_speech = ? AND language_code = ? AND source = ? "
    "AND IFNULL(subject_status_labels, '') = IFNULL(?, '') "
    "AND IFNULL(general_labels, '') = IFNULL(?, '') "
    "AND IFNULL(grammatical_note, '') = IFNULL(?, '') "
    "AND IFNULL(usage_note, '') = IFNULL(?, '') "
    "AND is_in_short_def = ? AND is_plural = ?"
)


def find_definition(conn: sqlite3.Connection, node: DefinitionNode) -> int | None:
    row = conn.execute(
        f"SELECT rowid FROM definitions WHERE {_DEFINITION_MATCH}",
        node.identity(),
    ).fetchone()
    return row[0] if row else None


def find_or_create_definition(conn: sqlite3.Connection, node: DefinitionNode) -> int:
    """Return the row matching every content field, creating it if needed."""
    rowid = find_definition(conn, node)
    if rowid is not None:
        return rowid
    conn.execute(
        "INSERT OR IGNORE INTO definitions "
        "(definition, part_of_speech, language_code, source, subject_status_labels, "
        "general_labels, grammatical_note, usage_note, is_in_short_def, is_plural) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        node.identity(),
    )
    return conn.execute(
        f"SELECT rowid FROM definitions WHERE {_DEFINITION_MATCH}",
        node.identity(),
    ).fetchone()[0]


def link_definition(conn: sqlite3.Connection, word_rowid: int, definition_rowid: int) -> None:
    """Link a word to a definition; a word's first link is its primary one."""
    conn.execute(
        "INSERT INTO word_definitions (word_rowid, definition_rowid, is_primary) "
        "VALUES (?, ?, NOT EXISTS ("
        "SELECT 1 FROM word_definitions WHERE word_rowid = ? AND is_primary = 1)) "
        "ON CONFLICT (word_rowid, definition_rowid) DO NOTHING",
        (word_rowid, definition_rowid, word_rowid),
    )


def upsert_example(conn: sqlite3.Connection, definition_rowid: int, node: ExampleNode) -> None:
    """Insert an example; on conflict a non-NULL note replaces the stored one."""
    conn.execute(
        "INSERT INTO examples (definition_rowid, example, grammatical_note, language_code) "
        "VALUES (?, ?, ?, ?) "
        "ON CONFLICT (definition_rowid, example) DO UPDATE SET "
        "grammatical_note = COALESCE(excluded.grammatical_note, examples.grammatical_note)",
        (definition_rowid, node.text, node.grammatical_note, node.language),
    )


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

def upsert_audio(conn: sqlite3.Connection, url: str, source: str, language: str) -> int:
    """Insert an audio URL, or mark an existing one as no longer orphaned."""
    conn.execute(
        "INSERT INTO audio (url, source, language_code) VALUES (?, ?, ?) "
        "ON CONFLICT (url) DO UPDATE SET is_orphaned = 0",
        (url, source, language),
    )
    return conn.execute("SELECT rowid FROM audio WHERE url = ?", (url,)).fetchone()[0]


def link_audio(conn: sqlite3.Connection, word_rowid: int, audio_rowid: int) -> None:
    """Link audio to a word; it becomes primary if the word has none yet."""
    conn.execute(
        "INSERT INTO word_audio (word_rowid, audio_rowid, is_primary) "
        "VALUES (?, ?, NOT EXISTS ("
        "SELECT 1 FROM word_audio WHERE word_rowid = ? AND is_primary = 1)) "
        "ON CONFLICT (word_rowid, audio_rowid) DO NOTHING",
        (word_rowid, audio_rowid, word_rowid),
    )


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------

def upsert_relationship(
    conn: sqlite3.Connection,
    from_rowid: int,
    to_rowid: int,
    rel_type: str,
    description: str | None = None,
) -> None:
    conn.execute(
        "INSERT INTO word_relationships "
        "(from_word_rowid, to_word_rowid, type, description) VALUES (?, ?, ?, ?) "
        "ON CONFLICT (from_word_rowid, to_word_rowid, type) DO UPDATE SET "
        "description = COALESCE(excluded.description, word_relationships.description)",
        (from_rowid, to_rowid, rel_type, description),
    )
