"""Integrity checks over a populated lexicon store."""

from __future__ import annotations

import sqlite3

from lexingest.models import RelationshipType, ValidationResult


def validate_all(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Run all validation rules."""
    results: list[ValidationResult] = []
    results.extend(_val_wrd_001(conn))
    results.extend(_val_def_001(conn))
    results.extend(_val_aud_001(conn))
    results.extend(_val_aud_002(conn))
    results.extend(_val_rel_001(conn))
    return results


def _val_wrd_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Words without any definition."""
    rows = conn.execute(
        "SELECT w.word, w.language_code FROM words w "
        "WHERE NOT EXISTS (SELECT 1 FROM word_definitions wd WHERE wd.word_rowid = w.rowid) "
        "ORDER BY w.word"
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-WRD-001",
            severity="WARNING",
            entity_type="word",
            entity_id=f"{row['word']} ({row['language_code']})",
            message="Word has no definitions",
        )
        for row in rows
    ]


def _val_def_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Definitions not linked to any word."""
    rows = conn.execute(
        "SELECT d.rowid, d.definition FROM definitions d "
        "WHERE NOT EXISTS "
        "(SELECT 1 FROM word_definitions wd WHERE wd.definition_rowid = d.rowid)"
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-DEF-001",
            severity="WARNING",
            entity_type="definition",
            entity_id=str(row["rowid"]),
            message=f"Definition is not linked to a word: {row['definition']!r}",
        )
        for row in rows
    ]


def _val_aud_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Audio flagged as orphaned or linked to no word."""
    rows = conn.execute(
        "SELECT a.url FROM audio a WHERE a.is_orphaned = 1 "
        "OR NOT EXISTS (SELECT 1 FROM word_audio wa WHERE wa.audio_rowid = a.rowid)"
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-AUD-001",
            severity="WARNING",
            entity_type="audio",
            entity_id=row["url"],
            message="Audio file is orphaned",
        )
        for row in rows
    ]


def _val_aud_002(conn: sqlite3.Connection) -> list[ValidationResult]:
    """More than one primary audio for a word."""
    rows = conn.execute(
        "SELECT w.word, COUNT(*) AS n FROM word_audio wa "
        "JOIN words w ON wa.word_rowid = w.rowid "
        "WHERE wa.is_primary = 1 GROUP BY wa.word_rowid HAVING n > 1"
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-AUD-002",
            severity="ERROR",
            entity_type="word",
            entity_id=row["word"],
            message=f"Word has {row['n']} primary audio files",
        )
        for row in rows
    ]


def _val_rel_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Relationships whose type is outside the known vocabulary."""
    known = tuple(t.value for t in RelationshipType)
    placeholders = ", ".join("?" * len(known))
    rows = conn.execute(
        "SELECT w.word, r.type FROM word_relationships r "
        "JOIN words w ON r.from_word_rowid = w.rowid "
        f"WHERE r.type NOT IN ({placeholders})",
        known,
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-REL-001",
            severity="ERROR",
            entity_type="relationship",
            entity_id=row["word"],
            message=f"Unknown relationship type: {row['type']}",
        )
        for row in rows
    ]
