"""Ingestion log recording and querying for lexingest."""

from __future__ import annotations

import sqlite3

from lexingest.models import EntryStatus, IngestionRecord


def record_ingestion(
    conn: sqlite3.Connection,
    headword: str | None,
    status: EntryStatus,
    *,
    source_id: str | None = None,
    message: str | None = None,
) -> None:
    """Record the outcome of one entry in the ingestion log."""
    conn.execute(
        "INSERT INTO ingestion_log (headword, source_id, status, message) "
        "VALUES (?, ?, ?, ?)",
        (headword, source_id, status.value, message),
    )


def query_history(
    conn: sqlite3.Connection,
    *,
    headword: str | None = None,
    status: EntryStatus | str | None = None,
    since: str | None = None,
    limit: int | None = None,
) -> list[IngestionRecord]:
    """Query the ingestion log with optional filters, newest first."""
    conditions: list[str] = []
    params: list[str | int] = []

    if headword is not None:
        conditions.append("headword = ?")
        params.append(headword)
    if status is not None:
        conditions.append("status = ?")
        params.append(EntryStatus(status).value)
    if since is not None:
        conditions.append("timestamp >= ?")
        params.append(since)

    sql = "SELECT * FROM ingestion_log"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY timestamp DESC, rowid DESC"

    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    rows = conn.execute(sql, params).fetchall()
    return [
        IngestionRecord(
            id=row["rowid"],
            headword=row["headword"],
            source_id=row["source_id"],
            status=row["status"],
            message=row["message"],
            timestamp=row["timestamp"],
        )
        for row in rows
    ]
