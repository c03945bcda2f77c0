"""Custom exception hierarchy for lexingest."""


class LexIngestError(Exception):
    """Base exception for all lexingest errors."""


class ParseDefect(LexIngestError):
    """A node has an unexpected shape or a text field is not a string."""


class UpstreamDataAbsent(LexIngestError):
    """The upstream entry has no usable headword."""


class PersistenceConflict(LexIngestError):
    """Transaction failure (constraint violation, timeout, connection error)."""


class GraphIntegrityError(PersistenceConflict):
    """A relationship edge references a word that was never materialized."""


class DatabaseError(LexIngestError):
    """Schema version mismatch, connection failure."""


class ConfigError(LexIngestError):
    """Malformed configuration file or value."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)
