"""
Command-line interface for lexingest.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from lexingest.config import IngestConfig, load_config
from lexingest.exceptions import ConfigError, DatabaseError
from lexingest.ingest import ingest_batch, load_documents
from lexingest.models import BatchResult
from lexingest.store import LexiconStore


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the lexingest CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        config = load_config(args.config, database=args.db, log_level=args.log_level)
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args, config)
    except DatabaseError as e:
        print(f"\n  [DATABASE ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lexingest",
        description="Ingest dictionary entries into a normalized word graph",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--db",
        type=str,
        help="SQLite database path (overrides the config file)",
    )
    common.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file",
    )
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides the config file)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        parents=[common],
        help="Ingest entries from JSON files",
    )
    ingest_parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="JSON files holding one entry or a list of entries",
    )
    ingest_parser.set_defaults(func=cmd_ingest)

    # show command
    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Show a stored word",
    )
    show_parser.add_argument("word", type=str, help="Word to show")
    show_parser.add_argument(
        "--language",
        type=str,
        help="Language code (default: from config)",
    )
    show_parser.set_defaults(func=cmd_show)

    # history command
    history_parser = subparsers.add_parser(
        "history",
        parents=[common],
        help="View the ingestion log",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of records to show (default: 20)",
    )
    history_parser.add_argument(
        "--status",
        choices=["success", "no_result", "failed"],
        help="Only show records with this status",
    )
    history_parser.set_defaults(func=cmd_history)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Check stored data for integrity problems",
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def cmd_ingest(args: argparse.Namespace, config: IngestConfig) -> int:
    """Handle ingest command."""
    documents = []
    for path in args.files:
        try:
            loaded = load_documents(path)
        except (FileNotFoundError, ValueError) as e:
            print(f"\n  [ERROR] {e}")
            return 1
        print(f"Loaded {len(loaded)} entr{'y' if len(loaded) == 1 else 'ies'} from {path}")
        documents.extend(loaded)

    with LexiconStore(config.database) as store:
        result = ingest_batch(store, documents, config)

    _print_batch_result(result)
    return 1 if result.failure_count else 0


def cmd_show(args: argparse.Namespace, config: IngestConfig) -> int:
    """Handle show command."""
    language = args.language or config.language
    with LexiconStore(config.database) as store:
        word = store.get_word(args.word, language)
        if word is None:
            print(f"Word not found: {args.word} ({language})")
            return 1
        definitions = store.get_definitions(args.word, language)
        audio = store.get_audio(args.word, language)
        outgoing = store.get_relationships(args.word, language)
        incoming = store.get_relationships(args.word, language, direction="to")

    print(f"\n{word.word} ({word.language})")
    if word.phonetic:
        print(f"  Phonetic:  {word.phonetic}")
    if word.etymology:
        print(f"  Etymology: {word.etymology}")
    for item in audio:
        print(f"  Audio:     {item.url}{' (primary)' if item.is_primary else ''}")

    if definitions:
        print("\nDefinitions:")
    for i, definition in enumerate(definitions, 1):
        print(f"  {i}. [{definition.part_of_speech}] {definition.definition}")
        for example in definition.examples:
            note = f" ({example.grammatical_note})" if example.grammatical_note else ""
            print(f"       - {example.example}{note}")

    if outgoing or incoming:
        print("\nRelationships:")
    for rel in outgoing:
        print(f"  -> {rel.to_word:<24} {rel.type}")
    for rel in incoming:
        print(f"  <- {rel.from_word:<24} {rel.type}")
    return 0


def cmd_history(args: argparse.Namespace, config: IngestConfig) -> int:
    """Handle history command."""
    with LexiconStore(config.database) as store:
        records = store.history(status=args.status, limit=args.limit)

    if not records:
        print("No ingestion records found.")
        return 0

    print(f"\nRecent ingestions (showing {len(records)}):\n")
    print(f"{'ID':<6} {'Headword':<24} {'Status':<10} {'Date'}")
    print("-" * 70)
    for record in records:
        headword = record.headword or "(none)"
        if len(headword) > 24:
            headword = headword[:21] + "..."
        date = record.timestamp.split("T")[0]
        print(f"{record.id:<6} {headword:<24} {record.status:<10} {date}")
    return 0


def cmd_validate(args: argparse.Namespace, config: IngestConfig) -> int:
    """Handle validate command."""
    with LexiconStore(config.database) as store:
        results = store.validate()

    errors = [r for r in results if r.severity == "ERROR"]
    warnings = [r for r in results if r.severity == "WARNING"]
    for r in errors + warnings:
        print(f"  [{r.severity}] {r.rule_id} {r.entity_type} {r.entity_id}: {r.message}")

    if not results:
        print("Validation passed!")
    else:
        print(f"\nFound {len(errors)} error(s), {len(warnings)} warning(s)")
    return 1 if errors else 0


def _print_batch_result(result: BatchResult) -> None:
    """Print batch ingestion result."""
    print()
    for entry in result.entries:
        idx = entry.index + 1
        status = {
            "success": "OK",
            "no_result": "NO RESULT",
            "failed": "FAILED",
        }[entry.status.value]
        print(f"  [{idx}/{result.total_count}] {entry.headword or '(no headword)'}: {status}")
        if not entry.success:
            print(f"         {entry.message}")

    print("\nResults:")
    print(f"  Total:     {result.total_count}")
    print(f"  Success:   {result.success_count}")
    print(f"  No result: {result.no_result_count}")
    print(f"  Failed:    {result.failure_count}")
    print(f"  Time:      {result.duration_seconds:.2f}s")


if __name__ == "__main__":
    sys.exit(main())
