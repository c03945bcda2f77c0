"""Tests for the command-line interface."""

import json

import pytest

from lexingest.cli import create_parser, main


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "lexicon.db")


@pytest.fixture
def entries_file(tmp_path, walk_entry, went_entry):
    path = tmp_path / "entries.json"
    path.write_text(json.dumps([walk_entry, "wlak", went_entry]), encoding="utf-8")
    return path


class TestParser:

    def test_subcommands(self):
        parser = create_parser()
        args = parser.parse_args(["ingest", "a.json", "b.json", "--db", "x.db"])
        assert [str(f) for f in args.files] == ["a.json", "b.json"]
        assert args.db == "x.db"

    def test_log_level_uppercased(self):
        args = create_parser().parse_args(["validate", "--log-level", "debug"])
        assert args.log_level == "DEBUG"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestCommands:

    def test_ingest(self, db_path, entries_file, capsys):
        assert main(["ingest", str(entries_file), "--db", db_path]) == 0
        out = capsys.readouterr().out
        assert "Loaded 3 entries" in out
        assert "Success:   2" in out
        assert "No result: 1" in out

    def test_ingest_missing_file(self, db_path, tmp_path, capsys):
        assert main(["ingest", str(tmp_path / "nope.json"), "--db", db_path]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_show(self, db_path, entries_file, capsys):
        main(["ingest", str(entries_file), "--db", db_path])
        capsys.readouterr()
        assert main(["show", "walk", "--db", db_path]) == 0
        out = capsys.readouterr().out
        assert "to move on foot" in out
        assert "walking" in out
        assert "present_participle_en" in out

    def test_show_incoming_edges(self, db_path, entries_file, capsys):
        main(["ingest", str(entries_file), "--db", db_path])
        capsys.readouterr()
        main(["show", "went", "--db", db_path])
        out = capsys.readouterr().out
        assert "<- go" in out

    def test_show_unknown_word(self, db_path, capsys):
        assert main(["show", "zzz", "--db", db_path]) == 1
        assert "Word not found" in capsys.readouterr().out

    def test_history(self, db_path, entries_file, capsys):
        main(["ingest", str(entries_file), "--db", db_path])
        capsys.readouterr()
        assert main(["history", "--db", db_path]) == 0
        out = capsys.readouterr().out
        assert "walk" in out
        assert "no_result" in out

    def test_history_empty(self, db_path, capsys):
        assert main(["history", "--db", db_path]) == 0
        assert "No ingestion records found." in capsys.readouterr().out

    def test_validate(self, db_path, entries_file, capsys):
        main(["ingest", str(entries_file), "--db", db_path])
        capsys.readouterr()
        assert main(["validate", "--db", db_path]) == 0
        out = capsys.readouterr().out
        assert "VAL-WRD-001" in out
        assert "0 error(s)" in out

    def test_validate_empty_db(self, db_path, capsys):
        assert main(["validate", "--db", db_path]) == 0
        assert "Validation passed!" in capsys.readouterr().out

    def test_config_error(self, tmp_path, capsys):
        config = tmp_path / "bad.yaml"
        config.write_text("example_batch_size: 0\n", encoding="utf-8")
        assert main(["validate", "--config", str(config)]) == 1
        assert "CONFIG ERROR" in capsys.readouterr().out
