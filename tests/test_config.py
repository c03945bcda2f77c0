"""Tests for YAML configuration loading."""

import pytest

from lexingest.config import DEFAULT_AUDIO_BASE_URL, IngestConfig, load_config
from lexingest.exceptions import ConfigError


class TestLoadConfig:

    def test_defaults(self):
        config = load_config()
        assert config == IngestConfig()
        assert config.example_batch_size == 10
        assert config.relationship_batch_size == 20
        assert config.transaction_timeout == 30.0
        assert config.audio_base_url == DEFAULT_AUDIO_BASE_URL

    def test_from_dict(self):
        config = load_config({"database": "lexicon.db", "language": "fr"})
        assert config.database == "lexicon.db"
        assert config.language == "fr"

    def test_from_yaml_string(self):
        config = load_config("example_batch_size: 5\nlog_level: debug\n")
        assert config.example_batch_size == 5
        assert config.log_level == "DEBUG"

    def test_from_file(self, tmp_path):
        path = tmp_path / "lexingest.yaml"
        path.write_text("database: words.db\ntransaction_timeout: 5\n", encoding="utf-8")
        config = load_config(path)
        assert config.database == "words.db"
        assert config.transaction_timeout == 5.0
        assert load_config(str(path)) == config

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == IngestConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_overrides_win(self):
        config = load_config({"database": "a.db", "log_level": "ERROR"},
                             database="b.db", log_level=None)
        assert config.database == "b.db"
        assert config.log_level == "ERROR"


class TestConfigErrors:

    def test_invalid_yaml_reports_line(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config("database: a.db\nlanguage: [en\n")
        assert exc_info.value.line is not None

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError, match="mapping"):
            load_config("- a\n- b\n")

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration keys: batch"):
            load_config({"batch": 3})

    @pytest.mark.parametrize("value", [0, -1, "10", True, 2.5])
    def test_batch_size_must_be_positive_int(self, value):
        with pytest.raises(ConfigError, match="example_batch_size"):
            load_config({"example_batch_size": value})

    @pytest.mark.parametrize("value", [0, -3.0, "soon"])
    def test_timeout_must_be_positive(self, value):
        with pytest.raises(ConfigError, match="transaction_timeout"):
            load_config({"transaction_timeout": value})

    def test_unknown_log_level(self):
        with pytest.raises(ConfigError, match="log level"):
            load_config({"log_level": "LOUD"})

    def test_string_fields(self):
        with pytest.raises(ConfigError, match="'language' must be a string"):
            load_config({"language": 7})
