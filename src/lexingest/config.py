"""
YAML configuration for ingestion runs.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from lexingest.exceptions import ConfigError

DEFAULT_AUDIO_BASE_URL = "https://media.merriam-webster.com/audio/prons"


@dataclass(frozen=True)
class IngestConfig:
    """Settings shared by the parser, materializer and command line."""
    database: str = ":memory:"
    language: str = "en"
    audio_base_url: str = DEFAULT_AUDIO_BASE_URL
    example_batch_size: int = 10
    relationship_batch_size: int = 20
    transaction_timeout: float = 30.0
    log_level: str = "INFO"


_INT_KEYS = ("example_batch_size", "relationship_batch_size")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_config(
    source: Union[str, Path, Dict[str, Any], None] = None,
    **overrides: Any,
) -> IngestConfig:
    """Load configuration from a YAML file, YAML string or dictionary.

    Args:
        source: Path to a YAML file, a YAML string, a parsed mapping, or
            None for the defaults
        overrides: Values that win over the loaded ones (None is ignored)

    Returns:
        IngestConfig object

    Raises:
        ConfigError: If the YAML is invalid or a value is out of range
        FileNotFoundError: If the file does not exist
    """
    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, dict):
        data = dict(source)
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = _load_yaml(f)
    else:
        data = _load_yaml(source)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return _build_config(data)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml"))


def _load_yaml(stream: Any) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _build_config(data: Dict[str, Any]) -> IngestConfig:
    known = {f.name for f in fields(IngestConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in _INT_KEYS:
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"'{key}' must be a positive integer, got {value!r}")

    if "transaction_timeout" in data:
        timeout: Optional[Any] = data["transaction_timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"'transaction_timeout' must be positive, got {timeout!r}")
        data["transaction_timeout"] = float(timeout)

    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {data['log_level']!r}")
        data["log_level"] = level

    for key in ("database", "language", "audio_base_url"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")

    return IngestConfig(**data)
