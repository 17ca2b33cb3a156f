"""
Config loader: reads config/default.yaml with environment variable overrides.

Usage:
    from config.loader import config

    config.get('server.port')              # -> 5050
    config.get('transcription.model')      # -> 'gemini-2.5-flash'
    config.flag('server_capture')          # -> True/False (from flags.yaml)

Environment variable override rules:
  - Direct named overrides (highest priority):
      PORT                  -> server.port
      HOST                  -> server.host
      DATA_DIR              -> storage.data_dir
      GEMINI_API_KEY        -> transcription.api_key  (seeds an empty credential slot)
      GEMINI_MODEL          -> transcription.model
      GEMINI_BASE_URL       -> transcription.base_url
      MAX_TRAINING_EXAMPLES -> transcription.max_examples
      SPEECH_GENDER         -> speech.default_gender
      LOG_LEVEL             -> logging.level
  - Generic double-underscore override (only for keys present in the YAML):
      CAPTURE__SAMPLE_RATE=44100 -> capture.sample_rate = 44100

Feature flag environment variable override:
  - FEATURE_<FLAG_NAME_UPPER>=true/false
      FEATURE_SERVER_CAPTURE=true -> flags.server_capture = True
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_YAML = Path(__file__).parent / "default.yaml"

_FLAGS_YAML = Path(__file__).parent / "flags.yaml"

# Named env var → dotted config key mappings
_ENV_MAP = {
    "PORT":                  ("server.port",                int),
    "HOST":                  ("server.host",                str),
    "DATA_DIR":              ("storage.data_dir",           str),
    "GEMINI_API_KEY":        ("transcription.api_key",      str),
    "GEMINI_MODEL":          ("transcription.model",        str),
    "GEMINI_BASE_URL":       ("transcription.base_url",     str),
    "MAX_TRAINING_EXAMPLES": ("transcription.max_examples", int),
    "SPEECH_GENDER":         ("speech.default_gender",      str),
    "LOG_LEVEL":             ("logging.level",              str),
}


def _cast(value: str, cast_type) -> Any:
    """Cast a string env var value to the target type."""
    if cast_type == "bool":
        return value.lower() in ("true", "1", "yes")
    if cast_type == int:
        return int(value)
    if cast_type == float:
        return float(value)
    return value


def _cast_like(value: str, current: Any) -> Any:
    """Cast a generic override to the type of the value it replaces."""
    if isinstance(current, bool):
        return _cast(value, "bool")
    if isinstance(current, int):
        return _cast(value, int)
    if isinstance(current, float):
        return _cast(value, float)
    return value


def _deep_set(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using a dotted key path."""
    parts = dotted_key.split(".")
    node = data
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def _deep_get(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using a dotted key path."""
    parts = dotted_key.split(".")
    node = data
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, returning an empty dict if it is missing or empty."""
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_env_overrides(data: dict) -> None:
    """Apply env var overrides to the config dict (in-place)."""
    for env_key, (config_key, cast_type) in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is not None:
            _deep_set(data, config_key, _cast(value, cast_type))

    # Generic double-underscore overrides: CAPTURE__SAMPLE_RATE=44100 → capture.sample_rate
    for env_key, value in os.environ.items():
        if "__" in env_key:
            parts = env_key.lower().split("__", 1)
            if len(parts) == 2:
                dotted = f"{parts[0]}.{parts[1]}"
                current = _deep_get(data, dotted)
                if current is not None:
                    _deep_set(data, dotted, _cast_like(value, current))


def _load_flags(path: Path) -> dict:
    """Load feature flags from flags.yaml; FEATURE_<NAME>=true/false overrides."""
    raw = _load_yaml(path)
    flags: dict = raw.get("flags", {}) or {}

    for key in list(flags.keys()):
        env_val = os.environ.get(f"FEATURE_{key.upper()}")
        if env_val is not None:
            flags[key] = env_val.lower() in ("true", "1", "yes")

    return flags


class Config:
    """Config accessor loaded from YAML + env overrides."""

    def __init__(self, yaml_path: Path = _DEFAULT_YAML, flags_path: Path = _FLAGS_YAML):
        self._data = _load_yaml(yaml_path)
        _apply_env_overrides(self._data)
        self._flags = _load_flags(flags_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dotted key. Returns default if not found."""
        return _deep_get(self._data, key, default)

    def section(self, name: str) -> dict:
        """Return a copy of one top-level section (empty dict if absent)."""
        value = self._data.get(name)
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def flag(self, name: str, default: bool = False) -> bool:
        """Check if a feature flag is enabled (FEATURE_<NAME> env override)."""
        return self._flags.get(name, default)


# Module-level singleton; import this everywhere:
#   from config.loader import config
config = Config()
