import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


# Bodies come from many authors and editors; normalize line endings and full-width brackets.
DEFAULT_REPLACEMENTS = [("\r\n", "\n"), ("【", "["), ("】", "] ")]
CONFIG_KEYS = {"replacements", "include_drafts", "tag_prefix", "summary", "log_level"}
TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ChangelogConfig:
    replacements: list[tuple[str, str]] = field(default_factory=lambda: list(DEFAULT_REPLACEMENTS))
    include_drafts: bool = False
    tag_prefix: str = "v"
    summary: bool = True
    log_level: str = "INFO"


@lru_cache(maxsize=8)
def _load_yaml(path: str) -> dict[str, Any]:
    # Cache per path; callers get a fresh ChangelogConfig each time.
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Missing changelog config: {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Changelog config must be a mapping: {config_path}")
    return data


def _parse_replacements(value: Any) -> list[tuple[str, str]]:
    if not isinstance(value, list):
        raise ValueError("replacements must be a list of [old, new] pairs")
    pairs = []
    for entry in value:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2 or not all(isinstance(v, str) for v in entry):
            raise ValueError(f"invalid replacement entry: {entry!r}")
        pairs.append((entry[0], entry[1]))
    return pairs


def load_config(path: Path | str | None = None) -> ChangelogConfig:
    """Build the effective config: defaults, then the YAML file, then the environment."""
    config = ChangelogConfig()
    if path is not None:
        data = _load_yaml(str(Path(path).resolve()))
        unknown = set(data) - CONFIG_KEYS
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        if "replacements" in data:
            config.replacements = _parse_replacements(data["replacements"])
        if "include_drafts" in data:
            config.include_drafts = bool(data["include_drafts"])
        if "tag_prefix" in data:
            config.tag_prefix = str(data["tag_prefix"] or "")
        if "summary" in data:
            config.summary = bool(data["summary"])
        if "log_level" in data:
            config.log_level = str(data["log_level"]).upper()

    # Environment wins so CI jobs can tweak a shared config file.
    env_level = os.environ.get("RELEASE_NOTES_LOG_LEVEL")
    if env_level:
        config.log_level = env_level.upper()
    env_drafts = os.environ.get("RELEASE_NOTES_INCLUDE_DRAFTS")
    if env_drafts:
        config.include_drafts = env_drafts.strip().lower() in TRUE_VALUES
    return config
