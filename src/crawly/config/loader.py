"""
Configuration loading for Crawly.

Layers, later ones winning key by key:
1. Model defaults (settings.py)
2. A YAML file with ``crawler:`` and ``logging:`` sections
3. Environment variables named CRAWLY__{SECTION}__{KEY}

Environment values are read as YAML scalars, so ``CRAWLY__CRAWLER__MAX_PAGES=100``
is an int, ``CRAWLY__CRAWLER__RESPECT_ROBOTS=off`` a bool and
``CRAWLY__CRAWLER__ALLOWED_MIMES="[text/html, text/plain]"`` a list.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from crawly.config.settings import Settings
from crawly.core.exceptions import ConfigurationError


ENV_PREFIX = "CRAWLY"
ENV_SEPARATOR = "__"

Sections = dict[str, dict[str, Any]]


def parse_env_value(raw: str) -> Any:
    """
    Read one environment value as YAML.

    An empty value is None. Text YAML cannot parse is kept as a string.
    """
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def env_sections(
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> Sections:
    """
    Collect ``{PREFIX}__{SECTION}__{KEY}`` variables into sections.

    Names with a missing or extra part are ignored.
    """
    environ = os.environ if environ is None else environ
    marker = f"{prefix}{ENV_SEPARATOR}"
    sections: Sections = {}

    for name, raw in environ.items():
        if not name.startswith(marker):
            continue
        parts = name[len(marker):].lower().split(ENV_SEPARATOR)
        if len(parts) != 2 or not all(parts):
            continue
        section, key = parts
        sections.setdefault(section, {})[key] = parse_env_value(raw)

    return sections


def read_config_file(path: Path) -> Sections:
    """
    Read a YAML configuration file into sections.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or not a
            mapping of section name to mapping
    """
    details = {"path": str(path)}
    if not path.is_file():
        raise ConfigurationError("Configuration file not found", details=details)

    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration file: {e}", details=details) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(content).__name__}",
            details=details,
        )

    sections: Sections = {}
    for section, values in content.items():
        if values is None:
            values = {}
        if not isinstance(values, dict):
            raise ConfigurationError(
                f"Section {section!r} must be a mapping, got: {type(values).__name__}",
                details=details,
            )
        sections[section] = dict(values)
    return sections


def merge_sections(*layers: Sections) -> Sections:
    """Merge layers key by key within each section; later layers win."""
    merged: Sections = {}
    for layer in layers:
        for section, values in layer.items():
            merged.setdefault(section, {}).update(values)
    return merged


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> Settings:
    """
    Load settings from an optional YAML file and the environment.

    Args:
        config_path: YAML file. None means defaults and environment only.
        env_prefix: Prefix of the environment variables

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file cannot be read or a value is invalid
    """
    file_layer = read_config_file(Path(config_path)) if config_path is not None else {}
    merged = merge_sections(file_layer, env_sections(prefix=env_prefix))

    try:
        return Settings(**merged)
    except ValidationError as e:
        details = {"path": str(config_path)} if config_path is not None else None
        raise ConfigurationError(f"Invalid configuration: {e}", details=details) from e
