"""YAML config loading with env var expansion and CLI overrides."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import SiteConfig

CONFIG_FILENAME = "sitesmith.yaml"


def load_config(
    cli_path: str | None = None, overrides: dict[str, Any] | None = None
) -> SiteConfig:
    """Load config with resolution order: CLI > project-local > defaults.

    ``overrides`` is a nested mapping of values given on the command line;
    ``None`` leaves the file (or default) value untouched.
    """
    raw: dict[str, Any] = {}
    source = "defaults"

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path(".") / CONFIG_FILENAME,
    ]
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            if loaded is None:
                continue
            if not isinstance(loaded, dict):
                raise ValueError(f"Invalid config in {path}: expected a mapping")
            raw = _expand_env_vars(loaded)
            source = str(path)
            break

    if overrides:
        raw = _merge_overrides(raw, overrides)

    try:
        return SiteConfig(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {source}: {e}") from e


def _merge_overrides(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively apply non-None override values on top of ``base``."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            current = merged.get(key)
            merged[key] = _merge_overrides(current if isinstance(current, dict) else {}, value)
        else:
            merged[key] = value
    return merged


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `sitesmith config init`
DEFAULT_CONFIG_TEMPLATE = """\
# sitesmith.yaml

# Project layout
path: "."                      # folder holding pages/, public/ and hooks/
out: "./dist"                  # compiled output
base_url: "/"                  # exposed to templates as {{ Meta.BaseURL }}
hooks: "./hooks"               # relative to path

# Markdown rendering
markup:
  highlight: false             # syntax-highlight fenced code blocks
  highlight_theme: "bw"        # any pygments style name
  hard_wrap: true              # turn single newlines into <br />

# Preview server
server:
  enabled: false
  port: 3000

# Logging
log_level: "info"              # debug | info | warn | error
"""
