from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

_RULES_CONFIG_CACHE: dict[str, Any] | None = None
_DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "config" / "rules.yaml"


def _rules_path() -> Path:
    override = (os.getenv("RULES_CONFIG_PATH") or "").strip()
    return Path(override) if override else _DEFAULT_RULES_PATH


def get_rules_config() -> dict[str, Any]:
    """Load the pattern tables from config/rules.yaml and cache them."""
    global _RULES_CONFIG_CACHE

    if _RULES_CONFIG_CACHE is not None:
        return _RULES_CONFIG_CACHE

    path = _rules_path()
    if not path.exists():
        raise RuntimeError(
            f"Rules config not found at '{path}'. "
            "Expected file: config/rules.yaml"
        )

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Failed to read rules config '{path}': {exc}") from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in rules config '{path}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid rules config '{path}': expected a top-level mapping.")

    _RULES_CONFIG_CACHE = parsed
    return _RULES_CONFIG_CACHE


def get_rule_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'matching.tiers.exact'."""
    if not path:
        return default

    current: Any = get_rules_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current


def get_rule_list(path: str) -> tuple[str, ...]:
    value = get_rule_value(path, [])
    if not isinstance(value, list):
        return tuple()
    return tuple(str(item) for item in value if str(item))


def clear_rules_cache() -> None:
    global _RULES_CONFIG_CACHE
    _RULES_CONFIG_CACHE = None
