"""Load and expose table column sets from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .config import REPORT_COLUMNS, TABLE_DISPLAY_COLUMNS

logger = logging.getLogger(__name__)

_CACHE: dict[str, list[str]] | None = None


def _defaults() -> dict[str, list[str]]:
    return {
        "table": list(TABLE_DISPLAY_COLUMNS),
    }


def load_column_sets(base_path: str | Path | None = None, *, reload: bool = False):
    global _CACHE
    if _CACHE is not None and not reload:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parents[2])
    yaml_path = base / "columns.yaml"
    if not yaml_path.exists():
        _CACHE = _defaults()
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = _defaults()
        return _CACHE
    sets = data.get("sets", {}) or {}
    defaults = _defaults()
    # Unknown column names are dropped
    _CACHE = {
        name: [c for c in (sets.get(name) or default) if c in REPORT_COLUMNS] or default
        for name, default in defaults.items()
    }
    return _CACHE


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
