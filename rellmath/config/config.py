from __future__ import annotations

"""Configuration loading and validation for RellMath.

This module loads YAML configuration, applies defaults, and repairs values
that are out of range for the CLI. Quiz settings (digit width, operator) are
not configuration: they live in the persistent store.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import sys

import yaml


ALLOWED_BACKENDS = {"json", "memory"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        default_path = Path(__file__).with_name("defaults.yml")
        cfg = _load_yaml(default_path)
    return cfg


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    cfg.setdefault("storage", {})
    cfg.setdefault("session", {})
    cfg.setdefault("ui", {})
    cfg.setdefault("explain", False)

    storage = cfg["storage"]
    session = cfg["session"]
    ui = cfg["ui"]

    storage.setdefault("backend", "json")
    storage.setdefault("path", "./rellmath_store.json")
    session.setdefault("history_preview", 5)
    ui.setdefault("prompt", "> ")

    backend = storage.get("backend")
    if backend not in ALLOWED_BACKENDS:
        print(f"WARNING: Unsupported storage backend '{backend}', using 'json'.")
        storage["backend"] = "json"

    try:
        preview = int(session.get("history_preview", 5))
    except (TypeError, ValueError):
        print(f"WARNING: Invalid history_preview '{session.get('history_preview')}', using 5.")
        preview = 5
    session["history_preview"] = max(0, preview)

    storage["path"] = str(storage.get("path") or "./rellmath_store.json")
    ui["prompt"] = str(ui.get("prompt", "> "))
    cfg["explain"] = bool(cfg.get("explain", False))
    return cfg
