"""
PoolCalc — Local JSON settings.

Settings are read from ``<project>/data/poolcalc.json`` when it exists;
anything missing there falls back to ``DEFAULT_SETTINGS``.
"""

import json
import os

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
_DATA_FILE = os.path.join(_DATA_DIR, "poolcalc.json")

# ── Default settings ─────────────────────────────────────────────────────
DEFAULT_SETTINGS = {
    "output_mode": "numeric",      # "numeric" or "exact"
    "max_decimals": 10,
    "positive_unknowns": True,     # reserves are positive quantities
    "tolerance": 1e-9,
}


def _ensure_dir() -> None:
    os.makedirs(_DATA_DIR, exist_ok=True)


def _load_file() -> dict:
    if os.path.exists(_DATA_FILE):
        try:
            with open(_DATA_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return {}
        if isinstance(data, dict):
            return data
    return {}


def _check_type(key: str, value) -> None:
    """Raise ValueError unless *value* has the type of the default for *key*."""
    default = DEFAULT_SETTINGS[key]
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(default, float):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        ok = isinstance(value, type(default))
    if not ok:
        raise ValueError(
            f"Setting '{key}' must be {type(default).__name__}, "
            f"got {value!r} in {_DATA_FILE}."
        )


def get_settings() -> dict:
    """Return the stored settings merged over the defaults.

    Raises ValueError when a stored value has the wrong type.
    """
    merged = dict(DEFAULT_SETTINGS)
    stored = _load_file()
    # Only known keys; stray entries in the file are ignored
    for key, value in stored.items():
        if key in DEFAULT_SETTINGS:
            _check_type(key, value)
            merged[key] = value
    return merged


def save_settings(settings: dict) -> None:
    """Persist *settings* (merged over the defaults)."""
    merged = dict(DEFAULT_SETTINGS)
    merged.update(settings)
    _ensure_dir()
    with open(_DATA_FILE, "w", encoding="utf-8") as f:
        json.dump(merged, f, indent=2, ensure_ascii=False)
