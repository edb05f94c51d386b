"""
User settings persistence (data/settings.json).

Settings are the defaults from config.DEFAULT_SETTINGS overlaid with whatever
the JSON file holds. A missing or unreadable file never blocks the dashboard:
defaults are used and a warning is logged.
"""

import json
import logging
from pathlib import Path

from agrihub.config import DEFAULT_SETTINGS, SETTINGS_PATH
from agrihub.crops import parse_crop

log = logging.getLogger(__name__)


def _coerce(key: str, value):
    """Cast a stored value to the type of its default. Falls back to the default on failure."""
    default = DEFAULT_SETTINGS[key]
    try:
        if isinstance(default, float):
            out = float(value)
        elif isinstance(default, int):
            out = int(value)
        else:
            out = "" if value is None else str(value).strip()
    except (TypeError, ValueError, OverflowError):
        log.warning("Invalid value for setting %r: %r. Using default %r.", key, value, default)
        return default

    if key == "refresh_minutes" and out < 0:
        out = 0
    if key == "crop":
        crop = parse_crop(out)
        # unsupported crops are kept verbatim; the risk engine returns no risks for them
        if crop is not None:
            out = crop.value
    return out


def load_settings(path: Path | None = None) -> dict:
    """
    Load settings from JSON, merged over DEFAULT_SETTINGS.
    Unknown keys are ignored; bad values fall back to their defaults.
    """
    path = Path(path) if path else SETTINGS_PATH
    settings = dict(DEFAULT_SETTINGS)
    if not path.exists():
        return settings

    try:
        with open(path, encoding="utf-8") as f:
            stored = json.load(f)
    except (OSError, ValueError) as exc:
        log.warning("Could not read settings from %s (%s). Using defaults.", path, exc)
        return settings

    if not isinstance(stored, dict):
        log.warning("Settings file %s is not a JSON object. Using defaults.", path)
        return settings

    for key, value in stored.items():
        if key in DEFAULT_SETTINGS:
            settings[key] = _coerce(key, value)
    return settings


def save_settings(settings: dict, path: Path | None = None) -> Path:
    """Write known settings keys to JSON. Returns the path written."""
    path = Path(path) if path else SETTINGS_PATH
    clean = {key: _coerce(key, settings.get(key, default)) for key, default in DEFAULT_SETTINGS.items()}
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(clean, f, indent=2)
    log.info("Saved settings to %s", path)
    return path
