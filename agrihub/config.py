"""
Configuration and constants for the AgriHub dashboard.
Centralizes paths, provider endpoints, default user settings, and risk bands.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Base paths (project root = parent of 'agrihub')
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

SETTINGS_FNAME = "settings.json"
SETTINGS_PATH  = DATA_DIR / SETTINGS_FNAME

# ---------------------------------------------------------------------------
# Weather provider (Open-Meteo, no API key required)
# ---------------------------------------------------------------------------
WEATHER_API_URL = "https://api.open-meteo.com/v1/forecast"
WEATHER_VARIABLES = "temperature_2m,relative_humidity_2m,precipitation"
FORECAST_HOURS = 24
REQUEST_TIMEOUT = 30      # seconds

# ---------------------------------------------------------------------------
# User settings defaults
# Editable from the Settings tab; persisted to data/settings.json.
# Coordinates default to Jakarta.
# ---------------------------------------------------------------------------
DEFAULT_SETTINGS: dict = {
    "latitude":        -6.2,
    "longitude":       106.816666,
    "crop":            "rice",
    "refresh_minutes": 15,     # 0 disables auto refresh
    "market_api_url":  "",     # empty → mock market table
    "market_api_key":  "",     # sent as Bearer token when set
}

# ---------------------------------------------------------------------------
# Risk display bands (composite level 0-1)
#   < 0.33 → Low, < 0.66 → Medium, otherwise High
# ---------------------------------------------------------------------------
RISK_BANDS: list[tuple[float, str]] = [
    (0.33, "Low"),
    (0.66, "Medium"),
]
RISK_BAND_TOP = "High"


# ---------------------------------------------------------------------------
# Ensure directories exist (called when the app or a CLI starts)
# ---------------------------------------------------------------------------
def ensure_dirs():
    DATA_DIR.mkdir(parents=True, exist_ok=True)
