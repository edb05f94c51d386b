"""
AgriHub — weather, pest risk and market prices for smallholder farmers.
"""

from agrihub.config import (
    PROJECT_ROOT,
    DATA_DIR,
    SETTINGS_PATH,
    DEFAULT_SETTINGS,
    ensure_dirs,
)
from agrihub.crops import Crop, parse_crop
from agrihub.risk_engine import RiskFactor, RiskReport, assess_risk

__all__ = [
    "PROJECT_ROOT",
    "DATA_DIR",
    "SETTINGS_PATH",
    "DEFAULT_SETTINGS",
    "ensure_dirs",
    "Crop",
    "parse_crop",
    "RiskFactor",
    "RiskReport",
    "assess_risk",
]
