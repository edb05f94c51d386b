"""
Risk engine: weather-driven pest/disease heuristic per crop.

Inputs (current observation):
    temperature  — °C
    humidity     — relative humidity, %
    precipitation — mm per hour

Each RiskRule below is a conjunction of inclusive threshold checks on those
three values. Every rule for the selected crop that fires contributes one
RiskFactor with a fixed level (0-1) and note.

Composite risk (0-1):
    composite = min(1, sum(level of every triggered factor))

The per-factor levels are never rescaled, so several co-occurring risks can
saturate the composite while the factor list still shows each one.

Display bands (on the composite):
    < 0.33 → Low
    < 0.66 → Medium
    else   → High

Heuristic note:
    The thresholds are hand-authored rules of thumb for early warning and
    should be treated as indicative, not as a field diagnosis.
"""

from dataclasses import dataclass, field

import pandas as pd

from agrihub.config import RISK_BANDS, RISK_BAND_TOP
from agrihub.crops import Crop, parse_crop


@dataclass(frozen=True)
class RiskRule:
    crops: frozenset
    name: str
    level: float
    note: str
    min_temp_c: float | None = None
    max_temp_c: float | None = None
    min_humidity_pct: float | None = None
    min_precip_mm: float | None = None

    def matches(self, temperature_c: float, humidity_pct: float, precip_mm: float) -> bool:
        """True when every bound set on this rule holds (bounds are inclusive)."""
        if self.min_temp_c is not None and not temperature_c >= self.min_temp_c:
            return False
        if self.max_temp_c is not None and not temperature_c <= self.max_temp_c:
            return False
        if self.min_humidity_pct is not None and not humidity_pct >= self.min_humidity_pct:
            return False
        if self.min_precip_mm is not None and not precip_mm >= self.min_precip_mm:
            return False
        return True


@dataclass(frozen=True)
class RiskFactor:
    name: str
    level: float
    note: str

    def to_dict(self) -> dict:
        return {"name": self.name, "level": self.level, "note": self.note}


# Headline used when nothing triggers
LOW_RISK = RiskFactor(name="Low", level=0.0, note="")


@dataclass(frozen=True)
class RiskReport:
    level: float
    risks: tuple = field(default_factory=tuple)
    headline: RiskFactor = LOW_RISK

    @property
    def headline_name(self) -> str:
        return self.headline.name

    @property
    def is_low(self) -> bool:
        return not self.risks

    def to_dict(self) -> dict:
        return {
            "level":    self.level,
            "label":    get_risk_label(self.level),
            "headline": self.headline.to_dict(),
            "risks":    [r.to_dict() for r in self.risks],
        }


# ---------------------------------------------------------------------------
# Rule table
# Order matters only for ties: equal levels keep table order after sorting.
# ---------------------------------------------------------------------------
_RICE       = frozenset({Crop.RICE})
_SOLANACEAE = frozenset({Crop.CHILI, Crop.TOMATO})
_MAIZE      = frozenset({Crop.MAIZE})

RISK_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        _RICE, "Brown planthopper", 0.60,
        "Temperature and humidity favour planthopper build-up.",
        min_temp_c=25, max_temp_c=30, min_humidity_pct=70,
    ),
    RiskRule(
        _RICE, "Blast/leaf fungus", 0.70,
        "High humidity plus rain raises fungal disease pressure.",
        min_humidity_pct=85, min_precip_mm=1,
    ),
    RiskRule(
        _RICE, "Bacterial leaf blight", 0.50,
        "Rain with warm temperatures triggers bacterial blight.",
        min_temp_c=28, min_precip_mm=2,
    ),
    RiskRule(
        _SOLANACEAE, "Anthracnose/fruit rot", 0.65,
        "Fruit is susceptible when conditions stay humid and wet.",
        min_humidity_pct=80, min_precip_mm=1,
    ),
    RiskRule(
        _SOLANACEAE, "Thrips/whitefly", 0.45,
        "Vector insects are most active in warm, humid weather.",
        min_temp_c=26, min_humidity_pct=70,
    ),
    RiskRule(
        _MAIZE, "Fall armyworm", 0.55,
        "Warm, humid weather suits attacks on young leaves.",
        min_temp_c=24, max_temp_c=30, min_humidity_pct=70,
    ),
    RiskRule(
        _MAIZE, "Stem/root rot", 0.40,
        "Waterlogged soil increases soil-borne disease.",
        min_precip_mm=2,
    ),
)


def rules_for_crop(crop) -> list[RiskRule]:
    """Rules applicable to a crop (empty for unsupported crops)."""
    resolved = parse_crop(crop)
    if resolved is None:
        return []
    return [rule for rule in RISK_RULES if resolved in rule.crops]


def assess_risk(
    crop,
    temperature_c: float,
    humidity_pct: float,
    precip_mm: float,
) -> RiskReport:
    """
    Evaluate the pest/disease heuristic for one weather observation.

    Parameters
    ----------
    crop : Crop or str
        Crop identifier or alias. Unsupported values yield a low-risk report.
    temperature_c, humidity_pct, precip_mm : float
        Current observation. Evaluated as given; no range checks.

    Returns
    -------
    RiskReport with composite level (0-1), factors sorted by level
    (descending, stable), and the top factor as headline.
    """
    triggered = [
        RiskFactor(rule.name, rule.level, rule.note)
        for rule in rules_for_crop(crop)
        if rule.matches(temperature_c, humidity_pct, precip_mm)
    ]
    ranked = sorted(triggered, key=lambda r: r.level, reverse=True)
    composite = min(1.0, max(0.0, sum(r.level for r in ranked)))
    headline = ranked[0] if ranked else LOW_RISK
    return RiskReport(level=composite, risks=tuple(ranked), headline=headline)


def assess_observation(crop, observation) -> RiskReport:
    """Convenience wrapper taking a weather.WeatherObservation."""
    return assess_risk(
        crop,
        observation.temperature_c,
        observation.humidity_pct,
        observation.precip_mm,
    )


def get_risk_label(level: float) -> str:
    """Convert composite level (0-1) to Low / Medium / High."""
    for upper, label in RISK_BANDS:
        if level < upper:
            return label
    return RISK_BAND_TOP


def risk_percent(level: float) -> int:
    """Composite level as a 0-100 integer for progress bars."""
    return int(round(level * 100))


def build_risk_table(report: RiskReport) -> pd.DataFrame:
    """Factor table for display; empty (same columns) when nothing triggered."""
    rows = [
        {"Factor": r.name, "Score (/100)": risk_percent(r.level), "Note": r.note}
        for r in report.risks
    ]
    return pd.DataFrame(rows, columns=["Factor", "Score (/100)", "Note"])
