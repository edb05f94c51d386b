"""
Open-Meteo weather provider
===========================
Source: Open-Meteo forecast API (free, no API key)
API   : GET https://api.open-meteo.com/v1/forecast

Usage (from project root):
    python -m agrihub.weather
    python -m agrihub.weather --lat -7.25 --lon 112.75 --crop maize
    python -m agrihub.weather --crop chili --json

Or call from code:
    from agrihub.weather import assess_location
    observation, report, payload = assess_location(-6.2, 106.8, "rice")

Only the current temperature, relative humidity and precipitation feed the
risk heuristic; the hourly block is used for the 24-hour table.
"""

import argparse
import json
import logging
import time
from dataclasses import dataclass

import pandas as pd
import requests

from agrihub.config import (
    WEATHER_API_URL,
    WEATHER_VARIABLES,
    FORECAST_HOURS,
    REQUEST_TIMEOUT,
    DEFAULT_SETTINGS,
)
from agrihub.crops import crop_label
from agrihub.risk_engine import assess_observation, get_risk_label, risk_percent

log = logging.getLogger(__name__)

HOURLY_COLUMNS = ["time", "temperature_c", "humidity_pct", "precip_mm"]

# Open-Meteo field → our column name
_HOURLY_FIELDS = {
    "time":                 "time",
    "temperature_2m":       "temperature_c",
    "relative_humidity_2m": "humidity_pct",
    "precipitation":        "precip_mm",
}


@dataclass(frozen=True)
class WeatherObservation:
    temperature_c: float
    humidity_pct: float
    precip_mm: float


def fetch_forecast(latitude: float, longitude: float) -> dict:
    """
    Fetch current conditions and today's hourly forecast for a coordinate.
    Returns parsed JSON dict. HTTP errors propagate as requests exceptions.
    """
    params = {
        "latitude":      latitude,
        "longitude":     longitude,
        "current":       WEATHER_VARIABLES,
        "hourly":        WEATHER_VARIABLES,
        "timezone":      "auto",
        "forecast_days": 1,
    }
    log.info("Fetching weather for %.4f, %.4f ...", latitude, longitude)
    resp = requests.get(WEATHER_API_URL, params=params, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def parse_current(payload: dict) -> WeatherObservation:
    """
    Extract the observation the risk heuristic needs from a forecast payload.
    Missing precipitation counts as 0 mm; missing temperature or humidity is an error.
    """
    current = (payload or {}).get("current")
    if not current:
        raise ValueError("Weather response has no 'current' block")

    temp = current.get("temperature_2m")
    rh   = current.get("relative_humidity_2m")
    if temp is None or rh is None:
        raise ValueError("Weather response is missing temperature or humidity")

    precip = current.get("precipitation")
    return WeatherObservation(
        temperature_c=float(temp),
        humidity_pct=float(rh),
        precip_mm=float(precip) if precip is not None else 0.0,
    )


def hourly_frame(payload: dict, hours: int = FORECAST_HOURS) -> pd.DataFrame:
    """
    Hourly forecast as a DataFrame (first `hours` rows).
    Arrays of unequal length are cut to the shortest one.
    """
    hourly = (payload or {}).get("hourly") or {}
    series = {col: list(hourly.get(src) or []) for src, col in _HOURLY_FIELDS.items()}
    n = min(hours, *(len(v) for v in series.values()))
    if n <= 0:
        return pd.DataFrame(columns=HOURLY_COLUMNS)

    df = pd.DataFrame({col: values[:n] for col, values in series.items()}, columns=HOURLY_COLUMNS)
    df["time"] = pd.to_datetime(df["time"], errors="coerce")
    for col in ["temperature_c", "humidity_pct", "precip_mm"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def refresh_bucket(refresh_minutes: int, now: float | None = None) -> int:
    """
    Index of the current refresh tick, for use as a cache key.
    A non-positive cadence means "never refresh automatically" (always bucket 0).
    """
    if refresh_minutes <= 0:
        return 0
    now = time.time() if now is None else now
    return int(now // (refresh_minutes * 60))


def assess_location(latitude: float, longitude: float, crop):
    """
    Full pipeline: fetch forecast → parse current observation → assess risk.

    Returns
    -------
    (WeatherObservation, RiskReport, raw payload dict)
    """
    payload = fetch_forecast(latitude, longitude)
    observation = parse_current(payload)
    report = assess_observation(crop, observation)
    log.info(
        "%s: %.1f °C, %.0f %% RH, %.2f mm → %s (%d/100)",
        crop, observation.temperature_c, observation.humidity_pct, observation.precip_mm,
        report.headline_name, risk_percent(report.level),
    )
    return observation, report, payload


# ---------------------------------------------------------------------------
# CLI entrypoint: python -m agrihub.weather --lat LAT --lon LON --crop CROP
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Fetch current weather from Open-Meteo and print the pest/disease risk."
    )
    parser.add_argument("--lat",  type=float, default=DEFAULT_SETTINGS["latitude"],  help="Latitude")
    parser.add_argument("--lon",  type=float, default=DEFAULT_SETTINGS["longitude"], help="Longitude")
    parser.add_argument("--crop", default=DEFAULT_SETTINGS["crop"], help="Crop (rice, maize, chili, tomato)")
    parser.add_argument("--json", action="store_true", help="Print the risk report as JSON")
    args = parser.parse_args()

    obs, rep, _ = assess_location(args.lat, args.lon, args.crop)
    if args.json:
        print(json.dumps({
            "observation": {
                "temperature_c": obs.temperature_c,
                "humidity_pct":  obs.humidity_pct,
                "precip_mm":     obs.precip_mm,
            },
            "report": rep.to_dict(),
        }, indent=2))
    else:
        print(f"\n{crop_label(args.crop)} @ {args.lat:.3f}, {args.lon:.3f}")
        print(f"Temperature {obs.temperature_c:.1f} °C | Humidity {obs.humidity_pct:.0f} % | Rain {obs.precip_mm:.2f} mm")
        print(f"Risk: {risk_percent(rep.level)}/100 ({get_risk_label(rep.level)}) — headline: {rep.headline_name}")
        if rep.is_low:
            print("  Conditions relatively safe. Keep monitoring routinely.")
        for r in rep.risks:
            print(f"  - {r.name}: {r.note} (score {risk_percent(r.level)}/100)")
