"""
Weather provider: payload parsing, hourly table, refresh cadence, fetch wiring.
No network: requests.get is monkeypatched.
Run from project root: python -m pytest tests/test_weather.py -v
"""

import sys
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agrihub import weather
from agrihub.weather import (
    HOURLY_COLUMNS,
    WeatherObservation,
    assess_location,
    fetch_forecast,
    hourly_frame,
    parse_current,
    refresh_bucket,
)


def _payload(temp=29.0, rh=90, precip=3.0, hours=30) -> dict:
    current = {"time": "2026-10-17T10:00", "interval": 900,
               "temperature_2m": temp, "relative_humidity_2m": rh}
    if precip is not None:
        current["precipitation"] = precip
    return {
        "latitude": -6.2,
        "longitude": 106.8,
        "current": current,
        "hourly": {
            "time": [f"2026-10-17T{h % 24:02d}:00" for h in range(hours)],
            "temperature_2m": [25.0 + h * 0.1 for h in range(hours)],
            "relative_humidity_2m": [80] * hours,
            "precipitation": [0.0] * hours,
        },
    }


class _FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def test_parse_current_reads_three_scalars():
    obs = parse_current(_payload(27.5, 75, 0.4))
    assert obs == WeatherObservation(temperature_c=27.5, humidity_pct=75.0, precip_mm=0.4)


def test_parse_current_missing_precipitation_is_zero():
    obs = parse_current(_payload(precip=None))
    assert obs.precip_mm == 0.0


def test_parse_current_rejects_incomplete_payload():
    with pytest.raises(ValueError):
        parse_current({})
    with pytest.raises(ValueError):
        parse_current({"current": {"temperature_2m": 20.0}})


def test_hourly_frame_first_24_rows():
    df = hourly_frame(_payload(hours=30))
    assert list(df.columns) == HOURLY_COLUMNS
    assert len(df) == 24
    assert df["temperature_c"].iloc[0] == pytest.approx(25.0)
    assert str(df["time"].dtype).startswith("datetime64")


def test_hourly_frame_ragged_and_missing():
    payload = _payload(hours=10)
    payload["hourly"]["precipitation"] = [0.0] * 4
    assert len(hourly_frame(payload)) == 4

    empty = hourly_frame({"current": {}})
    assert empty.empty
    assert list(empty.columns) == HOURLY_COLUMNS


def test_refresh_bucket():
    assert refresh_bucket(0, now=1_000_000) == 0
    assert refresh_bucket(-5, now=1_000_000) == 0
    # same 15-minute window → same bucket; next window → next bucket
    assert refresh_bucket(15, now=900 * 10) == refresh_bucket(15, now=900 * 10 + 899)
    assert refresh_bucket(15, now=900 * 11) == refresh_bucket(15, now=900 * 10) + 1


def test_fetch_forecast_requests_current_and_hourly(monkeypatch):
    calls = {}

    def fake_get(url, params=None, timeout=None):
        calls["url"] = url
        calls["params"] = params
        calls["timeout"] = timeout
        return _FakeResponse(_payload())

    monkeypatch.setattr(weather.requests, "get", fake_get)
    data = fetch_forecast(-6.2, 106.816666)
    assert data["current"]["temperature_2m"] == 29.0
    assert calls["url"].startswith("https://api.open-meteo.com/")
    assert calls["params"]["latitude"] == -6.2
    assert "relative_humidity_2m" in calls["params"]["current"]
    assert "precipitation" in calls["params"]["hourly"]
    assert calls["timeout"]


def test_fetch_forecast_propagates_http_errors(monkeypatch):
    monkeypatch.setattr(weather.requests, "get", lambda *a, **k: _FakeResponse({}, status=503))
    with pytest.raises(requests.HTTPError):
        fetch_forecast(0.0, 0.0)


def test_assess_location_end_to_end(monkeypatch):
    monkeypatch.setattr(weather.requests, "get", lambda *a, **k: _FakeResponse(_payload(29, 90, 3)))
    obs, report, payload = assess_location(-6.2, 106.8, "rice")
    assert obs.temperature_c == 29.0
    assert report.headline_name == "Blast/leaf fungus"
    assert report.level == 1.0
    assert "hourly" in payload


if __name__ == "__main__":
    import subprocess
    sys.exit(subprocess.call([sys.executable, "-m", "pytest", __file__, "-v", "-s"]))
