"""
Dashboard smoke tests: render app.py headless with Streamlit's AppTest.
requests.get is faked and the settings file lives in a temp directory.
Run from project root: python -m pytest tests/test_app.py -v
"""

import json
import sys
from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import agrihub.config
import agrihub.settings
from agrihub import market_price_fetcher, weather

APP_PATH = str(PROJECT_ROOT / "app.py")
MARKET_URL = "https://api.example.com/market-prices"


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def _weather_payload() -> dict:
    return {
        "current": {"temperature_2m": 29.0, "relative_humidity_2m": 90, "precipitation": 3.0},
        "hourly": {
            "time": [f"2026-10-17T{h:02d}:00" for h in range(24)],
            "temperature_2m": [27.0] * 24,
            "relative_humidity_2m": [85] * 24,
            "precipitation": [0.5] * 24,
        },
    }


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Temp settings file, faked network; returns (settings path, list of requested URLs)."""
    settings_path = tmp_path / "settings.json"
    monkeypatch.setattr(agrihub.settings, "SETTINGS_PATH", settings_path)
    monkeypatch.setattr(agrihub.config, "DATA_DIR", tmp_path)

    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append(url)
        if url == MARKET_URL:
            return _FakeResponse([{"commodity": "Live Chili", "market": "Kramat Jati", "price": 61000}])
        return _FakeResponse(_weather_payload())

    monkeypatch.setattr(weather.requests, "get", fake_get)
    monkeypatch.setattr(market_price_fetcher.requests, "get", fake_get)
    st.cache_data.clear()
    yield settings_path, calls
    st.cache_data.clear()


def _write_settings(path: Path, **overrides):
    # refresh off keeps the weather tab out of the timed fragment
    stored = {"crop": "rice", "refresh_minutes": 0, **overrides}
    path.write_text(json.dumps(stored), encoding="utf-8")


def _markdown(at) -> str:
    return "\n".join(m.value for m in at.markdown)


def _market_table(at):
    for df in at.dataframe:
        if "Commodity" in df.value.columns:
            return df.value
    raise AssertionError("market table not rendered")


def test_app_renders_risk_for_saved_crop(app_env):
    settings_path, _ = app_env
    _write_settings(settings_path)
    at = AppTest.from_file(APP_PATH, default_timeout=30).run()

    assert not at.exception
    text = _markdown(at)
    assert "100/100" in text
    assert "Main concern:** Blast/leaf fungus" in text


def test_settings_save_persists_and_rerenders(app_env):
    """Saving the settings form writes the file and the weather tab follows the new crop."""
    settings_path, _ = app_env
    _write_settings(settings_path)
    at = AppTest.from_file(APP_PATH, default_timeout=30).run()
    assert not at.exception

    at.selectbox(key="settings_crop").set_value("maize")
    at.button(key="settings_save").click()
    at.run()

    assert not at.exception
    saved = json.loads(settings_path.read_text(encoding="utf-8"))
    assert saved["crop"] == "maize"
    assert "Fall armyworm" in _markdown(at)


def test_weather_fetched_once_per_refresh_window(app_env):
    """Reruns in the same refresh window reuse the cached forecast and its fetch time."""
    settings_path, calls = app_env
    _write_settings(settings_path)
    at = AppTest.from_file(APP_PATH, default_timeout=30).run()
    first_caption = [c.value for c in at.caption if "last updated" in c.value]
    at.run()
    second_caption = [c.value for c in at.caption if "last updated" in c.value]

    assert len([u for u in calls if u != MARKET_URL]) == 1
    assert first_caption and first_caption == second_caption


def test_market_mode_switch(app_env):
    """With an endpoint configured the tab starts live; switching to Mock shows the built-in table."""
    settings_path, _ = app_env
    _write_settings(settings_path, market_api_url=MARKET_URL)
    at = AppTest.from_file(APP_PATH, default_timeout=30).run()
    assert not at.exception
    assert _market_table(at)["Commodity"].tolist() == ["Live Chili"]

    at.radio(key="market_mode").set_value("Mock")
    at.run()
    commodities = _market_table(at)["Commodity"].tolist()
    assert "Live Chili" not in commodities
    assert len(commodities) == len(market_price_fetcher.MOCK_MARKET)


if __name__ == "__main__":
    import subprocess
    sys.exit(subprocess.call([sys.executable, "-m", "pytest", __file__, "-v", "-s"]))
