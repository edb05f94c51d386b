"""
Streamlit UI — AgriHub farmer dashboard.
Tabs: Weather & Pests (live Open-Meteo + heuristic risk), Market prices (mock or
your endpoint), Settings (coordinates, crop, refresh interval, market endpoint).
Run with: streamlit run app.py
"""

import sys
from datetime import datetime
from pathlib import Path

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from agrihub.config import ensure_dirs
from agrihub.crops import Crop, CROP_DISPLAY_NAMES, crop_label, parse_crop
from agrihub.risk_engine import (
    assess_observation,
    build_risk_table,
    get_risk_label,
    risk_percent,
)
from agrihub.settings import load_settings, save_settings
from agrihub.weather import fetch_forecast, hourly_frame, parse_current, refresh_bucket
from agrihub.market_price_fetcher import get_market_prices, filter_prices


@st.cache_data(show_spinner=False)
def _cached_forecast(latitude: float, longitude: float, bucket: int) -> tuple[dict, datetime]:
    """Forecast payload and the time it was fetched, re-fetched once per refresh bucket."""
    return fetch_forecast(latitude, longitude), datetime.now()


@st.cache_data(show_spinner=False, ttl=300)
def _cached_market(url: str, api_key: str):
    return get_market_prices(url, api_key)


def _risk_colour(label: str) -> str:
    return {"Low": "green", "Medium": "orange", "High": "red"}.get(label, "grey")


def _fmt_time(ts: datetime) -> str:
    return ts.strftime("%d %b %Y %H:%M")


# ---------------------------------------------------------------------------
# Weather & pests
# ---------------------------------------------------------------------------

def render_weather(settings: dict):
    lat, lon = settings["latitude"], settings["longitude"]
    crop = settings["crop"]

    try:
        payload, fetched_at = _cached_forecast(lat, lon, refresh_bucket(settings["refresh_minutes"]))
        observation = parse_current(payload)
    except Exception as exc:
        st.error(f"Failed to load weather: {exc}")
        return

    st.subheader("Current weather")
    st.caption(f"Live from Open-Meteo • last updated {_fmt_time(fetched_at)}")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Temperature", f"{observation.temperature_c:.1f} °C")
    c2.metric("Humidity", f"{observation.humidity_pct:.0f} %")
    c3.metric("Rain", f"{observation.precip_mm:.2f} mm")
    c4.metric("Coordinates", f"{lat:.3f}, {lon:.3f}")

    st.divider()

    report = assess_observation(crop, observation)
    label = get_risk_label(report.level)
    pct = risk_percent(report.level)

    st.subheader("Pest / disease risk (heuristic)")
    st.caption(f"Crop: {crop_label(crop)}")
    if parse_crop(crop) is None:
        st.info(f"No risk rules for '{crop}'. Pick a supported crop in Settings.")

    st.markdown(f"Risk score: **{pct}/100** — :{_risk_colour(label)}[{label}]")
    st.progress(min(pct, 100) / 100)

    if report.is_low:
        st.success("Conditions relatively safe. Keep monitoring routinely.")
    else:
        st.markdown(f"**Main concern:** {report.headline_name}")
        for r in report.risks:
            st.markdown(f"- **{r.name}** — {r.note} (score {risk_percent(r.level)}/100)")
        with st.expander("Factor table"):
            st.dataframe(build_risk_table(report), use_container_width=True, hide_index=True)

    st.divider()
    st.subheader("Hourly forecast (24 h)")
    hourly = hourly_frame(payload)
    if hourly.empty:
        st.info("No hourly data returned.")
    else:
        st.dataframe(
            hourly.rename(columns={
                "time": "Time",
                "temperature_c": "Temperature (°C)",
                "humidity_pct": "Humidity (%)",
                "precip_mm": "Rain (mm)",
            }),
            use_container_width=True,
            hide_index=True,
        )
    st.caption("The pest heuristic is an early indication, not a field diagnosis.")


# ---------------------------------------------------------------------------
# Market prices
# ---------------------------------------------------------------------------

def render_market(settings: dict):
    st.subheader("Market prices")
    configured_url = settings["market_api_url"]
    mode = st.radio(
        "Data source",
        options=["Mock", "Live"],
        index=1 if configured_url else 0,
        horizontal=True,
        key="market_mode",
    )
    if mode == "Live" and not configured_url:
        st.warning("No market endpoint configured. Set one in Settings; showing mock data.")
    url = configured_url if mode == "Live" else ""

    try:
        df, source = _cached_market(url, settings["market_api_key"])
    except Exception as exc:
        st.error(f"Failed to load market prices: {exc}")
        return

    if source == "live":
        st.caption(f"Live • {url}")
    else:
        st.caption("Mock data • set a market endpoint in Settings for live prices")

    query = st.text_input("Search commodity or market", "")
    table = filter_prices(df, query)
    st.dataframe(
        table.rename(columns={
            "commodity": "Commodity",
            "unit": "Unit",
            "market": "Market",
            "price": "Price",
            "ts": "Updated",
        }),
        use_container_width=True,
        hide_index=True,
    )

    if st.button("Refresh prices"):
        _cached_market.clear()
        st.rerun()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def render_settings(settings: dict):
    st.subheader("Settings")
    crops = [c.value for c in Crop]
    current_crop = parse_crop(settings["crop"])

    with st.form("settings_form"):
        col1, col2 = st.columns(2)
        latitude = col1.number_input("Latitude", value=float(settings["latitude"]), format="%.4f", step=0.0001)
        longitude = col2.number_input("Longitude", value=float(settings["longitude"]), format="%.4f", step=0.0001)
        crop = st.selectbox(
            "Crop",
            options=crops,
            index=crops.index(current_crop.value) if current_crop else 0,
            format_func=lambda c: CROP_DISPLAY_NAMES[Crop(c)],
            key="settings_crop",
        )
        refresh_minutes = st.number_input(
            "Auto refresh (minutes, 0 = off)",
            min_value=0,
            value=int(settings["refresh_minutes"]),
            step=1,
        )
        market_api_url = st.text_input("Market API URL (optional)", settings["market_api_url"],
                                       placeholder="https://api.example.com/market-prices")
        market_api_key = st.text_input("Market API key (optional)", settings["market_api_key"], type="password")
        submitted = st.form_submit_button("Save", type="primary", key="settings_save")

    if submitted:
        new_settings = {
            "latitude": latitude,
            "longitude": longitude,
            "crop": crop,
            "refresh_minutes": refresh_minutes,
            "market_api_url": market_api_url,
            "market_api_key": market_api_key,
        }
        try:
            path = save_settings(new_settings)
        except OSError as exc:
            st.error(f"Could not save settings: {exc}")
            return
        st.session_state["settings"] = load_settings(path)
        _cached_market.clear()
        st.success("Saved.")
        st.rerun()


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

def main():
    st.set_page_config(
        page_title="AgriHub",
        page_icon="🌾",
        layout="wide",
    )
    ensure_dirs()

    if "settings" not in st.session_state:
        st.session_state["settings"] = load_settings()
    settings = st.session_state["settings"]

    st.title("🌾 AgriHub")
    st.caption("Weather • pest risk • market prices")

    tab_weather, tab_market, tab_settings = st.tabs(["Weather & Pests", "Market prices", "Settings"])

    with tab_weather:
        minutes = int(settings["refresh_minutes"])
        if minutes > 0:
            st.fragment(run_every=minutes * 60)(render_weather)(settings)
        else:
            render_weather(settings)
    with tab_market:
        render_market(settings)
    with tab_settings:
        render_settings(settings)

    st.sidebar.markdown("**Location**")
    st.sidebar.caption(f"{settings['latitude']:.3f}, {settings['longitude']:.3f}")
    st.sidebar.markdown("**Crop**")
    st.sidebar.caption(crop_label(settings["crop"]))
    st.sidebar.divider()
    st.sidebar.caption("AgriHub • risk heuristic is indicative only")


if __name__ == "__main__":
    main()
