"""
Market Price Fetcher
====================
Source: any JSON endpoint you configure (Settings → market API URL).
When no endpoint is set the dashboard shows the built-in MOCK_MARKET table.

Expected response: a JSON array of objects, e.g.
    [
      {"commodity": "Red Chili", "unit": "kg", "market": "Kramat Jati",
       "price": 62000, "ts": 1710000000000},
      ...
    ]
Indonesian field names (nama, satuan, pasar, harga, timestamp) are accepted too.
`ts` is epoch milliseconds.

Usage (from project root):
    python -m agrihub.market_price_fetcher --url https://api.example.com/prices
    python -m agrihub.market_price_fetcher --url URL --api-key TOKEN --query chili

Or call from code:
    from agrihub.market_price_fetcher import get_market_prices
    df, source = get_market_prices(url, api_key)
"""

import argparse
import logging
import time

import pandas as pd
import requests

from agrihub.config import REQUEST_TIMEOUT

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fallback table (prices in IDR)
# ---------------------------------------------------------------------------
MOCK_MARKET: list[dict] = [
    {"commodity": "Medium Rice",      "unit": "kg", "market": "Jakarta",    "price": 13500},
    {"commodity": "Red Chili",        "unit": "kg", "market": "Medan",      "price": 62000},
    {"commodity": "Shallot",          "unit": "kg", "market": "Surabaya",   "price": 38000},
    {"commodity": "Shelled Maize",    "unit": "kg", "market": "Yogyakarta", "price": 6500},
    {"commodity": "Soybean",          "unit": "kg", "market": "Bandung",    "price": 12800},
    {"commodity": "Oil Palm FFB",     "unit": "kg", "market": "Batam",      "price": 2550},
]

# Output columns
KEEP_COLS = ["commodity", "unit", "market", "price", "ts"]

# Column → accepted source keys (first present wins) and default
_FIELD_ALIASES: dict[str, tuple[tuple[str, ...], object]] = {
    "commodity": (("commodity", "nama"),   "?"),
    "unit":      (("unit", "satuan"),      "kg"),
    "market":    (("market", "pasar"),     "-"),
    "price":     (("price", "harga"),      0),
}
_TS_KEYS = ("ts", "timestamp")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _pick(record: dict, keys: tuple[str, ...], default):
    """First truthy value among the alias keys, else default."""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return default


def fetch_market_prices(url: str, api_key: str | None = None) -> list:
    """
    GET the configured market endpoint. Sends a Bearer token when api_key is set.
    Returns parsed JSON (validated later by normalise_records).
    """
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
    log.info("Fetching market prices from %s ...", url)
    resp = requests.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def normalise_records(records) -> pd.DataFrame:
    """
    Normalise raw API records into the market table.

    Parameters
    ----------
    records : list[dict]
        Decoded JSON array from the endpoint.

    Returns
    -------
    pd.DataFrame with columns: commodity, unit, market, price (float),
                                ts (datetime64, UTC)
    """
    if not isinstance(records, list):
        raise ValueError("Unexpected market price format: expected a JSON array")

    now = _now_ms()
    rows = []
    for rec in records:
        if not isinstance(rec, dict):
            rec = {}
        row = {col: _pick(rec, keys, default) for col, (keys, default) in _FIELD_ALIASES.items()}
        row["commodity"] = str(row["commodity"])
        row["unit"]      = str(row["unit"])
        row["market"]    = str(row["market"])
        row["ts"]        = _pick(rec, _TS_KEYS, now)
        rows.append(row)

    df = pd.DataFrame(rows, columns=KEEP_COLS)
    df["price"] = pd.to_numeric(df["price"], errors="coerce").fillna(0.0).astype(float)
    ts = pd.to_numeric(df["ts"], errors="coerce").fillna(now)
    df["ts"] = pd.to_datetime(ts, unit="ms", utc=True)
    return df


def mock_prices() -> pd.DataFrame:
    """MOCK_MARKET stamped with the current time."""
    now = _now_ms()
    return normalise_records([{**row, "ts": now} for row in MOCK_MARKET])


def get_market_prices(url: str | None, api_key: str | None = None) -> tuple[pd.DataFrame, str]:
    """
    Live table when an endpoint is configured, otherwise the mock table.

    Returns
    -------
    (DataFrame, source) where source is "live" or "mock".
    """
    if not url:
        log.info("No market endpoint configured; using mock prices.")
        return mock_prices(), "mock"
    data = fetch_market_prices(url, api_key)
    df = normalise_records(data)
    log.info("Fetched %d market price rows.", len(df))
    return df, "live"


def filter_prices(df: pd.DataFrame, query: str | None) -> pd.DataFrame:
    """Case-insensitive substring search over commodity and market."""
    q = (query or "").strip().lower()
    if not q:
        return df
    haystack = (df["commodity"].astype(str) + " " + df["market"].astype(str)).str.lower()
    return df[haystack.str.contains(q, regex=False)]


# ---------------------------------------------------------------------------
# CLI entrypoint: python -m agrihub.market_price_fetcher --url URL
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Fetch market prices from a JSON endpoint (or show mock prices)."
    )
    parser.add_argument("--url",     default="",   help="Market price endpoint (omit for mock data)")
    parser.add_argument("--api-key", default=None, help="Bearer token (optional)")
    parser.add_argument("--query",   default="",   help="Filter by commodity or market")
    args = parser.parse_args()

    table, src = get_market_prices(args.url, args.api_key)
    table = filter_prices(table, args.query)
    print(f"\nSource: {src} | {len(table)} rows")
    print(table.to_string(index=False))
