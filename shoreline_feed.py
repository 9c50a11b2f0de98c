# shoreline_feed.py
# USGS Massachusetts shoreline change feed: fetch, parse, fall back to a fixed sample

import random
import re
import string
import sys
from typing import Dict, List, Optional

import requests

import config
from coastal_models import ShorelinePoint

# Canonical fields, matched against the CSV header by lowercase substring
FEED_FIELDS = [
    "transectId", "latitude", "longitude", "date",
    "erosionRate", "shorelineChange", "uncertainty", "location",
]
NUMERIC_FIELDS = {"latitude", "longitude", "erosionRate", "shorelineChange", "uncertainty"}

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_ID_ALPHABET = string.digits + string.ascii_lowercase

# ---------------------------------------------------------------------
# Fallback sample (Cape Cod, Martha's Vineyard, Boston Harbor)
# ---------------------------------------------------------------------
_FALLBACK_ROWS = [
    ("CC-001", 42.0565, -70.1844, "2000-01-01", -0.5, -10, 2, "Cape Cod"),
    ("CC-002", 42.0544, -70.1833, "2010-01-01", -0.7, -17, 2, "Cape Cod"),
    ("CC-003", 42.0523, -70.1822, "2018-01-01", -0.8, -22, 2, "Cape Cod"),
    ("MV-001", 41.4108, -70.5652, "2000-01-01", -1.2, -24, 3, "Martha's Vineyard"),
    ("MV-002", 41.4120, -70.5630, "2010-01-01", -1.5, -39, 3, "Martha's Vineyard"),
    ("MV-003", 41.4132, -70.5608, "2018-01-01", -1.8, -54, 3, "Martha's Vineyard"),
    # accretion rather than erosion
    ("BH-001", 42.3305, -70.9709, "2000-01-01", 0.3, 6, 2, "Boston Harbor"),
    ("BH-002", 42.3299, -70.9695, "2010-01-01", 0.4, 10, 2, "Boston Harbor"),
    ("BH-003", 42.3293, -70.9681, "2018-01-01", 0.5, 14, 2, "Boston Harbor"),
]


def fallback_shoreline_data() -> List[ShorelinePoint]:
    return [
        ShorelinePoint(
            transect_id=tid, latitude=lat, longitude=lon, date=d,
            erosion_rate=rate, shoreline_change=change, uncertainty=unc, location=loc,
        )
        for tid, lat, lon, d, rate, change, unc, loc in _FALLBACK_ROWS
    ]


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------
def parse_number(text: Optional[str]) -> float:
    """Leading numeric prefix of text, 0.0 when there is none."""
    if not text:
        return 0.0
    m = _FLOAT_PREFIX.match(text)
    return float(m.group(0)) if m else 0.0


def random_transect_id() -> str:
    return "T-" + "".join(random.choices(_ID_ALPHABET, k=9))


def locate_columns(header_line: str) -> Dict[str, int]:
    """First header containing each field name (case-insensitive); -1 when absent."""
    headers = [h.lower() for h in header_line.split(",")]
    indices = {}
    for field in FEED_FIELDS:
        needle = field.lower()
        indices[field] = next((i for i, h in enumerate(headers) if needle in h), -1)
    return indices


def parse_shoreline_csv(csv_text: str) -> List[ShorelinePoint]:
    """
    Parse the shoreline CSV into points.

    Rows are split on plain commas: quoted fields containing commas are NOT
    supported and will shift the columns of that row.
    """
    lines = [line.rstrip("\r") for line in csv_text.strip().split("\n")]
    columns = locate_columns(lines[0])

    points = []
    for line in lines[1:]:
        values = line.split(",")

        def raw(field):
            idx = columns[field]
            return values[idx] if 0 <= idx < len(values) else ""

        nums = {f: parse_number(raw(f)) for f in NUMERIC_FIELDS}
        if not nums["latitude"] or not nums["longitude"]:
            continue

        points.append(ShorelinePoint(
            transect_id=raw("transectId") or random_transect_id(),
            latitude=nums["latitude"],
            longitude=nums["longitude"],
            date=raw("date"),
            erosion_rate=nums["erosionRate"],
            shoreline_change=nums["shorelineChange"],
            uncertainty=nums["uncertainty"],
            location=raw("location") or "Unknown",
        ))
    return points


# ---------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------
def _download(url: str) -> str:
    r = requests.get(url)
    r.raise_for_status()
    return r.text


def fetch_shoreline_data(url: Optional[str] = None, proxy: Optional[str] = None) -> List[ShorelinePoint]:
    """Shoreline points from the feed, or the fallback sample. Never raises."""
    url = url or config.SHORELINE_CSV_URL
    proxy = config.CORS_PROXY_URL if proxy is None else proxy
    try:
        try:
            text = _download(url)
        except requests.RequestException as e:
            print(f"Direct fetch failed ({e}), trying through CORS proxy...", file=sys.stderr)
            text = _download(proxy + url)
        points = parse_shoreline_csv(text)
        print(f"✓ Loaded {len(points)} shoreline points from feed", file=sys.stderr)
        return points
    except Exception as e:
        print(f"✗ Error fetching USGS shoreline data: {e}; using sample data", file=sys.stderr)
        return fallback_shoreline_data()
