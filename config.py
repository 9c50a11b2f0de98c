# config.py
# Environment-driven settings for the coastal dashboard

import os
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------
COASTAL_API_BASE = os.getenv("COASTAL_API_BASE", "http://localhost:8080").rstrip("/")

# ---------------------------------------------------------------------
# External shoreline feed (USGS Massachusetts Shoreline Change, 1800s to 2018)
# ---------------------------------------------------------------------
SHORELINE_CSV_URL = os.getenv(
    "SHORELINE_CSV_URL",
    "https://cmgds.marine.usgs.gov/data/whcmsc/data-release/doi-F73J3B0B/data/shorelines/mass_shorelines_1800s_to_2018.csv",
)
CORS_PROXY_URL = os.getenv("CORS_PROXY_URL", "https://cors-anywhere.herokuapp.com/")
SHORELINE_DATA_PAGE = "https://cmgds.marine.usgs.gov/data/whcmsc/data-release/doi-F73J3B0B/"

# ---------------------------------------------------------------------
# Map tiles
# ---------------------------------------------------------------------
MAPBOX_API_KEY = os.getenv("MAPBOX_API_KEY")
APP_ENV = os.getenv("APP_ENV", "production")

OSM_TILES = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTR = "&copy; OpenStreetMap contributors"
MAPBOX_TILES = "https://api.mapbox.com/styles/v1/mapbox/streets-v12/tiles/{z}/{x}/{y}?access_token="
MAPBOX_ATTR = "&copy; Mapbox &copy; OpenStreetMap contributors"
SATELLITE_TILES = "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}"
SATELLITE_ATTR = "Esri Satellite"


def is_development() -> bool:
    """True when the debug layer panel should be shown."""
    return APP_ENV.strip().lower() == "development"


def tile_source() -> Tuple[str, str]:
    """Street basemap URL and attribution; unauthenticated OSM tiles without a key."""
    if MAPBOX_API_KEY:
        return MAPBOX_TILES + MAPBOX_API_KEY, MAPBOX_ATTR
    return OSM_TILES, OSM_ATTR
