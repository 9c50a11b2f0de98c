# map_layers.py
# Engine-neutral map content: layer catalogue, shoreline styling, viz mode switching.
# Both map backends (folium, ipyleaflet) build from these definitions.

import sys
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import config
from coastal_models import ShorelinePoint

# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------
DEFAULT_CENTER = (42.0, -70.8)  # Massachusetts
DEFAULT_ZOOM = 8

# East Coast reference path, (name, lat, lon), north to south
EAST_COAST_POINTS = [
    ("Maine", 44.8101, -66.9647),
    ("Massachusetts", 42.4072, -71.3824),
    ("New York", 40.7128, -74.0060),
    ("Maryland", 39.2904, -76.6122),
    ("DC", 38.9072, -77.0369),
    ("Virginia", 36.8508, -76.2859),
    ("North Carolina", 34.2257, -77.9447),
    ("Georgia", 32.0835, -81.0998),
    ("Florida", 25.7617, -80.1918),
]
REFERENCE_COLOR = "#0d6efd"

STREET_TITLE = "Street Map"
SATELLITE_TITLE = "Satellite Imagery"
USGS_OVERLAY_TITLE = "USGS Coastal Change Overlay"
USGS_TRANSECTS_TITLE = "USGS Transects (Alternative)"
USGS_HISTORICAL_TITLE = "USGS Historical Shorelines"
REFERENCE_TITLE = "East Coast Reference Points"
DOTS_TITLE = "MA Shoreline Points"
HEATMAP_TITLE = "MA Shoreline Heatmap"

# Overlays driven by the "USGS data" switch
USGS_SWITCH_TITLES = (USGS_OVERLAY_TITLE, USGS_HISTORICAL_TITLE)

MAX_RATE = 3.0          # m/yr at which markers stop growing
LABEL_THRESHOLD = 0.6   # normalized magnitude above which markers get a text label
HEAT_RATE_SCALE = 2.0   # m/yr mapped to full heat weight

EROSION_LEGEND_COLOR = "rgba(255,50,50,0.8)"
ACCRETION_LEGEND_COLOR = "rgba(50,200,50,0.8)"


class VizMode(str, Enum):
    DOTS = "dots"
    HEATMAP = "heatmap"


# ---------------------------------------------------------------------
# Layer catalogue
# ---------------------------------------------------------------------
def base_layers() -> List[Dict]:
    street_url, street_attr = config.tile_source()
    return [
        {"title": STREET_TITLE, "url": street_url, "attribution": street_attr, "visible": True},
        {"title": SATELLITE_TITLE, "url": config.SATELLITE_TILES,
         "attribution": config.SATELLITE_ATTR, "visible": False},
    ]


def usgs_layers(visible: bool = True) -> List[Dict]:
    """Remote USGS Coastal Change Hazards Portal overlays."""
    return [
        {
            "title": USGS_OVERLAY_TITLE,
            "kind": "wms",
            "url": "https://cida.usgs.gov/coastalchangehazardsportal/geoserver/wms",
            "layers": "ccap:SC_shorelines_shellpoint",
            "attribution": "USGS Coastal Change Hazards Portal",
            "opacity": 0.7,
            "visible": visible,
        },
        {
            "title": USGS_TRANSECTS_TITLE,
            "kind": "tile",
            "url": "https://marine.usgs.gov/coastalchangehazardsportal/rest/services/National_Assessment/national_baseline_transects/MapServer/tile/{z}/{y}/{x}",
            "attribution": "USGS Coastal Change Hazards Portal",
            "opacity": 0.7,
            "visible": False,
        },
        {
            "title": USGS_HISTORICAL_TITLE,
            "kind": "tile",
            "url": "https://marine.usgs.gov/coastalchangehazardsportal/rest/services/DigitalShorelineData/historical_shorelines/MapServer/tile/{z}/{y}/{x}",
            "attribution": "USGS Historical Shorelines",
            "opacity": 0.8,
            "visible": visible,
        },
    ]


def reference_path() -> List[Tuple[float, float]]:
    return [(lat, lon) for _, lat, lon in EAST_COAST_POINTS]


# ---------------------------------------------------------------------
# Shoreline styling
# ---------------------------------------------------------------------
def rate_magnitude(point: ShorelinePoint) -> float:
    return min(abs(point.erosion_rate or 0.0), MAX_RATE) / MAX_RATE


def marker_style(point: ShorelinePoint) -> Dict:
    """
    Marker look for one shoreline point.

    Erosion (negative rate) is drawn in red shades, accretion in green; both
    deepen and grow with the clamped rate magnitude. Only strong points get a
    three-letter location label.
    """
    m = rate_magnitude(point)
    if (point.erosion_rate or 0.0) < 0:
        rgb = (255, round(50 + (1 - m) * 150), 50)
    else:
        rgb = (50, round(150 + m * 100), 50)
    radius = 5 + m * 7
    label = point.location[:3] if m > LABEL_THRESHOLD and point.location else None
    return {
        "color": "rgba({},{},{},0.8)".format(*rgb),
        "hex": "#{:02x}{:02x}{:02x}".format(*rgb),
        "radius": radius,
        "label": label,
    }


def heat_weight(point: ShorelinePoint) -> float:
    """Erosion and accretion both contribute heat."""
    return min(1.0, abs(point.erosion_rate or 0.0) / HEAT_RATE_SCALE)


def popup_html(point: ShorelinePoint) -> str:
    return (
        f"<h5>{point.location or 'Shoreline Point'}</h5>"
        f"<p><strong>Date:</strong> {point.date}</p>"
        f"<p><strong>Erosion Rate:</strong> {point.erosion_rate:.2f} m/year</p>"
        f"<p><strong>Shoreline Change:</strong> {point.shoreline_change:.2f} m</p>"
    )


def heat_points(points: List[ShorelinePoint]) -> List[List[float]]:
    return [[p.latitude, p.longitude, heat_weight(p)] for p in points if p.latitude and p.longitude]


def nearest_point(points: List[ShorelinePoint], lat: float, lon: float,
                  max_distance_deg: float = 0.05) -> Optional[ShorelinePoint]:
    """Shoreline point closest to a clicked location, if any lies within the tolerance."""
    best, best_d2 = None, max_distance_deg ** 2
    for p in points:
        d2 = (p.latitude - lat) ** 2 + (p.longitude - lon) ** 2
        if d2 <= best_d2:
            best, best_d2 = p, d2
    return best


# ---------------------------------------------------------------------
# Visibility orchestration
# ---------------------------------------------------------------------
class VisualizationToggle:
    """
    Dots/heatmap switch for a map.

    Holds only the map's visibility setter; exactly one of the two shoreline
    layers is visible after every selection.
    """

    def __init__(self, set_visible: Callable[[str, bool], None], mode: VizMode = VizMode.DOTS):
        self._set_visible = set_visible
        self.mode = VizMode(mode)

    def apply(self):
        self._set_visible(DOTS_TITLE, self.mode is VizMode.DOTS)
        self._set_visible(HEATMAP_TITLE, self.mode is VizMode.HEATMAP)

    def select(self, mode) -> VizMode:
        self.mode = VizMode(mode)
        self.apply()
        return self.mode

    def toggle(self) -> VizMode:
        nxt = VizMode.HEATMAP if self.mode is VizMode.DOTS else VizMode.DOTS
        return self.select(nxt)


def set_overlay_visibility(set_visible: Callable[[str, bool], None], visible: bool) -> bool:
    """Show or hide the USGS overlays. Engine errors are logged and ignored."""
    try:
        for title in USGS_SWITCH_TITLES:
            set_visible(title, visible)
        print(f"USGS layer visibility set to: {visible}", file=sys.stderr)
        return True
    except Exception as e:
        print(f"✗ Error updating USGS layer visibility: {e}", file=sys.stderr)
        return False


def debug_layer_rows(layers: Dict[str, bool], enabled: Optional[bool] = None) -> List[Tuple[str, bool]]:
    """(title, visible) rows for the layer debug panel; empty outside development."""
    if enabled is None:
        enabled = config.is_development()
    if not enabled:
        return []
    return [(title or f"Layer {i}", visible) for i, (title, visible) in enumerate(layers.items())]
