# map_folium.py
# Folium backend: static HTML map, re-rendered whenever its inputs change

import sys
from typing import List, Optional, Tuple

import folium
from folium import plugins

from coastal_models import ShorelinePoint
from map_layers import (
    DEFAULT_CENTER, DEFAULT_ZOOM, EAST_COAST_POINTS, REFERENCE_COLOR,
    REFERENCE_TITLE, DOTS_TITLE, base_layers, usgs_layers, reference_path,
    marker_style, popup_html,
)


def build_folium_map(points: Optional[List[ShorelinePoint]] = None, usgs_visible: bool = True,
                     center: Tuple[float, float] = DEFAULT_CENTER,
                     zoom: int = DEFAULT_ZOOM) -> folium.Map:
    """Base tiles, USGS overlays, the East Coast reference path and shoreline points."""
    m = folium.Map(location=center, zoom_start=zoom, tiles=None)

    for lyr in base_layers():
        folium.TileLayer(
            tiles=lyr["url"], attr=lyr["attribution"], name=lyr["title"],
            overlay=False, show=lyr["visible"],
        ).add_to(m)

    for lyr in usgs_layers(usgs_visible):
        if lyr["kind"] == "wms":
            folium.raster_layers.WmsTileLayer(
                url=lyr["url"], layers=lyr["layers"], fmt="image/png",
                transparent=True, attr=lyr["attribution"], name=lyr["title"],
                overlay=True, show=lyr["visible"], opacity=lyr["opacity"],
            ).add_to(m)
        else:
            folium.TileLayer(
                tiles=lyr["url"], attr=lyr["attribution"], name=lyr["title"],
                overlay=True, show=lyr["visible"], opacity=lyr["opacity"],
            ).add_to(m)

    reference = folium.FeatureGroup(name=REFERENCE_TITLE, show=True)
    folium.PolyLine(reference_path(), color=REFERENCE_COLOR, weight=4).add_to(reference)
    for name, lat, lon in EAST_COAST_POINTS:
        folium.CircleMarker(
            location=(lat, lon), radius=4, color="white", weight=1,
            fill=True, fill_color=REFERENCE_COLOR, fill_opacity=1.0, tooltip=name,
        ).add_to(reference)
    reference.add_to(m)

    if points:
        dots = folium.FeatureGroup(name=DOTS_TITLE, show=True)
        for p in points:
            if not (p.latitude and p.longitude):
                continue
            style = marker_style(p)
            folium.CircleMarker(
                location=(p.latitude, p.longitude),
                radius=style["radius"],
                color="white", weight=1,
                fill=True, fill_color=style["hex"], fill_opacity=0.8,
                popup=folium.Popup(popup_html(p), max_width=260),
                tooltip=style["label"],
            ).add_to(dots)
        dots.add_to(m)
        print(f"Added {len(points)} shoreline points to folium map", file=sys.stderr)

    folium.LayerControl(collapsed=True).add_to(m)
    plugins.Fullscreen(position="topleft").add_to(m)
    return m


def render_folium_html(points: Optional[List[ShorelinePoint]] = None, usgs_visible: bool = True) -> str:
    return build_folium_map(points, usgs_visible)._repr_html_()
