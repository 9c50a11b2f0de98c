# map_leaflet.py
# ipyleaflet backend: live widget map with dots/heatmap switching, click popups
# and a development-only layer debug panel.

import sys
from typing import Callable, Dict, List, Optional

from ipyleaflet import (
    Map, TileLayer, WMSLayer, Polyline, CircleMarker, Marker, DivIcon, LayerGroup, Heatmap,
    Popup, WidgetControl, LayersControl, FullScreenControl, ScaleControl,
)
from ipywidgets import HTML, Checkbox, VBox, ToggleButtons

import config
from coastal_models import ShorelinePoint
from map_layers import (
    DEFAULT_CENTER, DEFAULT_ZOOM, EAST_COAST_POINTS, REFERENCE_COLOR,
    REFERENCE_TITLE, DOTS_TITLE, HEATMAP_TITLE, STREET_TITLE,
    VizMode, VisualizationToggle, base_layers, usgs_layers, reference_path,
    marker_style, heat_points, popup_html, nearest_point, set_overlay_visibility,
    debug_layer_rows,
)


class LeafletMapHandle:
    """
    One ipyleaflet map and the layers on it.

    Created per session and released with close(). Visibility is managed by
    adding/removing layers, keyed by layer title.
    """

    def __init__(self, points: Optional[List[ShorelinePoint]] = None, usgs_visible: bool = True,
                 mode: VizMode = VizMode.DOTS, debug: Optional[bool] = None,
                 height: str = "500px", on_mode_change: Optional[Callable[[VizMode], None]] = None):
        self.points: List[ShorelinePoint] = []
        self.labels: List[Marker] = []
        self.selected: Optional[ShorelinePoint] = None
        self.on_mode_change = on_mode_change
        self._layers: Dict[str, object] = {}
        self._visible: Dict[str, bool] = {}
        self._popup: Optional[Popup] = None
        self._viz_buttons: Optional[ToggleButtons] = None
        self._debug_boxes: Dict[str, Checkbox] = {}

        bases = base_layers()
        street = self._tile(bases[0], base=True)
        self.map = Map(
            basemap=street,
            center=DEFAULT_CENTER,
            zoom=DEFAULT_ZOOM,
            scroll_wheel_zoom=True,
            layout={"height": height, "width": "100%"},
        )
        self._layers[STREET_TITLE] = street
        self._visible[STREET_TITLE] = True
        self._register(self._tile(bases[1], base=True), bases[1]["title"], bases[1]["visible"])

        for lyr in usgs_layers(usgs_visible):
            layer = self._wms(lyr) if lyr["kind"] == "wms" else self._tile(lyr)
            self._register(layer, lyr["title"], lyr["visible"])

        self._register(self._reference_group(), REFERENCE_TITLE, True)

        self._register(LayerGroup(layers=(), name=DOTS_TITLE), DOTS_TITLE, False)
        self._register(Heatmap(locations=[], radius=10, blur=15, name=HEATMAP_TITLE),
                       HEATMAP_TITLE, False)

        self.viz = VisualizationToggle(self.set_visible, mode)
        self.viz.apply()

        self.map.add(LayersControl(position="topright"))
        self.map.add(FullScreenControl(position="topleft"))
        self.map.add(ScaleControl(position="bottomleft"))
        self.map.add(WidgetControl(widget=self._viz_widget(), position="bottomright"))
        if debug is None:
            debug = config.is_development()
        if debug:
            self.map.add(WidgetControl(widget=self.debug_panel(), position="topright"))

        self.map.on_interaction(self.handle_interaction)
        if points:
            self.set_points(points)
        print(f"Leaflet map created: center={self.map.center}, zoom={self.map.zoom}", file=sys.stderr)

    # -----------------------------------------------------------------
    # Layer construction
    # -----------------------------------------------------------------
    @staticmethod
    def _tile(lyr: Dict, base: bool = False) -> TileLayer:
        return TileLayer(url=lyr["url"], attribution=lyr["attribution"], name=lyr["title"],
                         base=base, opacity=lyr.get("opacity", 1.0))

    @staticmethod
    def _wms(lyr: Dict) -> WMSLayer:
        return WMSLayer(url=lyr["url"], layers=lyr["layers"], format="image/png",
                        transparent=True, attribution=lyr["attribution"],
                        name=lyr["title"], opacity=lyr["opacity"])

    @staticmethod
    def _reference_group() -> LayerGroup:
        line = Polyline(locations=reference_path(), color=REFERENCE_COLOR, weight=4, fill=False)
        markers = [
            CircleMarker(location=(lat, lon), radius=4, color="white", weight=1,
                         fill_color=REFERENCE_COLOR, fill_opacity=1.0, name=name)
            for name, lat, lon in EAST_COAST_POINTS
        ]
        return LayerGroup(layers=tuple([line] + markers), name=REFERENCE_TITLE)

    def _register(self, layer, title: str, visible: bool):
        self._layers[title] = layer
        self._visible[title] = False
        self.set_visible(title, visible)

    # -----------------------------------------------------------------
    # Visibility
    # -----------------------------------------------------------------
    def set_visible(self, title: str, visible: bool):
        layer = self._layers[title]
        if self._visible.get(title) == visible:
            return
        if visible:
            self.map.add(layer)
        else:
            self.map.remove(layer)
        self._visible[title] = visible
        box = self._debug_boxes.get(title)
        if box is not None and box.value != visible:
            box.value = visible

    def is_visible(self, title: str) -> bool:
        return self._visible.get(title, False)

    def layer_states(self) -> Dict[str, bool]:
        return dict(self._visible)

    def set_usgs_visible(self, visible: bool) -> bool:
        return set_overlay_visibility(self.set_visible, visible)

    def set_mode(self, mode) -> VizMode:
        mode = self.viz.select(mode)
        if self._viz_buttons is not None and self._viz_buttons.value != mode.value:
            self._viz_buttons.value = mode.value
        return mode

    # -----------------------------------------------------------------
    # Shoreline data
    # -----------------------------------------------------------------
    def set_points(self, points: List[ShorelinePoint]):
        """Replace the shoreline dots and heatmap contents."""
        self.points = [p for p in points if p.latitude and p.longitude]
        markers = []
        labels = []
        for p in self.points:
            style = marker_style(p)
            markers.append(CircleMarker(
                location=(p.latitude, p.longitude),
                radius=int(round(style["radius"])),
                color="white", weight=1,
                fill_color=style["hex"], fill_opacity=0.8,
                name=p.transect_id,
            ))
            if style["label"]:
                labels.append(self._label(p, style["label"]))
        self.labels = labels
        self._layers[DOTS_TITLE].layers = tuple(markers + labels)
        self._layers[HEATMAP_TITLE].locations = heat_points(self.points)
        print(f"Leaflet map: {len(markers)} shoreline points, {len(labels)} labels", file=sys.stderr)

    @staticmethod
    def _label(point: ShorelinePoint, text: str) -> Marker:
        icon = DivIcon(
            html=f'<span style="font:bold 10px sans-serif;color:#fff;text-shadow:0 0 2px #000;">{text}</span>',
            icon_size=[24, 12], icon_anchor=[12, 6],
        )
        return Marker(location=(point.latitude, point.longitude), icon=icon,
                      draggable=False, title=text)

    def handle_interaction(self, **kwargs):
        if kwargs.get("type") != "click":
            return
        lat, lon = kwargs.get("coordinates", (None, None))
        if lat is None:
            return
        self.show_popup(nearest_point(self.points, lat, lon))

    def show_popup(self, point: Optional[ShorelinePoint]):
        if self._popup is not None:
            self.map.remove(self._popup)
            self._popup = None
        self.selected = point
        if point is None:
            return
        self._popup = Popup(location=(point.latitude, point.longitude),
                            child=HTML(value=popup_html(point)),
                            close_button=True, auto_close=True)
        self.map.add(self._popup)

    # -----------------------------------------------------------------
    # Controls
    # -----------------------------------------------------------------
    def _viz_widget(self) -> ToggleButtons:
        buttons = ToggleButtons(options=[("Dots", VizMode.DOTS.value), ("Heatmap", VizMode.HEATMAP.value)],
                                value=self.viz.mode.value)
        buttons.observe(lambda change: self._widget_mode(change["new"]), names="value")
        self._viz_buttons = buttons
        return buttons

    def _widget_mode(self, value: str):
        mode = self.viz.select(value)
        if self.on_mode_change is not None:
            self.on_mode_change(mode)

    def debug_panel(self) -> VBox:
        """Checkbox per layer; boxes follow visibility changes made elsewhere."""
        rows = []
        for title, visible in debug_layer_rows(self.layer_states(), enabled=True):
            box = Checkbox(value=visible, description=title, indent=False)
            box.observe(lambda change, t=title: self._debug_toggle(t, change["new"]), names="value")
            self._debug_boxes[title] = box
            rows.append(box)
        return VBox([HTML(value="<h4>Layer Debug</h4>")] + rows)

    def _debug_toggle(self, title: str, visible: bool):
        try:
            self.set_visible(title, visible)
        except Exception as e:
            print(f"✗ Debug toggle failed for {title}: {e}", file=sys.stderr)

    def close(self):
        """Detach the map widget; nothing else holds resources."""
        self.map.close()
        print("Leaflet map released", file=sys.stderr)
