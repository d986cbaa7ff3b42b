"""
Interactive web map assembly with folium.

Composites rendered overlays and sampling stations onto a Leaflet map:

- OpenStreetMap France base tiles, view fitted to the region of interest
- one toggleable overlay group per RenderedOverlay, hidden by default, with
  its legend shown while the group is on the map
- one flag marker per station, colored by category, with a popup
- mouse coordinates, graticule, station info box, layer control, scale bar,
  mini-map, measurement tool, reset-view button and GPS (locate) control
"""

import logging
import math
from pathlib import Path

import folium
from branca.element import MacroElement
from folium.plugins import LocateControl, MeasureControl, MiniMap, MousePosition
from jinja2 import Template

from src.config import (
    BASE_TILES,
    GPS_OPTIONS,
    GRATICULE_INTERVAL,
    MAX_ZOOM,
    MEASURE_OPTIONS,
    MIN_ZOOM,
    MINIMAP_TILES,
    STATION_INFO_HTML,
)
from src.seamap.raster import Extent

logger = logging.getLogger(__name__)


class HtmlControl(MacroElement):
    """
    Leaflet control holding static HTML (info boxes, legends).

    When `layer` is given the control is only shown while that layer is on the map.
    """

    _template = Template(
        """
        {% macro script(this, kwargs) %}
            var {{ this.get_name() }} = L.control({position: {{ this.position|tojson }}});
            {{ this.get_name() }}.onAdd = function (map) {
                var div = L.DomUtil.create("div", "seamap-control");
                div.innerHTML = {{ this.html|tojson }};
                L.DomEvent.disableClickPropagation(div);
                return div;
            };
            {% if this.layer is not none %}
            (function () {
                var map = {{ this._parent.get_name() }};
                var layer = {{ this.layer.get_name() }};
                function sync() {
                    if (map.hasLayer(layer)) {
                        {{ this.get_name() }}.addTo(map);
                    } else {
                        {{ this.get_name() }}.remove();
                    }
                }
                map.on("overlayadd overlayremove", sync);
                sync();
            })();
            {% else %}
            {{ this.get_name() }}.addTo({{ this._parent.get_name() }});
            {% endif %}
        {% endmacro %}
        """
    )

    def __init__(self, html, position="bottomright", layer=None):
        super().__init__()
        self._name = "HtmlControl"
        self.html = html
        self.position = position
        self.layer = layer


class ResetViewControl(MacroElement):
    """Button that fits the map back to its initial bounds."""

    _template = Template(
        """
        {% macro script(this, kwargs) %}
            var {{ this.get_name() }} = L.control({position: {{ this.position|tojson }}});
            {{ this.get_name() }}.onAdd = function (map) {
                var div = L.DomUtil.create("div", "leaflet-bar leaflet-control");
                var button = L.DomUtil.create("a", "", div);
                button.href = "#";
                button.title = "Reset view";
                button.innerHTML = "&#8634;";
                L.DomEvent.on(button, "click", function (e) {
                    L.DomEvent.preventDefault(e);
                    map.fitBounds({{ this.bounds|tojson }});
                });
                return div;
            };
            {{ this.get_name() }}.addTo({{ this._parent.get_name() }});
        {% endmacro %}
        """
    )

    def __init__(self, bounds, position="topleft"):
        super().__init__()
        self._name = "ResetViewControl"
        self.bounds = bounds
        self.position = position


def add_graticule(m, extent, interval=GRATICULE_INTERVAL):
    """Draw meridians and parallels every `interval` degrees across an extent."""
    group = folium.FeatureGroup(name="Graticule", control=False)
    start_lon = math.floor(extent.xmin / interval) * interval
    start_lat = math.floor(extent.ymin / interval) * interval
    style = {"color": "#666666", "weight": 1, "opacity": 0.4}

    lon = start_lon
    while lon <= extent.xmax:
        folium.PolyLine([[extent.ymin, lon], [extent.ymax, lon]], **style).add_to(group)
        lon += interval
    lat = start_lat
    while lat <= extent.ymax:
        folium.PolyLine([[lat, extent.xmin], [lat, extent.xmax]], **style).add_to(group)
        lat += interval

    group.add_to(m)
    return group


def add_overlay(m, overlay):
    """Add a RenderedOverlay as a hidden overlay group with its legend."""
    style = overlay.style
    group = folium.FeatureGroup(name=style.group, show=False)
    folium.raster_layers.ImageOverlay(
        image=overlay.to_png_data_url(),
        bounds=overlay.latlon_bounds,
        opacity=style.opacity,
        name=style.group,
        interactive=False,
    ).add_to(group)
    group.add_to(m)
    HtmlControl(overlay.legend.to_html(), position=overlay.legend.position, layer=group).add_to(m)
    logger.debug(f"Added overlay group '{style.group}' with bounds {overlay.latlon_bounds}")
    return group


def add_station_marker(m, station):
    """Add a category-colored flag marker with popup for one station."""
    lon = station.lon - 360.0 if station.lon > 180.0 else station.lon
    folium.Marker(
        location=[station.lat, lon],
        popup=folium.Popup(station.popup_html, max_width=300),
        tooltip=station.station_id or None,
        icon=folium.Icon(color=station.marker_color, icon_color="black", icon="flag", prefix="fa"),
    ).add_to(m)


def build_station_map(overlays, stations, extent, info_html=STATION_INFO_HTML):
    """
    Assemble the interactive station map.

    Args:
        overlays: RenderedOverlay list, in layer-control order
        stations: Station list
        extent: Region of interest (Extent or (xmin, xmax, ymin, ymax)) in
                geographic coordinates; 0-360 longitudes are accepted
        info_html: HTML for the station info box (None to omit)

    Returns:
        folium.Map
    """
    if not isinstance(extent, Extent):
        extent = Extent(*extent)
    view = extent.wrapped()
    bounds = view.leaflet_bounds
    center = [(view.ymin + view.ymax) / 2.0, (view.xmin + view.xmax) / 2.0]

    logger.info(f"Building map: {len(overlays)} overlay(s), {len(stations)} station(s)")

    m = folium.Map(
        location=center,
        tiles=None,
        min_zoom=MIN_ZOOM,
        max_zoom=MAX_ZOOM,
        control_scale=True,
    )
    folium.TileLayer(
        BASE_TILES,
        name=BASE_TILES,
        min_zoom=MIN_ZOOM,
        max_zoom=MAX_ZOOM,
        detect_retina=True,
    ).add_to(m)
    m.fit_bounds(bounds)

    MousePosition(position="topright", separator=" | ", num_digits=4, prefix="Lat | Lon:").add_to(m)
    if info_html:
        HtmlControl(info_html, position="bottomright").add_to(m)
    add_graticule(m, view)

    for overlay in overlays:
        add_overlay(m, overlay)

    folium.LayerControl(position="topleft", collapsed=False).add_to(m)

    for station in stations:
        add_station_marker(m, station)

    MiniMap(tile_layer=MINIMAP_TILES, toggle_display=True, minimized=False).add_to(m)
    MeasureControl(**MEASURE_OPTIONS).add_to(m)
    ResetViewControl(bounds).add_to(m)
    LocateControl(**GPS_OPTIONS).add_to(m)

    return m


def save_map(m, path, overwrite=True):
    """
    Write a folium map to an HTML file.

    Args:
        m: folium.Map
        path: Output HTML path
        overwrite: Replace an existing file (default: True)

    Returns:
        Path of the written file, or None if it existed and overwrite is False
    """
    path = Path(path)
    if path.exists() and not overwrite:
        logger.info(f"{path} already exists and overwrite is False; nothing saved")
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(path))
    logger.info(f"Saved map to {path}")
    return path
