"""
Tests for folium web map assembly.
"""

import pytest
import numpy as np


@pytest.fixture
def overlay(labrador_raster):
    from src.seamap.renderer import OverlayStyle, RasterOverlayRenderer

    style = OverlayStyle(group="SST", title="Sea temperature", palette="viridis", project=False)
    return RasterOverlayRenderer().render(labrador_raster, style)


@pytest.fixture
def stations():
    from src.seamap.stations import Station

    return [
        Station("ST01", 56.5, -52.25, "TARA", "2024-05-15", "CTD cast"),
        Station("ST02", 58.0, 305.0, "TREC", "2024-05-16", "Plankton net"),
        Station("ST03", 60.1, -55.0, "Other", "2024-05-17", ""),
    ]


def _render(m):
    return m.get_root().render()


class TestBuildStationMap:
    """Tests for build_station_map function."""

    def test_returns_folium_map(self, overlay, stations):
        import folium
        from src.seamap.web_map import build_station_map

        m = build_station_map([overlay], stations, (295, 322, 50, 68))

        assert isinstance(m, folium.Map)

    def test_markers_and_popups(self, overlay, stations):
        import folium
        from src.seamap.web_map import build_station_map

        m = build_station_map([overlay], stations, (295, 322, 50, 68))
        markers = [child for child in m._children.values() if isinstance(child, folium.Marker)]

        assert len(markers) == 3
        # 0-360 longitudes are shown in -180..180
        assert markers[1].location == [58.0, -55.0]
        html = _render(m)
        assert "ST01" in html
        assert "CTD cast" in html
        assert "[LAT:56.5000; LON:-52.2500]" in html

    def test_marker_icon_colors(self, overlay, stations):
        import folium
        from src.seamap.web_map import build_station_map

        m = build_station_map([overlay], stations, (295, 322, 50, 68))
        icons = [
            grandchild
            for child in m._children.values()
            if isinstance(child, folium.Marker)
            for grandchild in child._children.values()
            if isinstance(grandchild, folium.Icon)
        ]

        colors = [icon.options.get("marker_color", icon.options.get("markerColor")) for icon in icons]
        assert colors == ["green", "orange", "red"]

    def test_overlay_group_and_legend(self, overlay, stations):
        from src.seamap.web_map import build_station_map

        html = _render(build_station_map([overlay], stations, (295, 322, 50, 68)))

        assert "data:image/png;base64," in html
        assert "Sea temperature" in html
        assert "overlayadd overlayremove" in html

    def test_overlay_hidden_by_default(self, overlay):
        import folium
        from src.seamap.web_map import add_overlay

        m = folium.Map(tiles=None)
        group = add_overlay(m, overlay)

        assert group.layer_name == "SST"
        assert group.show is False

    def test_controls_present(self, overlay, stations):
        from src.seamap.web_map import build_station_map

        html = _render(build_station_map([overlay], stations, (295, 322, 50, 68)))

        lowered = html.lower()
        for control in ("minimap", "measure", "locate", "mouseposition", "reset view", "station information"):
            assert control in lowered
        assert "L.control.layers" in html

    def test_info_box_optional(self, stations):
        from src.seamap.web_map import build_station_map

        html = _render(build_station_map([], stations, (295, 322, 50, 68), info_html=None))

        assert "Station Information" not in html

    def test_graticule_lines(self):
        import folium
        from src.seamap.raster import Extent
        from src.seamap.web_map import add_graticule

        m = folium.Map(tiles=None)
        group = add_graticule(m, Extent(-60, -55, 50, 53), interval=1.0)
        lines = [c for c in group._children.values() if isinstance(c, folium.PolyLine)]

        # 6 meridians (-60..-55) and 4 parallels (50..53)
        assert len(lines) == 10


class TestSaveMap:
    """Tests for save_map function."""

    def test_writes_html(self, tmp_path, stations):
        from src.seamap.web_map import build_station_map, save_map

        m = build_station_map([], stations, (295, 322, 50, 68))
        path = save_map(m, tmp_path / "out" / "index.html")

        assert path.exists()
        assert "ST02" in path.read_text()

    def test_respects_overwrite_flag(self, tmp_path, stations):
        from src.seamap.web_map import build_station_map, save_map

        target = tmp_path / "index.html"
        target.write_text("keep me")
        m = build_station_map([], stations, (295, 322, 50, 68))

        assert save_map(m, target, overwrite=False) is None
        assert target.read_text() == "keep me"
