"""
Tests for legend construction.
"""

import pytest
import numpy as np


class TestLabelHelpers:
    """Tests for label transforms and number formatting."""

    def test_power_of_ten(self):
        from src.seamap.legend import power_of_ten

        assert power_of_ten(2)(-2.0) == 0.01
        assert power_of_ten(2)(1.0) == 10.0

    def test_round_to(self):
        from src.seamap.legend import round_to

        assert round_to(1)(-123.456) == -123.5

    def test_format_number(self):
        from src.seamap.legend import format_number

        assert format_number(2.0) == "2"
        assert format_number(0.01) == "0.01"
        assert format_number(12.3456, digits=3) == "12.3"
        assert format_number(0) == "0"

    def test_label_format_pairs(self):
        from src.seamap.legend import label_format

        formatter = label_format(suffix=" m")

        assert formatter(0.0, 2.0) == "0 m – 2 m"
        assert formatter(5.0) == "5 m"


class TestBuildLegend:
    """Tests for build_legend function."""

    def test_continuous_legend_ticks(self):
        from src.seamap.color_mapping import build_color_mapping
        from src.seamap.legend import GRADIENT, build_legend

        mapping = build_color_mapping(np.array([0.0, 20.0]), "viridis")
        legend = build_legend(mapping, "SST (°C)")

        assert legend.kind == GRADIENT
        assert legend.labels == ["0", "5", "10", "15", "20"]
        assert legend.entries[0].color == mapping.to_hex(0.0)
        assert legend.entries[-1].color == mapping.to_hex(20.0)
        assert len(legend.gradient) > 2

    def test_label_transform_is_display_only(self):
        """Test that label transforms change labels but never the mapping."""
        from src.seamap.color_mapping import build_color_mapping
        from src.seamap.legend import build_legend, power_of_ten

        mapping = build_color_mapping(np.array([-2.0, 1.0]), "YlGn")
        legend = build_legend(mapping, "Chla (mg/m³)", label_transform=power_of_ten(2), n_ticks=2)

        assert legend.labels == ["0.01", "10"]
        assert mapping.domain == (-2.0, 1.0)
        assert mapping.to_hex(-2.0) == legend.entries[0].color

    def test_binned_legend_entries(self):
        from src.seamap.color_mapping import BINNED, build_color_mapping
        from src.seamap.legend import BINS, build_legend

        mapping = build_color_mapping(np.array([0.0, 10.0]), "YlGnBu", kind=BINNED, bins=5)
        legend = build_legend(mapping, "Depth (m)")

        assert legend.kind == BINS
        assert legend.labels == ["0 – 2", "2 – 4", "4 – 6", "6 – 8", "8 – 10"]
        assert [e.color for e in legend.entries] == mapping.bin_colors

    def test_to_html_escapes_title(self):
        from src.seamap.color_mapping import build_color_mapping
        from src.seamap.legend import build_legend

        mapping = build_color_mapping(np.array([0.0, 1.0]), "viridis")
        html = build_legend(mapping, "<b>SST</b>").to_html()

        assert "&lt;b&gt;SST&lt;/b&gt;" in html
        assert "linear-gradient" in html

    def test_binned_html_has_swatches(self):
        from src.seamap.color_mapping import BINNED, build_color_mapping
        from src.seamap.legend import build_legend

        mapping = build_color_mapping(np.array([0.0, 10.0]), "YlGnBu", kind=BINNED, bins=3)
        html = build_legend(mapping, "Depth").to_html()

        for color in mapping.bin_colors:
            assert color in html
