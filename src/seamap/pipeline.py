"""
End-to-end station map pipeline.

Runs one render pass: validate inputs, load stations, render every raster
layer into an overlay, assemble the web map and write it. Any fatal error
stops the run before the HTML file is written.

Example:
    from src.seamap.pipeline import LayerSource, StationMapConfig, StationMapPipeline
    from src.seamap.presets import chlorophyll_style, depth_style

    config = StationMapConfig(
        stations_path="data/example_station_lat_lon.xlsx",
        layers=[
            LayerSource("data/chl.nc", chlorophyll_style(), variable="CHL"),
            LayerSource("data/depth.nc", depth_style(), variable="elevation"),
        ],
        extent=(295, 322, 50, 68),
        output_path="index.html",
    )
    StationMapPipeline(config).run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import folium
from tqdm.auto import tqdm

from src.config import DEFAULT_OUTPUT_HTML, LABRADOR_SEA_EXTENT, STATION_INFO_HTML
from src.seamap.data_loading import load_raster, require_inputs
from src.seamap.raster import Extent
from src.seamap.renderer import OverlayStyle, RasterOverlayRenderer, RenderedOverlay
from src.seamap.stations import Station, load_stations
from src.seamap.web_map import build_station_map, save_map

logger = logging.getLogger(__name__)


@dataclass
class LayerSource:
    """Where one overlay's raster comes from, and how to render it."""

    path: Union[str, Path]
    style: OverlayStyle
    variable: Optional[str] = None
    band: int = 1


@dataclass
class StationMapConfig:
    """Inputs and output of one render pass."""

    stations_path: Union[str, Path]
    layers: List[LayerSource] = field(default_factory=list)
    extent: Union[Extent, Tuple[float, float, float, float]] = LABRADOR_SEA_EXTENT
    output_path: Union[str, Path] = DEFAULT_OUTPUT_HTML
    info_html: Optional[str] = STATION_INFO_HTML
    overwrite: bool = True

    def __post_init__(self):
        if not isinstance(self.extent, Extent):
            self.extent = Extent(*self.extent)

    @property
    def input_paths(self) -> List[Path]:
        return [Path(self.stations_path)] + [Path(layer.path) for layer in self.layers]


class StationMapPipeline:
    """
    Sequential, fail-fast station map builder.

    Steps:
    1. validate_inputs: every input file must exist
    2. load_stations: read the station table
    3. render_layers: load, crop, transform, project and colorize each raster
    4. build_map: composite overlays and stations with folium
    5. save: write the HTML file
    """

    def __init__(
        self,
        config: StationMapConfig,
        renderer: Optional[RasterOverlayRenderer] = None,
        verbose: bool = True,
    ):
        self.config = config
        self.renderer = renderer or RasterOverlayRenderer()
        self.verbose = verbose

    def _log(self, msg: str, *args, level: str = "info"):
        """Log message if verbose with lazy formatting."""
        if self.verbose:
            if level == "info":
                logger.info(msg, *args)
            elif level == "debug":
                logger.debug(msg, *args)
            elif level == "warn":
                logger.warning(msg, *args)

    def validate_inputs(self) -> None:
        self._log("[1/5] Checking %d input file(s)", len(self.config.input_paths))
        require_inputs(*self.config.input_paths)

    def load_stations(self) -> List[Station]:
        self._log("[2/5] Loading stations from %s", self.config.stations_path)
        stations = load_stations(self.config.stations_path)
        if not stations:
            self._log("No usable stations in %s", self.config.stations_path, level="warn")
        return stations

    def render_layers(self) -> List[RenderedOverlay]:
        self._log("[3/5] Rendering %d overlay layer(s)", len(self.config.layers))
        overlays = []
        for layer in tqdm(self.config.layers, desc="Rendering overlays", disable=not self.verbose):
            raster = load_raster(layer.path, variable=layer.variable, band=layer.band, name=layer.style.group)
            overlays.append(self.renderer.render(raster, layer.style, extent=self.config.extent))
        return overlays

    def build_map(self, overlays: List[RenderedOverlay], stations: List[Station]) -> folium.Map:
        self._log("[4/5] Assembling web map")
        return build_station_map(overlays, stations, self.config.extent, info_html=self.config.info_html)

    def save(self, m: folium.Map) -> Optional[Path]:
        self._log("[5/5] Writing %s", self.config.output_path)
        return save_map(m, self.config.output_path, overwrite=self.config.overwrite)

    def run(self) -> Optional[Path]:
        """
        Execute the full pipeline.

        Returns:
            Path of the written HTML file, or None if it existed and overwrite is off

        Raises:
            InputNotFoundError, VariableNotFoundError, EmptyResultError,
            UnsupportedCRSError: Fatal errors; nothing is written
        """
        self.validate_inputs()
        stations = self.load_stations()
        overlays = self.render_layers()
        m = self.build_map(overlays, stations)
        return self.save(m)
