"""
Oceanographic raster overlays and sampling stations on interactive web maps.

Core functionality:
- Raster/Extent model with NaN no-data
- Transforms: crop, per-cell value transforms, reclassify, reprojection
- Color mappings (continuous and binned) and legends
- RasterOverlayRenderer for the full raster -> overlay sequence
- folium web map assembly and the end-to-end StationMapPipeline
"""

from .errors import (
    SeaMapError,
    InputNotFoundError,
    VariableNotFoundError,
    EmptyResultError,
    DomainError,
    UnsupportedCRSError,
)
from .raster import Extent, Raster
from .transforms import (
    crop,
    transform_raster,
    log10_scale,
    linear_rescale,
    reclassify,
    wrap_longitudes,
    reproject,
)
from .color_mapping import ColorMapping, build_color_mapping, palette_colors
from .legend import Legend, build_legend, power_of_ten, round_to
from .stations import Station, load_stations, resolve_marker_color
from .data_loading import load_raster, require_inputs
from .renderer import OverlayStyle, RasterOverlayRenderer, RenderedOverlay
from .web_map import build_station_map, save_map
from .pipeline import LayerSource, StationMapConfig, StationMapPipeline

__all__ = [
    "SeaMapError",
    "InputNotFoundError",
    "VariableNotFoundError",
    "EmptyResultError",
    "DomainError",
    "UnsupportedCRSError",
    "Extent",
    "Raster",
    "crop",
    "transform_raster",
    "log10_scale",
    "linear_rescale",
    "reclassify",
    "wrap_longitudes",
    "reproject",
    "ColorMapping",
    "build_color_mapping",
    "palette_colors",
    "Legend",
    "build_legend",
    "power_of_ten",
    "round_to",
    "Station",
    "load_stations",
    "resolve_marker_color",
    "load_raster",
    "require_inputs",
    "OverlayStyle",
    "RasterOverlayRenderer",
    "RenderedOverlay",
    "build_station_map",
    "save_map",
    "LayerSource",
    "StationMapConfig",
    "StationMapPipeline",
]
