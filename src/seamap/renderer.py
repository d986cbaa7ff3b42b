"""
Raster overlay rendering: raw raster in, colorized georeferenced overlay out.

RasterOverlayRenderer runs the fixed sequence

    crop -> value transforms -> reclassify -> wrap longitudes -> reproject
         -> color domain -> color mapping -> legend

driven by a declarative OverlayStyle, and returns a RenderedOverlay that the
web map layer can composite onto base tiles.

Example:
    from src.seamap.renderer import OverlayStyle, RasterOverlayRenderer

    style = OverlayStyle(group="SST", title="SST (°C)", palette="RdYlBu", reverse=True)
    overlay = RasterOverlayRenderer().render(raster, style, extent=(295, 322, 50, 68))
    overlay.legend.labels
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image
from rasterio.warp import transform_bounds

from src.config import DISPLAY_CRS
from src.seamap.color_mapping import CONTINUOUS, DEFAULT_BINS, ColorMapping, build_color_mapping
from src.seamap.legend import Legend, build_legend
from src.seamap.raster import Raster
from src.seamap.transforms import crop, reclassify, reproject, transform_raster, wrap_longitudes

logger = logging.getLogger(__name__)


@dataclass
class OverlayStyle:
    """Rendering recipe for one overlay layer."""

    group: str
    """Overlay group name shown in the layer control."""

    title: str
    """Legend title, including units."""

    palette: Union[str, Sequence[str]] = "viridis"
    """Matplotlib colormap name or explicit color list."""

    kind: str = CONTINUOUS
    """'continuous' or 'binned'."""

    bins: int = DEFAULT_BINS
    """Number of equal-width buckets for binned mappings."""

    breaks: Optional[Sequence[float]] = None
    """Explicit bucket edges for binned mappings."""

    reverse: bool = False
    """Reverse the palette."""

    bias: float = 1.0
    """Palette spacing exponent for named colormaps."""

    domain: Optional[Tuple[float, float]] = None
    """Fixed color domain; computed from the data when None."""

    value_transforms: List[Callable] = field(default_factory=list)
    """Per-cell functions applied in order before reclassification."""

    reclass_rules: Optional[Sequence[Sequence[float]]] = None
    """(low, high, replacement) rules; no reclassification when None."""

    reclass_right: bool = False
    """Intervals closed on the right instead of the left."""

    reclass_others: Optional[float] = np.nan
    """Value for cells matching no rule (None keeps them)."""

    label_transform: Optional[Callable] = None
    """Display-only transform for legend labels."""

    label_digits: int = 3
    """Significant digits in legend labels."""

    resampling: str = "bilinear"
    """Reprojection method: 'nearest' or 'bilinear'."""

    project: bool = True
    """Reproject to the display CRS before coloring."""

    opacity: float = 1.0
    """Overlay and legend opacity."""

    legend_position: str = "bottomright"
    """Leaflet control corner for the legend."""


@dataclass
class RenderedOverlay:
    """A colorized overlay ready for compositing onto a web map."""

    style: OverlayStyle
    raster: Raster
    mapping: ColorMapping
    legend: Legend

    @property
    def name(self) -> str:
        return self.style.group

    @property
    def latlon_bounds(self) -> list:
        """Image corners as [[south, west], [north, east]] in WGS84."""
        if self.raster.crs == "EPSG:4326":
            return self.raster.extent.wrapped().leaflet_bounds
        west, south, east, north = transform_bounds(
            self.raster.crs, "EPSG:4326", *self.raster.extent.bounds
        )
        return [[south, west], [north, east]]

    def to_rgba_image(self) -> np.ndarray:
        return self.mapping.to_image(self.raster.data)

    def to_png_data_url(self) -> str:
        """Encode the colorized raster as a base64 PNG data URL."""
        buffer = io.BytesIO()
        Image.fromarray(self.to_rgba_image()).save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"


class RasterOverlayRenderer:
    """
    Turns raw rasters into colorized, georeferenced overlays with legends.

    Args:
        display_crs: CRS of the rendering surface (default: web mercator)
        strict: Raise DomainError on non-finite transform output instead of
                converting those cells to no-data
    """

    def __init__(self, display_crs: str = DISPLAY_CRS, strict: bool = False):
        self.display_crs = display_crs
        self.strict = strict

    def prepare(self, raster: Raster, style: OverlayStyle, extent: Any = None) -> Raster:
        """Run the data steps (crop, transform, reclassify, project) without coloring."""
        if extent is not None:
            raster = crop(raster, extent)

        for fn in style.value_transforms:
            raster = transform_raster(raster, fn, strict=self.strict)

        if style.reclass_rules is not None:
            raster = reclassify(
                raster,
                style.reclass_rules,
                right=style.reclass_right,
                others=style.reclass_others,
            )

        if style.project:
            raster = wrap_longitudes(raster)
            raster = reproject(raster, self.display_crs, method=style.resampling)

        return raster

    def render(self, raster: Raster, style: OverlayStyle, extent: Any = None) -> RenderedOverlay:
        """
        Render a raster into an overlay.

        Args:
            raster: Source raster
            style: OverlayStyle recipe
            extent: Optional crop extent in the raster's CRS

        Returns:
            RenderedOverlay

        Raises:
            EmptyResultError: If the crop is disjoint or no valid value remains
            UnsupportedCRSError: If the display CRS cannot be resolved
        """
        logger.info(f"Rendering overlay '{style.group}' from {raster.describe()}")
        prepared = self.prepare(raster, style, extent)

        mapping = build_color_mapping(
            prepared.valid_values,
            style.palette,
            kind=style.kind,
            domain=style.domain,
            bins=style.bins,
            breaks=style.breaks,
            reverse=style.reverse,
            bias=style.bias,
        )
        legend = build_legend(
            mapping,
            style.title,
            label_transform=style.label_transform,
            digits=style.label_digits,
            position=style.legend_position,
            opacity=style.opacity,
        )
        logger.info(f"Overlay '{style.group}' ready: {prepared.describe()}")
        return RenderedOverlay(style=style, raster=prepared, mapping=mapping, legend=legend)
