"""
In-memory raster model used throughout the rendering pipeline.

A Raster is a 2D float grid plus the Extent it covers and the CRS the extent is
expressed in. Row 0 is the northern edge. No-data cells are stored as NaN so
that valid zeros never get confused with missing measurements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np
import rasterio.transform
from rasterio import Affine

logger = logging.getLogger(__name__)

DEFAULT_CRS = "EPSG:4326"


@dataclass(frozen=True)
class Extent:
    """Axis-aligned bounding box (xmin, xmax, ymin, ymax)."""

    xmin: float
    xmax: float
    ymin: float
    ymax: float

    def __post_init__(self):
        values = (self.xmin, self.xmax, self.ymin, self.ymax)
        if not all(np.isfinite(v) for v in values):
            raise ValueError(f"Extent bounds must be finite, got {values}")
        if not self.xmin < self.xmax:
            raise ValueError(f"Extent xmin must be < xmax, got {self.xmin} >= {self.xmax}")
        if not self.ymin < self.ymax:
            raise ValueError(f"Extent ymin must be < ymax, got {self.ymin} >= {self.ymax}")

    @classmethod
    def from_bounds(cls, left: float, bottom: float, right: float, top: float) -> "Extent":
        """Build an Extent from rasterio-ordered bounds (left, bottom, right, top)."""
        return cls(float(left), float(right), float(bottom), float(top))

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Bounds in rasterio order: (left, bottom, right, top)."""
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    @property
    def leaflet_bounds(self) -> list:
        """Bounds as [[south, west], [north, east]] for Leaflet/folium."""
        return [[self.ymin, self.xmin], [self.ymax, self.xmax]]

    def intersects(self, other: "Extent") -> bool:
        return self.intersection(other) is not None

    def intersection(self, other: "Extent") -> Optional["Extent"]:
        """
        Overlap of two extents.

        Returns None when the extents are disjoint or only share an edge.
        """
        xmin = max(self.xmin, other.xmin)
        xmax = min(self.xmax, other.xmax)
        ymin = max(self.ymin, other.ymin)
        ymax = min(self.ymax, other.ymax)
        if xmin >= xmax or ymin >= ymax:
            return None
        return Extent(xmin, xmax, ymin, ymax)

    def contains(self, other: "Extent") -> bool:
        return (
            self.xmin <= other.xmin
            and self.xmax >= other.xmax
            and self.ymin <= other.ymin
            and self.ymax >= other.ymax
        )

    def shift(self, dx: float = 0.0, dy: float = 0.0) -> "Extent":
        return Extent(self.xmin + dx, self.xmax + dx, self.ymin + dy, self.ymax + dy)

    def wrapped(self) -> "Extent":
        """Move a 0-360 longitude extent lying east of 180 into -180..180."""
        if self.xmin >= 180.0:
            return self.shift(dx=-360.0)
        return self


@dataclass
class Raster:
    """
    Georeferenced 2D grid of float values.

    Attributes:
        data: 2D array of shape (rows, cols); NaN marks no-data cells
        extent: Extent covered by the full grid
        crs: Coordinate reference system of the extent (any rasterio-readable string)
        name: Optional label, used in log messages
    """

    data: np.ndarray
    extent: Extent
    crs: str = DEFAULT_CRS
    name: str = ""

    def __post_init__(self):
        data = np.asarray(self.data, dtype=np.float64)
        if data.ndim != 2:
            raise ValueError(f"Raster data must be 2D, got shape {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Raster data must not be empty, got shape {data.shape}")
        self.data = data

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def resolution(self) -> Tuple[float, float]:
        """Cell size as (x resolution, y resolution), both positive."""
        rows, cols = self.data.shape
        return (self.extent.width / cols, self.extent.height / rows)

    @property
    def transform(self) -> Affine:
        rows, cols = self.data.shape
        return rasterio.transform.from_bounds(*self.extent.bounds, cols, rows)

    @property
    def valid_mask(self) -> np.ndarray:
        return np.isfinite(self.data)

    @property
    def valid_values(self) -> np.ndarray:
        return self.data[self.valid_mask]

    @property
    def nodata_count(self) -> int:
        return int(np.count_nonzero(~self.valid_mask))

    def value_range(self) -> Optional[Tuple[float, float]]:
        """(min, max) over valid cells, or None when every cell is no-data."""
        values = self.valid_values
        if values.size == 0:
            return None
        return float(values.min()), float(values.max())

    def replace(self, **changes) -> "Raster":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def describe(self) -> str:
        value_range = self.value_range()
        range_text = (
            f"{value_range[0]:.3f} to {value_range[1]:.3f}" if value_range else "all no-data"
        )
        return (
            f"{self.name or 'raster'} {self.shape[0]}x{self.shape[1]} "
            f"[{self.crs}] extent={self.extent.bounds} values {range_text}"
        )
