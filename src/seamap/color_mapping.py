"""
Color mapping functions for raster overlays.

This module builds value -> color mappings for overlay rendering using
matplotlib colormaps. Two kinds are supported:

- continuous: the palette is interpolated smoothly across the value domain
- binned: the domain is split into buckets and each bucket gets one color

No-data (NaN) values and values outside the domain always map to the
configured na_color, which is transparent by default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

import matplotlib
import numpy as np
from matplotlib.colors import LinearSegmentedColormap, to_hex, to_rgba

from src.seamap.errors import EmptyResultError

logger = logging.getLogger(__name__)

CONTINUOUS = "continuous"
BINNED = "binned"
KINDS = (CONTINUOUS, BINNED)

TRANSPARENT = "transparent"
DEFAULT_BINS = 7

# Relative slack when deciding whether a value lies outside the domain
_DOMAIN_TOLERANCE = 1e-9


def get_cmap(cmap_name):
    """Look up a matplotlib colormap by name."""
    try:
        return matplotlib.colormaps[cmap_name]
    except KeyError:
        raise ValueError(f"Unknown matplotlib colormap: {cmap_name!r}") from None


def palette_colors(cmap_name, n=256, bias=1.0, reverse=False):
    """
    Sample n hex colors from a matplotlib colormap.

    Args:
        cmap_name: Matplotlib colormap name (e.g. 'viridis', 'jet', 'YlGnBu')
        n: Number of colors to sample (default: 256)
        bias: Spacing exponent; values > 1 spread the start of the ramp over
              more of the output, values < 1 the end (default: 1.0)
        reverse: Reverse the sampled colors (default: False)

    Returns:
        list[str]: Hex color strings
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if bias <= 0:
        raise ValueError(f"bias must be positive, got {bias}")

    cmap = get_cmap(cmap_name)
    positions = np.linspace(0.0, 1.0, n) ** (1.0 / bias)
    colors = [to_hex(rgba) for rgba in cmap(positions)]
    if reverse:
        colors = colors[::-1]
    return colors


def _na_rgba(na_color):
    if na_color in (TRANSPARENT, "none", None):
        return (0.0, 0.0, 0.0, 0.0)
    return to_rgba(na_color)


@dataclass(eq=False)
class ColorMapping:
    """
    Deterministic value -> color function.

    Attributes:
        kind: 'continuous' or 'binned'
        colors: Ordered palette (hex strings)
        domain: (min, max) value range covered by the palette
        breaks: Bucket edges for binned mappings (len = bins + 1)
        na_color: Color for no-data and out-of-domain values
    """

    kind: str
    colors: list
    domain: Tuple[float, float]
    breaks: Optional[np.ndarray] = None
    na_color: str = TRANSPARENT
    _cmap: LinearSegmentedColormap = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"kind must be one of {KINDS}, got {self.kind!r}")
        if not self.colors:
            raise ValueError("colors must not be empty")
        if self.kind == BINNED and (self.breaks is None or len(self.breaks) < 2):
            raise ValueError("binned mappings need at least two breaks")

        colors = list(self.colors)
        if len(colors) == 1:
            colors = colors * 2
        self._cmap = LinearSegmentedColormap.from_list(
            "seamap", colors, N=max(256, len(colors))
        )

    @property
    def bin_count(self) -> int:
        return 0 if self.breaks is None else len(self.breaks) - 1

    @property
    def bin_colors(self) -> list:
        """One hex color per bucket, spread evenly over the palette."""
        if self.kind != BINNED:
            return []
        return [to_hex(self._cmap(pos)) for pos in self._bin_positions(np.arange(self.bin_count))]

    def _bin_positions(self, indices):
        k = self.bin_count
        if k == 1:
            return np.zeros_like(indices, dtype=np.float64)
        return indices / (k - 1)

    def _tolerance(self):
        vmin, vmax = self.domain
        return _DOMAIN_TOLERANCE * max(abs(vmin), abs(vmax), 1.0)

    def rgba(self, values) -> np.ndarray:
        """
        Map values to RGBA floats in [0, 1].

        Args:
            values: Scalar or array of values

        Returns:
            Array of shape (*values.shape, 4)
        """
        values = np.asarray(values, dtype=np.float64)
        out = np.empty(values.shape + (4,), dtype=np.float64)
        out[...] = _na_rgba(self.na_color)

        vmin, vmax = self.domain
        tol = self._tolerance()
        valid = np.isfinite(values)
        in_domain = valid & (values >= vmin - tol) & (values <= vmax + tol)

        out_of_domain = int(np.count_nonzero(valid & ~in_domain))
        if out_of_domain:
            logger.warning(f"{out_of_domain} value(s) outside domain {self.domain} mapped to na_color")

        if not np.any(in_domain):
            return out

        selected = values[in_domain]
        if self.kind == CONTINUOUS:
            if vmax == vmin:
                positions = np.zeros_like(selected)
            else:
                positions = np.clip((selected - vmin) / (vmax - vmin), 0.0, 1.0)
        else:
            # Buckets are [b_i, b_i+1); the highest edge belongs to the last bucket
            indices = np.searchsorted(self.breaks, selected, side="right") - 1
            indices = np.clip(indices, 0, self.bin_count - 1)
            positions = self._bin_positions(indices)

        out[in_domain] = self._cmap(positions)
        return out

    def to_hex(self, value) -> str:
        """Map a single value to a hex color (or na_color)."""
        value = float(value) if value is not None else np.nan
        vmin, vmax = self.domain
        tol = self._tolerance()
        if not np.isfinite(value) or value < vmin - tol or value > vmax + tol:
            return self.na_color
        return to_hex(self.rgba(value))

    def __call__(self, value) -> str:
        return self.to_hex(value)

    def to_image(self, data, opacity=1.0) -> np.ndarray:
        """
        Colorize a 2D grid into an RGBA uint8 image.

        Args:
            data: 2D value array (NaN = no-data)
            opacity: Alpha multiplier for colored cells

        Returns:
            Array of shape (rows, cols, 4) as uint8
        """
        rgba = self.rgba(data)
        rgba[..., 3] *= opacity
        return np.round(rgba * 255).astype(np.uint8)


def compute_domain(values) -> Tuple[float, float]:
    """(min, max) over the finite values; raises EmptyResultError if there are none."""
    values = np.asarray(values, dtype=np.float64)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise EmptyResultError("Cannot compute a color domain: no valid values")
    return float(finite.min()), float(finite.max())


def build_color_mapping(
    values,
    palette: Union[str, Sequence[str]],
    kind: str = CONTINUOUS,
    domain: Optional[Tuple[float, float]] = None,
    bins: int = DEFAULT_BINS,
    breaks: Optional[Sequence[float]] = None,
    reverse: bool = False,
    bias: float = 1.0,
    na_color: str = TRANSPARENT,
) -> ColorMapping:
    """
    Build a color mapping for a set of values.

    Args:
        values: Array of data values; only used when domain is None
        palette: Matplotlib colormap name or explicit list of colors
        kind: 'continuous' or 'binned' (default: 'continuous')
        domain: (min, max); computed from the finite values when None
        bins: Number of equal-width buckets for binned mappings (default: 7)
        breaks: Explicit bucket edges for binned mappings (overrides bins)
        reverse: Reverse the palette
        bias: Palette spacing exponent for named colormaps (see palette_colors)
        na_color: Color for no-data and out-of-domain values

    Returns:
        ColorMapping

    Raises:
        EmptyResultError: If the domain must be computed and no value is finite
    """
    if kind not in KINDS:
        raise ValueError(f"kind must be one of {KINDS}, got {kind!r}")

    if isinstance(palette, str):
        colors = palette_colors(palette, bias=bias, reverse=reverse)
    else:
        colors = [to_hex(c) for c in palette]
        if not colors:
            raise ValueError("palette must contain at least one color")
        if reverse:
            colors = colors[::-1]

    if domain is None:
        if kind == BINNED and breaks is not None:
            domain = (float(min(breaks)), float(max(breaks)))
        else:
            domain = compute_domain(values)
    vmin, vmax = float(domain[0]), float(domain[1])
    if vmin > vmax:
        raise ValueError(f"domain min must be <= max, got {domain}")

    bucket_edges = None
    if kind == BINNED:
        if breaks is not None:
            bucket_edges = np.unique(np.asarray(breaks, dtype=np.float64))
            vmin, vmax = float(bucket_edges[0]), float(bucket_edges[-1])
        else:
            if bins < 1:
                raise ValueError(f"bins must be >= 1, got {bins}")
            if vmin == vmax:
                bucket_edges = np.array([vmin, vmax], dtype=np.float64)
            else:
                bucket_edges = np.linspace(vmin, vmax, bins + 1)

    mapping = ColorMapping(
        kind=kind,
        colors=colors,
        domain=(vmin, vmax),
        breaks=bucket_edges,
        na_color=na_color,
    )
    logger.info(
        f"Built {kind} color mapping over {vmin:.4f} to {vmax:.4f}"
        + (f" with {mapping.bin_count} bins" if kind == BINNED else "")
    )
    return mapping
