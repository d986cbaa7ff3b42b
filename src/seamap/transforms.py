"""
Raster transformation operations for overlay rendering.

This module contains functions for cropping, per-cell value transforms,
threshold reclassification, longitude wrapping and reprojection. Every
operation takes a Raster and returns a new Raster; inputs are never modified.

Value transform factories (log10_scale, linear_rescale) return plain
vectorised functions that transform_raster applies to valid cells only.
"""

import logging
import math

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.errors import CRSError
from rasterio.warp import calculate_default_transform, reproject as warp_reproject, Resampling

from src.seamap.errors import DomainError, EmptyResultError, UnsupportedCRSError
from src.seamap.raster import Extent, Raster

logger = logging.getLogger(__name__)

RESAMPLING_METHODS = {
    "nearest": Resampling.nearest,
    "bilinear": Resampling.bilinear,
}


def _nearest_line(offset):
    """Index of the grid line nearest to an offset measured in cells (halves round up)."""
    return math.floor(offset + 0.5)


def _align_longitudes(raster, extent):
    """
    Overlap of a crop extent with a raster, trying the extent shifted by
    +/-360 degrees when a geographic raster and the extent use different
    longitude conventions (0..360 against -180..180).
    """
    overlap = raster.extent.intersection(extent)
    if overlap is not None or not _is_geographic(raster.crs):
        return overlap

    for dx in (-360.0, 360.0):
        overlap = raster.extent.intersection(extent.shift(dx=dx))
        if overlap is not None:
            logger.info(
                f"Crop extent {extent.bounds} shifted by {dx:+.0f} degrees to match "
                f"{raster.name or 'raster'} longitudes"
            )
            return overlap
    return None


def crop(raster, extent):
    """
    Crop a raster to an extent expressed in the raster's CRS.

    The intersection of both extents is snapped to the nearest lines of the
    source cell grid and the cells between those lines are kept, so the result
    equals the exact intersection whenever the crop extent is grid-aligned. At
    least one cell is always kept. For geographic rasters, an extent given in
    the other longitude convention (0..360 against -180..180) is shifted by
    360 degrees first. Resolution, CRS and no-data cells are preserved.

    Args:
        raster: Source Raster
        extent: Extent (or (xmin, xmax, ymin, ymax) tuple) to crop to

    Returns:
        Raster: New raster covering the overlap

    Raises:
        EmptyResultError: If the extent does not intersect the raster
    """
    if not isinstance(extent, Extent):
        extent = Extent(*extent)

    overlap = _align_longitudes(raster, extent)
    if overlap is None:
        raise EmptyResultError(
            f"Crop extent {extent.bounds} does not intersect "
            f"{raster.name or 'raster'} extent {raster.extent.bounds}"
        )

    rows, cols = raster.shape
    xres, yres = raster.resolution
    src = raster.extent

    col_start = _nearest_line((overlap.xmin - src.xmin) / xres)
    col_stop = _nearest_line((overlap.xmax - src.xmin) / xres)
    row_start = _nearest_line((src.ymax - overlap.ymax) / yres)
    row_stop = _nearest_line((src.ymax - overlap.ymin) / yres)

    col_start = min(max(col_start, 0), cols - 1)
    row_start = min(max(row_start, 0), rows - 1)
    col_stop = max(min(col_stop, cols), col_start + 1)
    row_stop = max(min(row_stop, rows), row_start + 1)

    new_extent = Extent(
        src.xmin + col_start * xres,
        src.xmin + col_stop * xres,
        src.ymax - row_stop * yres,
        src.ymax - row_start * yres,
    )
    cropped = raster.data[row_start:row_stop, col_start:col_stop].copy()

    logger.info(
        f"Cropped {raster.name or 'raster'} from {raster.shape} to {cropped.shape}, "
        f"extent {new_extent.bounds}"
    )
    return raster.replace(data=cropped, extent=new_extent)


def log10_scale(epsilon=1e-5):
    """
    Create a log10(x + epsilon) value transform.

    Used to compress chlorophyll concentrations before coloring. Pair with
    legend.power_of_ten to show concentrations in the legend.

    Args:
        epsilon: Offset added before taking the log (must be > 0)

    Returns:
        function: Vectorised transform for transform_raster
    """
    if epsilon <= 0:
        raise ValueError(f"epsilon must be > 0, got {epsilon}")

    def transform(values):
        return np.log10(values + epsilon)

    transform.__name__ = f"log10_scale(epsilon={epsilon:g})"
    return transform


def linear_rescale(to=(0.0, 1.0), from_range=None):
    """
    Create a linear rescaling transform a + (x - min) / (max - min) * (b - a).

    Args:
        to: Target (a, b) range
        from_range: Source (min, max); computed from the values when None

    Returns:
        function: Vectorised transform for transform_raster
    """
    a, b = to

    def transform(values):
        if from_range is None:
            if values.size == 0:
                return values
            lo, hi = np.nanmin(values), np.nanmax(values)
        else:
            lo, hi = from_range
        if hi == lo:
            # Zero-width input: everything lands on the middle of the target range
            return np.full_like(values, (a + b) / 2.0, dtype=np.float64)
        return a + (values - lo) / (hi - lo) * (b - a)

    transform.__name__ = f"linear_rescale(to={tuple(to)})"
    return transform


def transform_raster(raster, fn, strict=False):
    """
    Apply a per-cell numeric function to every valid cell.

    No-data cells are left untouched. Cells for which fn yields a non-finite
    value (e.g. log of a non-positive number) are converted to no-data and
    counted in a warning, unless strict is set.

    Args:
        raster: Source Raster
        fn: Vectorised function taking and returning a 1D float array
        strict: Raise DomainError instead of healing non-finite results

    Returns:
        Raster: Transformed raster

    Raises:
        DomainError: If strict and fn produced non-finite values
    """
    fn_name = getattr(fn, "__name__", repr(fn))
    valid = raster.valid_mask
    out = np.full(raster.shape, np.nan, dtype=np.float64)

    with np.errstate(all="ignore"):
        result = np.asarray(fn(raster.data[valid]), dtype=np.float64)

    if result.shape != (int(valid.sum()),):
        raise ValueError(
            f"Transform {fn_name} must return one value per cell, got shape {result.shape}"
        )

    non_finite = ~np.isfinite(result)
    bad_count = int(non_finite.sum())
    if bad_count:
        message = (
            f"Transform {fn_name} produced {bad_count} non-finite value(s) "
            f"in {raster.name or 'raster'}"
        )
        if strict:
            raise DomainError(message)
        logger.warning(f"{message}; converted to no-data")
        result[non_finite] = np.nan

    out[valid] = result
    transformed = raster.replace(data=out)

    value_range = transformed.value_range()
    if value_range:
        logger.info(f"Applied {fn_name}: value range {value_range[0]:.4f} to {value_range[1]:.4f}")
    else:
        logger.info(f"Applied {fn_name}: no valid cells remain")
    return transformed


def reclassify(raster, rules, right=False, others=np.nan):
    """
    Replace cell values by the value of the first matching interval rule.

    Boundary convention (applies to every rule):
        right=False: low <= x < high
        right=True:  low < x <= high

    Args:
        raster: Source Raster
        rules: Sequence of (low, high, replacement) triples, or an (N, 3) array.
               A NaN replacement turns matching cells into no-data.
        right: Whether intervals are closed on the right instead of the left
        others: Value for valid cells matching no rule (NaN = no-data).
                None leaves unmatched cells unchanged.

    Returns:
        Raster: Reclassified raster
    """
    rules = np.asarray(rules, dtype=np.float64)
    if rules.ndim != 2 or rules.shape[1] != 3:
        raise ValueError(f"rules must be (low, high, replacement) triples, got shape {rules.shape}")
    if np.any(np.isnan(rules[:, :2])):
        raise ValueError("Rule bounds must not be NaN")
    if np.any(rules[:, 0] > rules[:, 1]):
        raise ValueError("Each rule needs low <= high")

    data = raster.data
    valid = raster.valid_mask
    out = np.full(raster.shape, np.nan, dtype=np.float64)
    assigned = np.zeros(raster.shape, dtype=bool)

    for low, high, replacement in rules:
        if right:
            match = (data > low) & (data <= high)
        else:
            match = (data >= low) & (data < high)
        match &= valid & ~assigned
        out[match] = replacement
        assigned |= match

    unmatched = valid & ~assigned
    unmatched_count = int(unmatched.sum())
    if others is None:
        out[unmatched] = data[unmatched]
    else:
        out[unmatched] = others

    interval = "(low, high]" if right else "[low, high)"
    logger.info(
        f"Reclassified {raster.name or 'raster'} with {len(rules)} {interval} rule(s); "
        f"{unmatched_count} unmatched cell(s)"
    )
    return raster.replace(data=out)


def _is_geographic(crs_text):
    try:
        return CRS.from_user_input(crs_text).is_geographic
    except CRSError as e:
        raise UnsupportedCRSError(f"Cannot resolve CRS {crs_text!r}: {e}") from e


def wrap_longitudes(raster):
    """
    Move geographic rasters expressed in 0-360 longitude into -180..180.

    Grids lying entirely east of 180 are shifted by -360. Global 0..360 grids
    are rolled so the western half comes first. Anything else is returned as is.
    """
    if not _is_geographic(raster.crs):
        return raster

    extent = raster.extent
    if extent.xmin >= 180.0:
        logger.info(f"Shifting {raster.name or 'raster'} longitudes by -360")
        return raster.replace(extent=extent.wrapped())

    if extent.xmax > 180.0 and math.isclose(extent.width, 360.0):
        xres, _ = raster.resolution
        split = int(round((180.0 - extent.xmin) / xres))
        rolled = np.concatenate([raster.data[:, split:], raster.data[:, :split]], axis=1)
        new_xmin = extent.xmin + split * xres - 360.0
        logger.info(f"Rolling global {raster.name or 'raster'} to start at longitude {new_xmin:.3f}")
        return raster.replace(
            data=rolled,
            extent=Extent(new_xmin, new_xmin + extent.width, extent.ymin, extent.ymax),
        )

    return raster


def reproject(raster, dst_crs="EPSG:3857", method="bilinear", num_threads=1):
    """
    Reproject a raster to another coordinate reference system.

    With bilinear resampling each output cell is a convex combination of its
    source neighbours, so no value leaves their range. Any output cell with a
    no-data neighbour becomes no-data.

    Args:
        raster: Source Raster
        dst_crs: Target coordinate reference system
        method: 'nearest' or 'bilinear'
        num_threads: GDAL warp threads

    Returns:
        Raster: Reprojected raster in dst_crs

    Raises:
        UnsupportedCRSError: If the source or target CRS cannot be resolved
    """
    if method not in RESAMPLING_METHODS:
        raise ValueError(f"method must be one of {sorted(RESAMPLING_METHODS)}, got {method!r}")
    resampling = RESAMPLING_METHODS[method]

    try:
        src_crs = CRS.from_user_input(raster.crs)
    except CRSError as e:
        raise UnsupportedCRSError(f"Cannot resolve source CRS {raster.crs!r}: {e}") from e
    try:
        target_crs = CRS.from_user_input(dst_crs)
    except CRSError as e:
        raise UnsupportedCRSError(f"Cannot resolve target CRS {dst_crs!r}: {e}") from e

    if src_crs == target_crs:
        logger.debug(f"{raster.name or 'raster'} already in {dst_crs}, skipping reprojection")
        return raster

    logger.info(f"Reprojecting {raster.name or 'raster'} from {raster.crs} to {dst_crs} ({method})")
    rows, cols = raster.shape

    with rasterio.Env(GDAL_NUM_THREADS=str(num_threads)):
        try:
            dst_transform, width, height = calculate_default_transform(
                src_crs, target_crs, cols, rows, *raster.extent.bounds
            )
        except CRSError as e:
            raise UnsupportedCRSError(
                f"Cannot transform from {raster.crs!r} to {dst_crs!r}: {e}"
            ) from e

        dst_data = np.full((height, width), np.nan, dtype=np.float64)
        warp_reproject(
            source=raster.data,
            destination=dst_data,
            src_transform=raster.transform,
            src_crs=src_crs,
            dst_transform=dst_transform,
            dst_crs=target_crs,
            resampling=resampling,
            src_nodata=np.nan,
            dst_nodata=np.nan,
            num_threads=num_threads,
        )

        if method == "bilinear" and raster.nodata_count:
            # GDAL reweights around no-data; warp the no-data mask to propagate it instead
            invalid = (~raster.valid_mask).astype(np.float64)
            dst_invalid = np.zeros((height, width), dtype=np.float64)
            warp_reproject(
                source=invalid,
                destination=dst_invalid,
                src_transform=raster.transform,
                src_crs=src_crs,
                dst_transform=dst_transform,
                dst_crs=target_crs,
                resampling=Resampling.bilinear,
                num_threads=num_threads,
            )
            dst_data[dst_invalid > 0] = np.nan

    new_extent = Extent.from_bounds(*rasterio.transform.array_bounds(height, width, dst_transform))
    projected = Raster(dst_data, new_extent, crs=target_crs.to_string(), name=raster.name)
    logger.info(f"Reprojection complete: {projected.describe()}")
    return projected
