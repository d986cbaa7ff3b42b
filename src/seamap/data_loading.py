"""
Data loading operations for overlay rendering.

This module reads gridded scientific data (NetCDF, GeoTIFF and anything else
GDAL understands) into Raster objects, and checks that required inputs exist
before a render starts.

NetCDF files with several variables expose each one as a GDAL sub-dataset;
select one with the `variable` argument (e.g. "sst", "CHL", "elevation").
"""

import logging
from pathlib import Path

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from src.config import SOURCE_CRS
from src.seamap.errors import InputNotFoundError, VariableNotFoundError
from src.seamap.raster import Extent, Raster

logger = logging.getLogger(__name__)


def require_inputs(*paths):
    """
    Check that every input file exists.

    Args:
        *paths: File paths

    Raises:
        InputNotFoundError: Naming every missing file
    """
    missing = [str(p) for p in paths if not Path(p).exists()]
    if missing:
        raise InputNotFoundError(f"Missing input file(s): {', '.join(missing)}")
    logger.debug(f"All {len(paths)} input file(s) present")


def _subdataset_variable(subdataset):
    """Variable name of a GDAL sub-dataset string like 'NETCDF:"/path/f.nc":sst'."""
    return subdataset.rsplit(":", 1)[-1]


def find_subdataset(subdatasets, variable):
    """
    Pick the sub-dataset for a variable.

    Args:
        subdatasets: GDAL sub-dataset strings
        variable: Variable name

    Returns:
        str: Matching sub-dataset

    Raises:
        VariableNotFoundError: If no sub-dataset carries that variable name
    """
    for subdataset in subdatasets:
        if _subdataset_variable(subdataset) == variable:
            return subdataset
    available = [_subdataset_variable(s) for s in subdatasets]
    raise VariableNotFoundError(
        f"Variable {variable!r} not found; available: {', '.join(available) or 'none'}"
    )


def _resolve_source(path, variable):
    """Return the path (or sub-dataset string) rasterio should open for a variable."""
    with rasterio.open(path) as ds:
        subdatasets = list(ds.subdatasets)
        if subdatasets:
            if variable is None:
                logger.info(f"{path} has {len(subdatasets)} variables; using the first one")
                return subdatasets[0]
            return find_subdataset(subdatasets, variable)

        if variable is None:
            return str(path)

        # Single-variable NetCDF files open directly; check the variable name
        names = {
            ds.tags(1).get("NETCDF_VARNAME"),
            ds.tags().get("NETCDF_VARNAME"),
            ds.descriptions[0] if ds.descriptions else None,
        }
        names.discard(None)
        if variable in names:
            return str(path)
        raise VariableNotFoundError(
            f"Variable {variable!r} not found in {path}; available: {', '.join(sorted(names)) or 'none'}"
        )


def load_raster(path, variable=None, band=1, name=None):
    """
    Load one band of a raster file (or NetCDF variable) as a Raster.

    The source no-data value becomes NaN, scale/offset metadata is applied, and
    files without a CRS are assumed to be in SOURCE_CRS (geographic WGS84).

    Args:
        path: Raster file path
        variable: Variable/sub-dataset name for multi-variable files
        band: 1-based band to read; for time series this is the time step (default: 1)
        name: Label for log messages (default: variable or file stem)

    Returns:
        Raster

    Raises:
        InputNotFoundError: If the file does not exist
        VariableNotFoundError: If the variable is not in the file
        rasterio.errors.RasterioIOError: If GDAL cannot read the file
    """
    path = Path(path)
    if not path.exists():
        raise InputNotFoundError(f"Raster file not found: {path}")

    name = name or variable or path.stem
    logger.info(f"Loading {name} from {path}" + (f" (variable {variable!r})" if variable else ""))

    try:
        source = _resolve_source(path, variable)
        with rasterio.open(source) as ds:
            if band < 1 or band > ds.count:
                raise ValueError(f"Band {band} out of range; {source} has {ds.count} band(s)")

            data = ds.read(band, masked=True).astype(np.float64)
            scale = ds.scales[band - 1] if ds.scales else 1.0
            offset = ds.offsets[band - 1] if ds.offsets else 0.0
            values = data.filled(np.nan) * scale + offset

            crs = ds.crs.to_string() if ds.crs else SOURCE_CRS
            if not ds.crs:
                logger.info(f"{name} has no CRS, assuming {SOURCE_CRS}")

            bounds = ds.bounds
            flipped = ds.transform.e > 0
    except RasterioIOError as e:
        logger.error(f"Error reading {path}: {str(e)}")
        raise

    if flipped:
        # South-up grids: put row 0 on the northern edge
        values = values[::-1, :]

    extent = Extent(
        min(bounds.left, bounds.right),
        max(bounds.left, bounds.right),
        min(bounds.bottom, bounds.top),
        max(bounds.bottom, bounds.top),
    )
    raster = Raster(values, extent, crs=crs, name=name)
    logger.info(f"Loaded {raster.describe()}")
    return raster
