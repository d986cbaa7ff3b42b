"""Pytest configuration and fixtures for seamap tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
import numpy as np


@pytest.fixture
def labrador_raster():
    """4x4 geographic raster over the Labrador Sea (0-360 longitudes) with one no-data cell."""
    from src.seamap.raster import Extent, Raster

    data = np.array(
        [
            [1.0, 2.0, np.nan, 4.0],
            [5.0, 6.0, 7.0, 8.0],
            [9.0, 10.0, 11.0, 12.0],
            [13.0, 14.0, 15.0, 16.0],
        ]
    )
    return Raster(data, Extent(295.0, 322.0, 50.0, 68.0), name="test")


@pytest.fixture
def aligned_raster():
    """10x10 raster with 1-degree cells over (-60, -50, 50, 60); value = row * 10 + col."""
    from src.seamap.raster import Extent, Raster

    data = np.arange(100, dtype=np.float64).reshape(10, 10)
    return Raster(data, Extent(-60.0, -50.0, 50.0, 60.0), name="aligned")


@pytest.fixture
def write_geotiff(tmp_path):
    """Factory writing a single-band float32 GeoTIFF; returns its path."""
    import rasterio
    from rasterio.transform import from_bounds

    def _write(data, bounds=(295.0, 50.0, 322.0, 68.0), name="grid.tif", nodata=-9999.0,
               crs="EPSG:4326", description=None, scale=None, dtype="float32"):
        data = np.asarray(data)
        rows, cols = data.shape
        path = tmp_path / name
        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            height=rows,
            width=cols,
            count=1,
            dtype=dtype,
            crs=crs,
            transform=from_bounds(*bounds, cols, rows),
            nodata=nodata,
        ) as dst:
            dst.write(data.astype(dtype), 1)
            if description:
                dst.set_band_description(1, description)
            if scale is not None:
                dst.scales = (scale,)
        return path

    return _write


@pytest.fixture
def stations_csv(tmp_path):
    """Station table with one station of each category and one row with a bad latitude."""
    path = tmp_path / "stations.csv"
    path.write_text(
        "Station,Lat,Lon,station_type,date,popup\n"
        "ST01,56.5,-52.25,TARA,2024-05-15,CTD cast\n"
        "ST02,58.0,305.0,TREC,2024-05-16,Plankton net\n"
        "ST03,60.1,-55.0,Other,2024-05-17,\n"
        "ST04,not-a-lat,-50.0,TARA,2024-05-18,Bad row\n"
    )
    return path


@pytest.fixture
def project_root():
    """Get the project root directory."""
    return Path(__file__).parent.parent
