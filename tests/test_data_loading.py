"""
Tests for data loading operations.

Tests input checks and raster/NetCDF variable loading.
"""

import pytest
import numpy as np


GRID = np.array(
    [
        [1.0, 2.0, -9999.0, 4.0],
        [5.0, 6.0, 7.0, 8.0],
        [9.0, 10.0, 11.0, 12.0],
        [13.0, 14.0, 15.0, 16.0],
    ]
)


def _has_driver(name):
    import rasterio

    with rasterio.Env() as env:
        return name in env.drivers()


class TestRequireInputs:
    """Tests for require_inputs function."""

    def test_all_present(self, tmp_path):
        from src.seamap.data_loading import require_inputs

        a = tmp_path / "a.nc"
        a.write_bytes(b"")

        require_inputs(a)

    def test_names_every_missing_file(self, tmp_path):
        from src.seamap.data_loading import require_inputs
        from src.seamap.errors import InputNotFoundError

        present = tmp_path / "present.csv"
        present.write_text("x")

        with pytest.raises(InputNotFoundError) as excinfo:
            require_inputs(present, tmp_path / "sst.nc", tmp_path / "depth.nc")

        message = str(excinfo.value)
        assert "sst.nc" in message
        assert "depth.nc" in message
        assert "present.csv" not in message

    def test_is_a_file_not_found_error(self, tmp_path):
        from src.seamap.data_loading import require_inputs

        with pytest.raises(FileNotFoundError):
            require_inputs(tmp_path / "missing.nc")


class TestFindSubdataset:
    """Tests for find_subdataset function."""

    SUBDATASETS = [
        'NETCDF:"/data/oisst.nc":sst',
        'NETCDF:"/data/oisst.nc":anom',
        'NETCDF:"/data/oisst.nc":ice',
    ]

    def test_finds_variable(self):
        from src.seamap.data_loading import find_subdataset

        assert find_subdataset(self.SUBDATASETS, "anom") == 'NETCDF:"/data/oisst.nc":anom'

    def test_missing_variable_lists_available(self):
        from src.seamap.data_loading import find_subdataset
        from src.seamap.errors import VariableNotFoundError

        with pytest.raises(VariableNotFoundError) as excinfo:
            find_subdataset(self.SUBDATASETS, "CHL")

        assert "'CHL'" in str(excinfo.value)
        assert "sst, anom, ice" in str(excinfo.value)


class TestLoadRaster:
    """Tests for load_raster function."""

    def test_loads_geotiff(self, write_geotiff):
        from src.seamap.data_loading import load_raster
        from src.seamap.raster import Extent

        path = write_geotiff(GRID)
        raster = load_raster(path)

        assert raster.shape == (4, 4)
        assert raster.extent == Extent(295, 322, 50, 68)
        assert raster.crs == "EPSG:4326"
        assert raster.name == "grid"
        assert raster.data[0, 0] == 1.0
        assert raster.data[3, 3] == 16.0

    def test_nodata_becomes_nan(self, write_geotiff):
        from src.seamap.data_loading import load_raster

        raster = load_raster(write_geotiff(GRID))

        assert np.isnan(raster.data[0, 2])
        assert raster.nodata_count == 1
        assert raster.value_range() == (1.0, 16.0)

    def test_applies_scale_factor(self, write_geotiff):
        from src.seamap.data_loading import load_raster

        data = np.array([[2500, 1000], [-500, -999]])
        path = write_geotiff(data, dtype="int16", nodata=-999, scale=0.01)
        raster = load_raster(path)

        assert raster.data[0, 0] == pytest.approx(25.0)
        assert raster.data[1, 0] == pytest.approx(-5.0)
        assert np.isnan(raster.data[1, 1])

    def test_variable_matches_band_description(self, write_geotiff):
        from src.seamap.data_loading import load_raster

        path = write_geotiff(GRID, description="sst")
        raster = load_raster(path, variable="sst")

        assert raster.name == "sst"

    def test_missing_variable(self, write_geotiff):
        from src.seamap.data_loading import load_raster
        from src.seamap.errors import VariableNotFoundError

        path = write_geotiff(GRID, description="sst")

        with pytest.raises(VariableNotFoundError, match="CHL"):
            load_raster(path, variable="CHL")

    def test_missing_file(self, tmp_path):
        from src.seamap.data_loading import load_raster
        from src.seamap.errors import InputNotFoundError

        with pytest.raises(InputNotFoundError):
            load_raster(tmp_path / "nope.nc", variable="sst")

    def test_band_out_of_range(self, write_geotiff):
        from src.seamap.data_loading import load_raster

        with pytest.raises(ValueError, match="Band 2"):
            load_raster(write_geotiff(GRID), band=2)

    def test_netcdf_variable(self, tmp_path):
        """Test reading a NetCDF variable by name."""
        if not _has_driver("netCDF"):
            pytest.skip("GDAL netCDF driver not available")

        import rasterio
        from rasterio.transform import from_bounds
        from src.seamap.data_loading import load_raster
        from src.seamap.errors import VariableNotFoundError

        path = tmp_path / "grid.nc"
        with rasterio.open(
            path,
            "w",
            driver="netCDF",
            height=4,
            width=4,
            count=1,
            dtype="float32",
            crs="EPSG:4326",
            transform=from_bounds(295, 50, 322, 68, 4, 4),
            nodata=-9999.0,
        ) as dst:
            dst.write(GRID.astype("float32"), 1)

        raster = load_raster(path, variable="Band1")

        assert raster.shape == (4, 4)
        assert raster.data[0, 0] == 1.0
        assert np.isnan(raster.data[0, 2])
        assert raster.extent.ymax == pytest.approx(68.0)

        with pytest.raises(VariableNotFoundError):
            load_raster(path, variable="sst")
