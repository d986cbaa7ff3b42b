"""Tests for configuration module."""
import pytest
from pathlib import Path
from src import config


def test_project_root_exists():
    """Test that PROJECT_ROOT is set correctly."""
    assert config.PROJECT_ROOT.exists()
    assert config.PROJECT_ROOT.is_dir()
    assert (config.PROJECT_ROOT / "src" / "seamap").is_dir()


def test_default_paths_under_project_root():
    """Test that default data and output paths live in the project."""
    assert config.DATA_DIR.parent == config.PROJECT_ROOT
    assert config.DEFAULT_OUTPUT_HTML.suffix == ".html"


def test_labrador_sea_extent():
    """Test that the default extent is a valid Extent."""
    from src.seamap.raster import Extent

    extent = Extent(*config.LABRADOR_SEA_EXTENT)
    assert extent.wrapped() == Extent(-65.0, -38.0, 50.0, 68.0)


def test_station_columns_schema():
    """Test that every Station field has a column name."""
    assert set(config.STATION_COLUMNS) == {"station_id", "lat", "lon", "category", "date", "note"}


def test_config_constants():
    """Test that configuration constants are properly set."""
    assert config.SOURCE_CRS == "EPSG:4326"
    assert config.DISPLAY_CRS == "EPSG:3857"
    assert config.MIN_ZOOM < config.MAX_ZOOM
    assert isinstance(config.DEFAULT_LOG_LEVEL, str)
