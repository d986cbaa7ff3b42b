"""Configuration module for the seamap project.

Centralizes data paths, map defaults and input schemas.
"""
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_STATIONS_FILE = DATA_DIR / "example_station_lat_lon.xlsx"
DEFAULT_OUTPUT_HTML = PROJECT_ROOT / "index.html"

# Region of interest: Labrador Sea, (xmin, xmax, ymin, ymax) in 0-360 longitude
LABRADOR_SEA_EXTENT = (295.0, 322.0, 50.0, 68.0)

# Coordinate reference systems
SOURCE_CRS = "EPSG:4326"  # assumed when a raster file carries no CRS
DISPLAY_CRS = "EPSG:3857"  # web mercator, what Leaflet tiles are drawn in

# Station table schema: field -> column name
STATION_COLUMNS = {
    "station_id": "Station",
    "lat": "Lat",
    "lon": "Lon",
    "category": "station_type",
    "date": "date",
    "note": "popup",
}

# Base map
BASE_TILES = "OpenStreetMap.France"
MINIMAP_TILES = "Esri.WorldStreetMap"
MIN_ZOOM = 3
MAX_ZOOM = 18
GRATICULE_INTERVAL = 1.0

# Map controls
MEASURE_OPTIONS = {
    "position": "bottomleft",
    "primary_length_unit": "meters",
    "primary_area_unit": "sqmeters",
    "active_color": "darkgreen",
    "completed_color": "red",
}
GPS_OPTIONS = {
    "position": "bottomleft",
    "auto_start": True,
    "set_view": "untilPanOrZoom",
    "locate_options": {"maxZoom": MAX_ZOOM, "enableHighAccuracy": True},
}

STATION_INFO_HTML = """
<div>
  <strong>Station Information</strong><br>
  <span>&#9679; GREEN icons: TARA stations</span><br>
  <span>&#9679; ORANGE icons: TREC stations</span><br>
  <span>&#9679; RED icons: other stations</span>
</div>
"""

# Default settings
DEFAULT_LOG_LEVEL = "INFO"
