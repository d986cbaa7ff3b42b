#!/usr/bin/env python3
"""
Labrador Sea Sampling Stations - seamap Example

Builds an interactive web map of sampling stations over satellite and
bathymetry layers for the Labrador Sea (longitude 295-322, latitude 50-68).

Layers (each optional, each toggleable on the map):
    --sst      Sea-surface temperature, e.g. NOAA OISST v2.1 daily file
               (oisst-avhrr-v02r01.20240515.nc, variable "sst")
    --chl      Chlorophyll-a NetCDF (climatology or near-real-time image),
               colored on log10 values, legend in mg/m³
    --depth    Bathymetry NetCDF; land flattened to 0 and depths at or
               below 200 m dropped, binned colors

Stations:
    CSV or Excel table with columns Station, Lat, Lon, station_type, date,
    popup. TARA stations get green flags, TREC orange, everything else red.

Usage:
    python examples/labrador_sea_map.py --stations data/example_station_lat_lon.xlsx \\
        --sst data/oisst-avhrr-v02r01.20240515.nc \\
        --chl data/chl_clim.nc --chl-var CHL \\
        --depth data/depth.nc --depth-var elevation \\
        --output index.html

Output:
    - HTML map written to --output (default: index.html in the project root)
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.config import DEFAULT_OUTPUT_HTML, DEFAULT_STATIONS_FILE, LABRADOR_SEA_EXTENT
from src.seamap.errors import SeaMapError
from src.seamap.pipeline import LayerSource, StationMapConfig, StationMapPipeline
from src.seamap.presets import chlorophyll_style, depth_style, sst_style
from src.utils.helpers import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Interactive map of sampling stations over ocean raster layers"
    )
    parser.add_argument("--stations", type=Path, default=DEFAULT_STATIONS_FILE, help="Station table (CSV/Excel)")
    parser.add_argument("--sst", type=Path, help="Sea-surface temperature raster")
    parser.add_argument("--sst-var", default="sst", help="SST variable name (default: sst)")
    parser.add_argument("--chl", type=Path, help="Chlorophyll-a raster")
    parser.add_argument("--chl-var", default="CHL", help="Chlorophyll variable name (default: CHL)")
    parser.add_argument("--depth", type=Path, help="Bathymetry raster")
    parser.add_argument("--depth-var", default="elevation", help="Bathymetry variable name (default: elevation)")
    parser.add_argument(
        "--extent",
        type=float,
        nargs=4,
        metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
        default=LABRADOR_SEA_EXTENT,
        help="Region of interest in the rasters' coordinates (default: Labrador Sea)",
    )
    parser.add_argument("--output", "-o", type=Path, default=DEFAULT_OUTPUT_HTML, help="Output HTML file")
    parser.add_argument("--no-overwrite", action="store_true", help="Keep an existing output file")
    parser.add_argument("--log-level", default="INFO", help="Console log level (default: INFO)")
    parser.add_argument("--log-file", help="Also write DEBUG logs to this file")
    return parser.parse_args(argv)


def build_layers(args):
    layers = []
    if args.sst:
        layers.append(LayerSource(args.sst, sst_style(), variable=args.sst_var))
    if args.chl:
        layers.append(LayerSource(args.chl, chlorophyll_style(), variable=args.chl_var))
    if args.depth:
        layers.append(LayerSource(args.depth, depth_style(), variable=args.depth_var))
    return layers


def main(argv=None):
    args = parse_args(argv)
    logger = setup_logging(None, log_file=args.log_file, level=args.log_level.upper())

    config = StationMapConfig(
        stations_path=args.stations,
        layers=build_layers(args),
        extent=tuple(args.extent),
        output_path=args.output,
        overwrite=not args.no_overwrite,
    )
    if not config.layers:
        logger.warning("No raster layers given; the map will only show stations")

    try:
        written = StationMapPipeline(config).run()
    except SeaMapError as e:
        logger.error(f"Map not written: {e}")
        return 1

    if written:
        logger.info(f"Open {written} in a browser to explore the map")
    return 0


if __name__ == "__main__":
    sys.exit(main())
