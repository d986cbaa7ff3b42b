"""
Sampling stations: table loading, popup content and marker colors.

Station tables are CSV or Excel files with the column schema in
STATION_COLUMNS. Rows whose coordinates cannot be parsed as numbers (or fall
outside valid latitude/longitude ranges) are dropped with a warning.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pandas as pd

from src.config import STATION_COLUMNS
from src.seamap.errors import InputNotFoundError

logger = logging.getLogger(__name__)

# Station category -> marker color; anything else gets DEFAULT_MARKER_COLOR
MARKER_COLORS = {
    "TARA": "green",
    "TREC": "orange",
}
DEFAULT_MARKER_COLOR = "red"
UNKNOWN_CATEGORY = "unknown"

EXCEL_SUFFIXES = (".xlsx", ".xls")


def resolve_marker_color(category) -> str:
    """
    Marker color for a station category.

    Total function: missing, empty or unrecognised categories get the default.

    Examples:
        >>> resolve_marker_color("TARA")
        'green'
        >>> resolve_marker_color(None)
        'red'
    """
    if not isinstance(category, str):
        return DEFAULT_MARKER_COLOR
    return MARKER_COLORS.get(category.strip(), DEFAULT_MARKER_COLOR)


@dataclass
class Station:
    """
    One sampling station.

    The note is popup markup written by whoever keeps the station table
    (links, bold text) and is inserted as HTML unless note_is_html is False.
    """

    station_id: str
    lat: float
    lon: float
    category: str = UNKNOWN_CATEGORY
    date: str = ""
    note: str = ""
    note_is_html: bool = True

    @property
    def position_label(self) -> str:
        return f"[LAT:{self.lat:.4f}; LON:{self.lon:.4f}]"

    @property
    def marker_color(self) -> str:
        return resolve_marker_color(self.category)

    @property
    def popup_html(self) -> str:
        """Popup body: date, note and position, one per line."""
        note = self.note if self.note_is_html else html.escape(self.note)
        parts = [html.escape(self.date), note, html.escape(self.position_label)]
        return "<br/>".join(parts)


def _text(value) -> str:
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_station_table(path) -> pd.DataFrame:
    """Read a station table (CSV or Excel) into a DataFrame, keeping text columns as text."""
    path = Path(path)
    if not path.exists():
        raise InputNotFoundError(f"Station table not found: {path}")

    text_columns = {
        STATION_COLUMNS[key]: str for key in ("station_id", "category", "date", "note")
    }
    if path.suffix.lower() in EXCEL_SUFFIXES:
        return pd.read_excel(path, dtype=text_columns)
    return pd.read_csv(path, dtype=text_columns)


def load_stations(path, note_is_html=True) -> List[Station]:
    """
    Load sampling stations from a CSV or Excel table.

    Args:
        path: Station table path
        note_is_html: Insert the popup column as HTML (False escapes it)

    Returns:
        list[Station]: Stations in table order

    Raises:
        InputNotFoundError: If the file does not exist
        ValueError: If a required column (id, latitude, longitude) is missing
    """
    logger.info(f"Loading stations from {path}")
    table = read_station_table(path)

    required = [STATION_COLUMNS[key] for key in ("station_id", "lat", "lon")]
    missing = [column for column in required if column not in table.columns]
    if missing:
        raise ValueError(
            f"Station table {path} is missing column(s): {', '.join(missing)}. "
            f"Found: {', '.join(map(str, table.columns))}"
        )

    lat_col, lon_col = STATION_COLUMNS["lat"], STATION_COLUMNS["lon"]
    lat = pd.to_numeric(table[lat_col], errors="coerce")
    lon = pd.to_numeric(table[lon_col], errors="coerce")
    usable = lat.between(-90, 90) & lon.between(-180, 360)

    rejected = int((~usable).sum())
    if rejected:
        bad_ids = table.loc[~usable, STATION_COLUMNS["station_id"]].map(_text).tolist()
        logger.warning(f"Dropped {rejected} station row(s) with unusable coordinates: {bad_ids}")

    stations = []
    for index in table.index[usable.to_numpy()]:
        row = table.loc[index]
        category = _text(row.get(STATION_COLUMNS["category"])) or UNKNOWN_CATEGORY
        stations.append(
            Station(
                station_id=_text(row[STATION_COLUMNS["station_id"]]),
                lat=float(lat[index]),
                lon=float(lon[index]),
                category=category,
                date=_text(row.get(STATION_COLUMNS["date"])),
                note=_text(row.get(STATION_COLUMNS["note"])),
                note_is_html=note_is_html,
            )
        )

    logger.info(f"Loaded {len(stations)} station(s)")
    return stations
