"""Summarize station entries and exits by time band.

This script loads a station ridership CSV (one row per station per reporting
period), combines entries and exits into usage totals for four time bands,
and reports which stations hold the lowest and highest usage in each band.

Features:
    - Matches input columns by their published header text.
    - Treats blank or invalid count cells as missing (zero usage).
    - Reports the min/max station for Morning, Afternoon, Evening and Night.
    - Optionally reports the busiest time band for selected stations.
    - Optionally exports the per-station summaries to CSV.

Run from the repository root:

    python -m scripts.ridership_tools.station_time_band_usage
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import pandas as pd

from scripts.utils.logging_helper import setup_logging

# =============================================================================
# CONFIGURATION
# =============================================================================

INPUT_FILE: Path = Path("trains.csv")

# Stations to print a "busiest time" line for, e.g. ["Central", "Redfern"].
# Leave empty to print only the min/max report.
BUSIEST_TIME_STATIONS: list[str] = []

# Set to a path to export one row per station and period.
SUMMARY_CSV: Path | None = None

# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------

LOG_LEVEL = logging.INFO

# -----------------------------------------------------------------------------
# Input layout
# -----------------------------------------------------------------------------

PERIOD_COL: Final[str] = "YEAR"
STATION_COL: Final[str] = "STATION"
LAT_COL: Final[str] = "LAT"
LONG_COL: Final[str] = "LONG"

TIME_BANDS: Final[tuple[str, ...]] = ("Morning", "Afternoon", "Evening", "Night")

# Band → (entries header, exits header). The night headers carry a space
# before the hyphen in the published data; match them literally.
BAND_COLUMNS: Final[dict[str, tuple[str, str]]] = {
    "Morning": ("Entries 0600-1000", "Exits 0600-1000"),
    "Afternoon": ("Entries 1000-1500", "Exits 1000-1500"),
    "Evening": ("Entries 1500-1900", "Exits 1500-1900"),
    "Night": ("Entries 1900 -0600", "Exits 1900 -0600"),
}

# All-day counts are optional in the input.
TOTAL_COLUMNS: Final[tuple[str, str]] = ("Entries 0000-2359", "Exits 0000-2359")

REQUIRED_COLUMNS: Final[list[str]] = [
    PERIOD_COL,
    STATION_COL,
    *(col for pair in BAND_COLUMNS.values() for col in pair),
    LAT_COL,
    LONG_COL,
]

MISSING_HOLDER: Final[str] = "n/a"

# Counts are signed 32-bit integers in ASCII digits; anything else is missing.
_COUNT_RE = re.compile(r"[+-]?[0-9]+")
COUNT_MIN: Final[int] = -(2**31)
COUNT_MAX: Final[int] = 2**31 - 1

SUMMARY_COLUMNS: Final[list[str]] = [
    "STATION",
    "PERIOD",
    "MORNING",
    "AFTERNOON",
    "EVENING",
    "NIGHT",
    "TOTAL",
    "LAT",
    "LONG",
]

# =============================================================================
# DATA MODEL
# =============================================================================


class ParseError(ValueError):
    """Raised when the ridership file cannot be loaded."""


@dataclass(frozen=True)
class Coordinate:
    """Station position as reported on an input row."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class RawRecord:
    """One input row. Counts are None where the cell held no usable integer."""

    period: str
    station: str
    entries_morning: int | None
    exits_morning: int | None
    entries_afternoon: int | None
    exits_afternoon: int | None
    entries_evening: int | None
    exits_evening: int | None
    entries_night: int | None
    exits_night: int | None
    entries_total: int | None
    exits_total: int | None
    latitude: float
    longitude: float


@dataclass(frozen=True)
class UsageSummary:
    """Entries + exits per time band for one station and period."""

    period: str
    morning: int
    afternoon: int
    evening: int
    night: int
    total: int
    location: Coordinate

    def usages(self) -> dict[str, int]:
        """Return band label → usage in :data:`TIME_BANDS` order."""
        return dict(zip(TIME_BANDS, (self.morning, self.afternoon, self.evening, self.night)))

    def busiest_band(self) -> tuple[str, int]:
        """Return the band with the highest usage; ties go to the earlier band."""
        best_band, best_usage = TIME_BANDS[0], self.morning
        for band, value in self.usages().items():
            if value > best_usage:
                best_band, best_usage = band, value
        return best_band, best_usage


StationIndex = dict[str, list[UsageSummary]]


@dataclass(frozen=True)
class BandExtremes:
    """Stations holding the lowest and highest usage in one band."""

    band: str
    min_station: str | None = None
    min_usage: int | None = None
    max_station: str | None = None
    max_usage: int | None = None


# =============================================================================
# FUNCTIONS
# =============================================================================

# ─────────────────────────  LOAD  ─────────────────────────────────── #


def parse_count(value: object) -> int | None:
    """Convert a count cell to an integer.

    Args:
        value: Raw cell text.

    Returns:
        The integer value, or None when the cell is empty or holds anything
        other than a 32-bit integer written in ASCII digits (e.g. ``"-"``,
        ``"3.5"``, ``"1_000"`` or ``"3000000000"``).
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _COUNT_RE.fullmatch(text):
        return None
    number = int(text)
    if not COUNT_MIN <= number <= COUNT_MAX:
        return None
    return number


def read_ridership_csv(path: Path) -> pd.DataFrame:
    """Read *path* with every cell kept as literal text.

    Raises:
        ParseError: The file is missing, unreadable, empty or malformed.
    """
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False, na_filter=False)
    except FileNotFoundError as exc:
        raise ParseError(f"The file '{path}' does not exist.") from exc
    except pd.errors.EmptyDataError as exc:
        raise ParseError(f"File '{path}' is empty (no header row).") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"File '{path}' is not valid UTF-8: {exc}") from exc
    except pd.errors.ParserError as exc:
        raise ParseError(f"Parser error in '{path}': {exc}") from exc
    except OSError as exc:
        raise ParseError(f"OS error reading '{path}': {exc}") from exc


def verify_required_columns(data_frame: pd.DataFrame, path: Path) -> None:
    """Ensure every required header is present, matched literally.

    Raises:
        ParseError: If any required header is missing.
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in data_frame.columns]
    if missing:
        raise ParseError(f"Missing columns in '{path}': {', '.join(missing)}")


def _coordinates(data_frame: pd.DataFrame, column: str) -> list[float]:
    values: list[float] = []
    for row_number, raw in enumerate(data_frame[column], start=1):
        try:
            values.append(float(raw))
        except ValueError as exc:
            raise ParseError(
                f"Invalid {column} value {raw!r} on data row {row_number}."
            ) from exc
    return values


def _counts(data_frame: pd.DataFrame, column: str) -> list[int | None]:
    if column not in data_frame.columns:
        return [None] * len(data_frame)
    return [parse_count(value) for value in data_frame[column]]


def load_records(path: Path) -> list[RawRecord]:
    """Load the ridership CSV into :class:`RawRecord` objects in file order.

    Args:
        path: Location of the ridership CSV.

    Returns:
        One record per data row.

    Raises:
        ParseError: If the file cannot be read, a required header is absent,
            or a ``LAT``/``LONG`` cell is not a number.
    """
    data_frame = read_ridership_csv(path)
    verify_required_columns(data_frame, path)

    latitudes = _coordinates(data_frame, LAT_COL)
    longitudes = _coordinates(data_frame, LONG_COL)

    counts: dict[str, list[int | None]] = {}
    for band, (entries_col, exits_col) in BAND_COLUMNS.items():
        counts[f"entries_{band.lower()}"] = _counts(data_frame, entries_col)
        counts[f"exits_{band.lower()}"] = _counts(data_frame, exits_col)
    counts["entries_total"] = _counts(data_frame, TOTAL_COLUMNS[0])
    counts["exits_total"] = _counts(data_frame, TOTAL_COLUMNS[1])

    records = [
        RawRecord(
            period=data_frame[PERIOD_COL].iat[i],
            station=data_frame[STATION_COL].iat[i],
            latitude=latitudes[i],
            longitude=longitudes[i],
            **{field: values[i] for field, values in counts.items()},
        )
        for i in range(len(data_frame))
    ]

    missing_cells = sum(value is None for values in counts.values() for value in values)
    logging.info("Loaded %d records from %s", len(records), path)
    logging.debug("%d count cells treated as missing", missing_cells)
    return records


# ─────────────────────────  AGGREGATE  ────────────────────────────── #


def usage(entries: int | None, exits: int | None) -> int:
    """Return entries + exits with missing counts taken as zero."""
    return (entries or 0) + (exits or 0)


def summarize(record: RawRecord) -> UsageSummary:
    """Build the :class:`UsageSummary` for a single row."""
    return UsageSummary(
        period=record.period,
        morning=usage(record.entries_morning, record.exits_morning),
        afternoon=usage(record.entries_afternoon, record.exits_afternoon),
        evening=usage(record.entries_evening, record.exits_evening),
        night=usage(record.entries_night, record.exits_night),
        total=usage(record.entries_total, record.exits_total),
        location=Coordinate(record.latitude, record.longitude),
    )


def build_station_index(records: Iterable[RawRecord]) -> StationIndex:
    """Group row summaries by station name, preserving input order per station."""
    index: StationIndex = {}
    for record in records:
        index.setdefault(record.station, []).append(summarize(record))
    return index


def load_station_index(path: Path) -> StationIndex:
    """Load *path* and return its station index."""
    index = build_station_index(load_records(path))
    logging.info("Indexed %d stations", len(index))
    return index


def station_summaries(station: str, index: StationIndex) -> list[UsageSummary] | None:
    """Return the summaries for *station*, or None if it is not in the data."""
    return index.get(station)


# ─────────────────────────  REPORT  ───────────────────────────────── #


def busiest_time(station: str, index: StationIndex) -> tuple[str, int] | None:
    """Find the busiest time band for *station* across all of its periods.

    Each summary contributes its own busiest band; a later summary replaces
    the running result only when its usage is strictly greater. A station
    with no usage at all reports ``("Morning", 0)``.

    Args:
        station: Station name as it appears in the input.
        index: Output of :func:`build_station_index`.

    Returns:
        ``(band, usage)``, or None when the station has no data.
    """
    summaries = station_summaries(station, index)
    if summaries is None:
        return None

    best: tuple[str, int] = (TIME_BANDS[0], 0)
    for summary in summaries:
        candidate = summary.busiest_band()
        if candidate[1] > best[1]:
            best = candidate
    return best


def band_extremes(index: StationIndex) -> list[BandExtremes]:
    """Find the min- and max-usage station for every time band.

    The first summary scanned seeds each band. After that the max holder
    changes only on a strictly greater value and the min holder only on a
    strictly smaller one, so ties keep the first station seen.

    Args:
        index: Output of :func:`build_station_index`.

    Returns:
        One :class:`BandExtremes` per band, in :data:`TIME_BANDS` order.
        Holders are None when *index* is empty.
    """
    lows: dict[str, tuple[str, int]] = {}
    highs: dict[str, tuple[str, int]] = {}

    for station, summaries in index.items():
        for summary in summaries:
            for band, value in summary.usages().items():
                if band not in highs or value > highs[band][1]:
                    highs[band] = (station, value)
                if band not in lows or value < lows[band][1]:
                    lows[band] = (station, value)

    extremes = []
    for band in TIME_BANDS:
        low = lows.get(band, (None, None))
        high = highs.get(band, (None, None))
        extremes.append(
            BandExtremes(
                band=band,
                min_station=low[0],
                min_usage=low[1],
                max_station=high[0],
                max_usage=high[1],
            )
        )
    return extremes


def format_band_extremes(extremes: Iterable[BandExtremes]) -> list[str]:
    """Render one ``"<Band> - Min <station>, Max <station>"`` line per band."""
    return [
        f"{item.band} - Min {item.min_station or MISSING_HOLDER}, "
        f"Max {item.max_station or MISSING_HOLDER}"
        for item in extremes
    ]


def format_busiest_time(station: str, result: tuple[str, int] | None) -> str:
    """Render the busiest-time line for *station*."""
    if result is None:
        return f"No data found for station {station}"
    return f"Busiest time at station {station} was {result[0]}"


# ─────────────────────────  EXPORT  ───────────────────────────────── #


def summaries_frame(index: StationIndex) -> pd.DataFrame:
    """Flatten *index* into one row per station and period.

    Stations are sorted by name; each station's rows keep input order.
    """
    rows = [
        {
            "STATION": station,
            "PERIOD": summary.period,
            "MORNING": summary.morning,
            "AFTERNOON": summary.afternoon,
            "EVENING": summary.evening,
            "NIGHT": summary.night,
            "TOTAL": summary.total,
            "LAT": summary.location.latitude,
            "LONG": summary.location.longitude,
        }
        for station in sorted(index)
        for summary in index[station]
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def export_summaries_csv(index: StationIndex, csv_path: Path) -> None:
    """Write :func:`summaries_frame` to *csv_path*, overwriting any existing file."""
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    summaries_frame(index).to_csv(csv_path, index=False)
    logging.info("Station summaries saved to CSV: %s", csv_path)


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Load :data:`INPUT_FILE` and print the time-band report.

    Raises:
        ParseError: If the input cannot be loaded. Nothing is printed.
    """
    index = load_station_index(INPUT_FILE)

    for line in format_band_extremes(band_extremes(index)):
        print(line)

    for station in BUSIEST_TIME_STATIONS:
        print(format_busiest_time(station, busiest_time(station, index)))

    if SUMMARY_CSV is not None:
        export_summaries_csv(index, SUMMARY_CSV)


if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    try:
        main()
    except ParseError as err:
        sys.exit(f"ERROR: {err}")
