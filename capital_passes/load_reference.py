"""
load_reference.py
-----------------
Loads the state capital reference table:
- Reads the coordinates document (state, latitude, longitude)
- Reads the capitals document (state, capital)
- Inner-joins them on state, keeping the coordinates document's row order
- Drops aggregate / non-state rows (config.EXCLUDED_STATES)
- Validates the joined table with pandera

Any failure here is fatal: nothing downstream can run without locations.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
import pandera as pa
import requests
from pandera import Column, Check
from rich.console import Console

from capital_passes import config
from capital_passes.errors import ResourceUnavailable

import warnings
warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")


console = Console()

# Tabs, or runs of 2+ spaces; single spaces stay inside names ("Salt Lake City")
COLUMN_SEPARATOR = r"\t+|\s{2,}"
REFERENCE_COLUMNS = ["state", "Capital", "latitude", "longitude"]


@dataclass(frozen=True)
class Location:
    state: str
    capital: str
    latitude: float
    longitude: float


def _read_source(source: str, timeout: float) -> str:
    """Return the raw text of an http(s) URL or a local file."""
    if source.startswith(("http://", "https://")):
        try:
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ResourceUnavailable(source, f"download failed: {e}") from e
        return resp.text
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceUnavailable(source, f"read failed: {e}") from e


def _parse_columns(text: str, source: str, names: Sequence[str]) -> pd.DataFrame:
    """Parse a delimited document and name its leading columns by position."""
    try:
        df = pd.read_csv(io.StringIO(text), sep=COLUMN_SEPARATOR, engine="python", dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise ResourceUnavailable(source, f"unparseable: {e}") from e

    if df.shape[1] < len(names):
        raise ResourceUnavailable(
            source, f"expected at least {len(names)} columns, found {df.shape[1]}"
        )
    df = df.iloc[:, : len(names)].copy()
    df.columns = list(names)
    df = df.apply(lambda col: col.str.strip())
    df["state"] = df["state"].str.upper()
    return df


def build_schema() -> pa.DataFrameSchema:
    return pa.DataFrameSchema(
        columns={
            "state": Column(pa.String, nullable=False, unique=True),
            "Capital": Column(pa.String, nullable=False, checks=Check.str_length(min_value=1)),
            "latitude": Column(pa.Float, nullable=False, checks=Check.in_range(-90.0, 90.0)),
            "longitude": Column(pa.Float, nullable=False, checks=Check.in_range(-180.0, 180.0)),
        },
        coerce=True,
        strict=True,
        ordered=True,
    )


def reference_table(
    states_url: Optional[str] = None,
    capitals_url: Optional[str] = None,
    excluded: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
) -> pd.DataFrame:
    """Joined, validated reference table with columns state, Capital, latitude, longitude."""
    states_url = states_url or config.STATES_URL
    capitals_url = capitals_url or config.CAPITALS_URL
    excluded = config.EXCLUDED_STATES if excluded is None else excluded
    timeout = config.REFERENCE_TIMEOUT if timeout is None else timeout

    coords = _parse_columns(
        _read_source(states_url, timeout), states_url, ["state", "latitude", "longitude"]
    )
    names = _parse_columns(
        _read_source(capitals_url, timeout), capitals_url, ["state", "Capital"]
    )
    logging.info(f"Loaded {len(coords)} coordinate rows, {len(names)} capital rows")

    # inner merge keeps left (coordinates) key order
    df = coords.merge(names, on="state", how="inner", sort=False)
    df = df[~df["state"].isin({s.upper() for s in excluded})]
    df = df[REFERENCE_COLUMNS].reset_index(drop=True)

    try:
        df = build_schema().validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        logging.error("Reference validation failed:\n%s", err.failure_cases)
        raise ResourceUnavailable(
            f"{states_url} + {capitals_url}", "reference table failed validation"
        ) from err

    logging.info(f"Reference table ready: {len(df)} locations")
    return df


def load_locations(
    states_url: Optional[str] = None,
    capitals_url: Optional[str] = None,
    excluded: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
) -> List[Location]:
    df = reference_table(states_url, capitals_url, excluded, timeout)
    return [
        Location(
            state=row.state,
            capital=row.Capital,
            latitude=float(row.latitude),
            longitude=float(row.longitude),
        )
        for row in df.itertuples(index=False)
    ]


if __name__ == "__main__":
    try:
        locations = load_locations()
    except ResourceUnavailable as e:
        console.print(f"[red]Reference load failed:[/red] {e}")
        raise SystemExit(1)
    console.print(f"[green]Loaded {len(locations)} locations[/green]")
    for loc in locations:
        console.print(f"  {loc.state}  {loc.capital:<16} ({loc.latitude:.2f}, {loc.longitude:.2f})")
