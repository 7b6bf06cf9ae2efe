"""
reshape_passes.py
-----------------
Folds flat (location, rank, risetime) rows into one row per location:
- rank 1/2/3 -> first/second/third (missing ranks stay NaT)
- locations without a `first` pass are left out
- stable ascending sort on `first`, so equal times keep input order
to_display() renders the three instants as strings in a chosen timezone.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Optional

import pandas as pd
import pandera as pa
from pandera import Column, Check

from capital_passes import config

import warnings
warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")

RANK_FIELDS = {1: "first", 2: "second", 3: "third"}
PASS_COLUMNS = list(RANK_FIELDS.values())
RESHAPED_COLUMNS = ["state", "Capital", "latitude", "longitude"] + PASS_COLUMNS
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


@dataclass
class LocationPasses:
    state: str
    capital: str
    latitude: float
    longitude: float
    first: Optional[datetime] = None
    second: Optional[datetime] = None
    third: Optional[datetime] = None


def build_schema() -> pa.DataFrameSchema:
    utc = pd.DatetimeTZDtype(tz="UTC")
    return pa.DataFrameSchema(
        columns={
            "state": Column(pa.String, nullable=False, unique=True),
            "Capital": Column(pa.String, nullable=False),
            "latitude": Column(pa.Float, nullable=False, checks=Check.in_range(-90.0, 90.0)),
            "longitude": Column(pa.Float, nullable=False, checks=Check.in_range(-180.0, 180.0)),
            "first": Column(utc, nullable=False),
            "second": Column(utc, nullable=True),
            "third": Column(utc, nullable=True),
        },
        coerce=True,
        strict=True,
        ordered=True,
    )


def _fold(flat: pd.DataFrame) -> Dict[str, LocationPasses]:
    folded: Dict[str, LocationPasses] = {}
    for row in flat.itertuples(index=False):
        rec = folded.get(row.state)
        if rec is None:
            rec = folded[row.state] = LocationPasses(
                state=row.state,
                capital=row.Capital,
                latitude=float(row.latitude),
                longitude=float(row.longitude),
            )
        name = RANK_FIELDS.get(int(row.rank))
        if name is not None and getattr(rec, name) is None:
            setattr(rec, name, row.risetime)
    return folded


def reshape(flat: pd.DataFrame) -> pd.DataFrame:
    """One row per state with first/second/third pass instants (UTC), soonest first."""
    records = [
        {**asdict(rec), "Capital": rec.capital}
        for rec in _fold(flat).values()
        if rec.first is not None
    ]

    df = pd.DataFrame(records, columns=RESHAPED_COLUMNS)
    for col in PASS_COLUMNS:
        df[col] = pd.to_datetime(df[col], utc=True)
    df["latitude"] = df["latitude"].astype("float64")
    df["longitude"] = df["longitude"].astype("float64")

    df = df.sort_values("first", kind="mergesort").reset_index(drop=True)
    return build_schema().validate(df)


def to_display(table: pd.DataFrame, tz: Optional[str] = None) -> pd.DataFrame:
    """Copy of `table` with pass instants as strings in `tz`; absent passes become ''."""
    tz = tz or config.DISPLAY_TZ
    out = table.copy()
    for col in PASS_COLUMNS:
        local = out[col].dt.tz_convert(tz)
        out[col] = local.dt.strftime(DISPLAY_FORMAT).fillna("")
    return out
