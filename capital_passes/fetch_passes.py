"""
fetch_passes.py
---------------
Asks the prediction service about every location, one at a time.

- Exactly one call per location, in reference-table order
- Keeps the first KEEP_PASSES ranked predictions per location
- A failed call is recorded on that location's result and the loop moves on
- flatten() turns the results into flat (location, rank, risetime) rows
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pandas as pd
from rich.console import Console
from rich.progress import track

from capital_passes import config
from capital_passes.errors import PredictionUnavailable
from capital_passes.load_reference import Location
from capital_passes.pass_client import PassTimeClient

FLAT_COLUMNS = ["state", "Capital", "latitude", "longitude", "rank", "risetime"]


@dataclass(frozen=True)
class PassPrediction:
    state: str
    rank: int
    risetime: datetime


@dataclass
class LocationResult:
    location: Location
    passes: List[PassPrediction] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fetch_location(location: Location, client: PassTimeClient, keep: int) -> LocationResult:
    try:
        ranked = client.predict(location.latitude, location.longitude)
    except PredictionUnavailable as e:
        logging.warning(f"{location.state} ({location.capital}) skipped: {e}")
        return LocationResult(location=location, error=str(e))

    passes = [
        PassPrediction(state=location.state, rank=rank, risetime=risetime)
        for rank, risetime in ranked[:keep]
    ]
    return LocationResult(location=location, passes=passes)


def fetch_all(
    locations: Sequence[Location],
    client: Optional[PassTimeClient] = None,
    keep: int = config.KEEP_PASSES,
    console: Optional[Console] = None,
) -> Dict[str, LocationResult]:
    """Sequentially fetch predictions; returns {state: LocationResult} in location order."""
    client = client or PassTimeClient()
    results: Dict[str, LocationResult] = {}

    iterable = locations
    if console is not None:
        iterable = track(locations, description="Fetching passes", console=console)

    for location in iterable:
        results[location.state] = fetch_location(location, client, keep)

    failed = [s for s, r in results.items() if not r.ok]
    logging.info(f"Fetched {len(results) - len(failed)}/{len(results)} locations; failed={failed}")
    return results


def flatten(results: Dict[str, LocationResult]) -> pd.DataFrame:
    """Flat rows in location order, then rank order. Failed locations add nothing."""
    rows = []
    for result in results.values():
        loc = result.location
        for p in result.passes:
            rows.append({
                "state": loc.state,
                "Capital": loc.capital,
                "latitude": loc.latitude,
                "longitude": loc.longitude,
                "rank": p.rank,
                "risetime": p.risetime,
            })

    df = pd.DataFrame(rows, columns=FLAT_COLUMNS)
    df["rank"] = df["rank"].astype("int64")
    df["risetime"] = pd.to_datetime(df["risetime"], utc=True)
    return df
