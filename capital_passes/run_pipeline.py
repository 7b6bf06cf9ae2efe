"""
run_pipeline.py
---------------
End-to-end run: reference table -> pass predictions -> reshaped table -> map.
Writes reports/iss_passes_YYYYMMDD_HHMMSS.html (or the path given as argv[1]).

usage: python -m capital_passes.run_pipeline [out.html]
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
from rich.console import Console
from rich.table import Table

from capital_passes import config
from capital_passes.errors import ResourceUnavailable
from capital_passes.fetch_passes import fetch_all, flatten
from capital_passes.load_reference import load_locations
from capital_passes.pass_client import PassTimeClient
from capital_passes.render_map import build_map, save_map
from capital_passes.reshape_passes import reshape, to_display
from capital_passes.utils import setup_logging

console = Console()

SUMMARY_ROWS = 10


def _default_map_path() -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Path(config.REPORTS_DIR) / f"iss_passes_{stamp}.html"


def _print_summary(display: pd.DataFrame) -> None:
    table = Table(title="Soonest ISS passes")
    for col in ["Capital", "state", "first", "second", "third"]:
        table.add_column(col)
    for row in display.head(SUMMARY_ROWS).itertuples(index=False):
        table.add_row(row.Capital, row.state, row.first, row.second, row.third)
    console.print(table)


def run(
    map_path: Optional[Path] = None,
    client: Optional[PassTimeClient] = None,
) -> pd.DataFrame:
    setup_logging()

    locations = load_locations()
    console.print(f"Loaded [cyan]{len(locations)}[/cyan] locations")

    results = fetch_all(locations, client=client, console=console)
    failed = [state for state, r in results.items() if not r.ok]
    if failed:
        console.print(f"[yellow]{len(failed)} locations skipped:[/yellow] {', '.join(failed)}")

    table = reshape(flatten(results))
    display = to_display(table)
    _print_summary(display)

    out = save_map(build_map(display), map_path or _default_map_path())
    logging.info(f"Map written to {out} ({len(table)} locations)")
    console.print(f"[green]Map saved:[/green] {out}")
    return table


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    try:
        run(target)
    except ResourceUnavailable as e:
        logging.error(f"Reference data unavailable: {e}")
        console.print(f"[red]Reference data unavailable:[/red] {e}")
        raise SystemExit(1)
    except Exception as e:
        logging.exception("Unexpected failure: %s", e)
        console.print(f"[red]Pipeline failed:[/red] {e}")
        raise SystemExit(1)
