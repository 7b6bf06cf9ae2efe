"""
render_map.py
-------------
Draws the display table on a folium map: one marker per capital, a tooltip
with the soonest pass and a popup listing up to three passes.
"""

from __future__ import annotations

import html
from pathlib import Path
from typing import Mapping, Union

import folium
import pandas as pd

from capital_passes.reshape_passes import PASS_COLUMNS

US_CENTER = (39.8, -98.6)
US_ZOOM = 4
POPUP_WIDTH = 260


def _text(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value)


def hover_text(row: Mapping) -> str:
    name = html.escape(f"{row['Capital']}, {row['state']}")
    return f"{name}: next pass {html.escape(_text(row['first']))}"


def click_text(row: Mapping) -> str:
    lines = [f"<b>{html.escape(str(row['Capital']))}, {html.escape(str(row['state']))}</b>"]
    for rank, col in enumerate(PASS_COLUMNS, start=1):
        when = _text(row[col])
        if when:
            lines.append(f"{rank}. {html.escape(when)}")
    return "<br>".join(lines)


def build_map(display_table: pd.DataFrame) -> folium.Map:
    m = folium.Map(location=US_CENTER, zoom_start=US_ZOOM)
    for _, row in display_table.iterrows():
        folium.Marker(
            location=[float(row["latitude"]), float(row["longitude"])],
            tooltip=hover_text(row),
            popup=folium.Popup(click_text(row), max_width=POPUP_WIDTH),
        ).add_to(m)
    return m


def save_map(m: folium.Map, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(path))
    return path
