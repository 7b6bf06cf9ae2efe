# Data sources + run settings for the capital pass pipeline.
# Every value can be overridden through an environment variable of the same name.
#
# Reference documents (tab or multi-space delimited, header row first),
# given as http(s) URLs or local paths:
#   STATES_URL   -> state, latitude, longitude, ...
#   CAPITALS_URL -> state, capital, ...
# Prediction service:
#   PASS_API_URL?lat=<deg>&lon=<deg>[&n=<count>][&alt=<m>]
#   -> {"message": "success", "response": [{"risetime": <epoch s>, "duration": <s>}, ...]}

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"


def _optional_int(name: str):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


STATES_URL = os.getenv("STATES_URL", str(DATA_DIR / "states.tsv"))
CAPITALS_URL = os.getenv("CAPITALS_URL", str(DATA_DIR / "capitals.tsv"))
PASS_API_URL = os.getenv("PASS_API_URL", "http://api.open-notify.org/iss-pass.json")

PASS_API_TIMEOUT = float(os.getenv("PASS_API_TIMEOUT", "10"))   # seconds
REFERENCE_TIMEOUT = float(os.getenv("REFERENCE_TIMEOUT", "30"))  # seconds

PASS_COUNT = _optional_int("PASS_COUNT")                    # service `n`, None = service default
OBSERVER_ALTITUDE_M = _optional_int("OBSERVER_ALTITUDE_M")  # service `alt`, None = sea level
KEEP_PASSES = 3

# Aggregate / non-state rows in the reference documents
EXCLUDED_STATES = tuple(
    s.strip().upper()
    for s in os.getenv("EXCLUDED_STATES", "US,DC,PR").split(",")
    if s.strip()
)

DISPLAY_TZ = os.getenv("DISPLAY_TZ", "UTC")

LOG_DIR = os.getenv("LOG_DIR", "logs")
REPORTS_DIR = os.getenv("REPORTS_DIR", "reports")
