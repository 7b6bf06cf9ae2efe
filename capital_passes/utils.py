from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from capital_passes import config

LOG_FILE_NAME = "capital_passes.log"


def setup_logging(log_dir: str | Path | None = None) -> Path:
    """Send pipeline logs to <log_dir>/capital_passes.log and return the path."""
    log_dir = Path(log_dir or config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    logging.basicConfig(
        filename=str(log_file),
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return log_file


def safe_get(obj: Any, *keys, default=None):
    """Walk nested dicts, returning `default` as soon as a level is missing."""
    cur = obj
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur
