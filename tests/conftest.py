"""Shared fixtures: sample capitals and a scripted prediction client."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from capital_passes.errors import PredictionUnavailable
from capital_passes.load_reference import Location


def utc(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


class ScriptedClient:
    """Stands in for PassTimeClient; answers by (lat, lon) and records every call."""

    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def predict(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        answer = self.answers[(latitude, longitude)]
        if isinstance(answer, Exception):
            raise answer
        return [(rank, utc(ts)) for rank, ts in enumerate(answer, start=1)]


@pytest.fixture
def capitals():
    return [
        Location("CA", "Sacramento", 38.58, -121.49),
        Location("NY", "Albany", 42.65, -73.76),
        Location("TX", "Austin", 30.27, -97.74),
    ]


@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def unavailable():
    return PredictionUnavailable("connection refused")
