"""Tests for the sequential fetch loop and flat row accumulation."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from capital_passes.errors import MalformedResponse
from capital_passes.fetch_passes import FLAT_COLUMNS, fetch_all, flatten
from capital_passes.pass_client import PassTimeClient
from capital_passes.reshape_passes import reshape
from conftest import utc

T0 = 1700000000


class TestFetchAll:

    def test_one_call_per_location_in_order(self, capitals, scripted_client):
        client = scripted_client({
            (c.latitude, c.longitude): [T0] for c in capitals
        })
        results = fetch_all(capitals, client=client)

        assert client.calls == [(c.latitude, c.longitude) for c in capitals]
        assert list(results) == ["CA", "NY", "TX"]

    def test_keeps_first_three(self, capitals, scripted_client):
        ca = capitals[0]
        client = scripted_client({
            (ca.latitude, ca.longitude): [T0, T0 + 10, T0 + 20, T0 + 30, T0 + 40],
        })
        result = fetch_all([ca], client=client)["CA"]

        assert result.ok
        assert [p.rank for p in result.passes] == [1, 2, 3]
        assert [p.risetime for p in result.passes] == [utc(T0), utc(T0 + 10), utc(T0 + 20)]
        assert all(p.state == "CA" for p in result.passes)

    def test_failure_is_contained(self, capitals, scripted_client, unavailable, caplog):
        ca, ny, tx = capitals
        client = scripted_client({
            (ca.latitude, ca.longitude): [T0],
            (ny.latitude, ny.longitude): unavailable,
            (tx.latitude, tx.longitude): MalformedResponse("missing 'response' list"),
        })
        with caplog.at_level(logging.WARNING):
            results = fetch_all(capitals, client=client)

        assert len(client.calls) == 3
        assert results["CA"].ok
        assert not results["NY"].ok and results["NY"].passes == []
        assert "connection refused" in results["NY"].error
        assert not results["TX"].ok
        assert "NY (Albany) skipped" in caplog.text

    def test_unexpected_errors_propagate(self, capitals, scripted_client):
        ca = capitals[0]
        client = scripted_client({(ca.latitude, ca.longitude): RuntimeError("bug")})
        with pytest.raises(RuntimeError):
            fetch_all([ca], client=client)

    def test_out_of_range_risetime_skips_only_that_location(self, capitals):
        """An unconvertible epoch in one response leaves the other capitals fetched."""
        ca, ny, tx = capitals

        def fake_get(url, params, timeout):
            resp = MagicMock()
            if params["lat"] == ny.latitude:
                resp.json.return_value = {"message": "success", "response": [{"risetime": 10**20}]}
            else:
                resp.json.return_value = {"message": "success", "response": [{"risetime": T0}]}
            return resp

        with patch("capital_passes.pass_client.requests.get", side_effect=fake_get) as mock_get:
            results = fetch_all(capitals, client=PassTimeClient(base_url="http://passes.test"))

        assert mock_get.call_count == 3
        assert results["CA"].ok and results["TX"].ok
        assert not results["NY"].ok
        assert "out of range" in results["NY"].error
        assert results["TX"].passes[0].risetime == utc(T0)

    def test_no_locations(self, scripted_client):
        client = scripted_client({})
        assert fetch_all([], client=client) == {}
        assert client.calls == []


class TestFlatten:

    def test_rows_in_location_then_rank_order(self, capitals, scripted_client):
        ca, ny, tx = capitals
        client = scripted_client({
            (ca.latitude, ca.longitude): [T0 + 100, T0 + 200],
            (ny.latitude, ny.longitude): [T0 + 50],
            (tx.latitude, tx.longitude): [T0 + 10, T0 + 20, T0 + 30],
        })
        flat = flatten(fetch_all(capitals, client=client))

        assert list(flat.columns) == FLAT_COLUMNS
        assert list(zip(flat["state"], flat["rank"])) == [
            ("CA", 1), ("CA", 2), ("NY", 1), ("TX", 1), ("TX", 2), ("TX", 3),
        ]
        assert flat.loc[0, "Capital"] == "Sacramento"
        assert flat.loc[0, "risetime"] == pd.Timestamp(T0 + 100, unit="s", tz="UTC")

    def test_failed_location_has_no_rows(self, capitals, scripted_client, unavailable):
        ca, ny, tx = capitals
        client = scripted_client({
            (ca.latitude, ca.longitude): [T0],
            (ny.latitude, ny.longitude): unavailable,
            (tx.latitude, tx.longitude): [T0 + 1],
        })
        flat = flatten(fetch_all(capitals, client=client))
        assert "NY" not in set(flat["state"])
        assert len(flat) == 2

    def test_empty(self):
        flat = flatten({})
        assert flat.empty
        assert list(flat.columns) == FLAT_COLUMNS


class TestFailedLocationEndToEnd:

    def test_failed_location_absent_others_ordered(self, capitals, scripted_client, unavailable):
        """A network failure drops only that capital; the rest stay sorted by first pass."""
        ca, ny, tx = capitals
        client = scripted_client({
            (ca.latitude, ca.longitude): [T0 + 300, T0 + 400],
            (ny.latitude, ny.longitude): unavailable,
            (tx.latitude, tx.longitude): [T0 + 100, T0 + 200, T0 + 500],
        })
        table = reshape(flatten(fetch_all(capitals, client=client)))

        assert list(table["state"]) == ["TX", "CA"]
        assert table.loc[0, "first"] == pd.Timestamp(T0 + 100, unit="s", tz="UTC")
        assert table.loc[1, "second"] == pd.Timestamp(T0 + 400, unit="s", tz="UTC")
