import io
import json
from datetime import datetime, timezone

import pandas as pd
import pytest

from portfolio_tracker.models.records import Holding, PortfolioView, Quote
from portfolio_tracker.services.csv_export import to_csv_bytes
from portfolio_tracker.services.portfolio import calculate_portfolio
from portfolio_tracker.services.snapshot import read_snapshot, write_snapshot


@pytest.fixture
def summary():
    holdings = [
        Holding(symbol="AAPL", shares=10, cost_basis=150, date_added="2023-01-01"),
        Holding(symbol="MSFT", shares=2, cost_basis=300),
    ]
    return calculate_portfolio(holdings, {"AAPL": Quote(price=200, previous_close=195)})


def test_csv_has_holdings_then_total_row(summary):
    df = pd.read_csv(io.BytesIO(to_csv_bytes(summary)))

    assert list(df["symbol"]) == ["AAPL", "MSFT", "TOTAL"]
    assert list(df.columns[:4]) == ["symbol", "shares", "costBasis", "dateAdded"]
    total = df.iloc[-1]
    assert total["currentValue"] == pytest.approx(2000.0)
    assert total["costTotal"] == pytest.approx(2100.0)
    assert total["gainLoss"] == pytest.approx(-100.0)


def test_csv_marks_unavailable_price(summary):
    df = pd.read_csv(io.BytesIO(to_csv_bytes(summary)))
    assert str(df.iloc[1]["priceAvailable"]) == "False"


def test_snapshot_round_trips_as_json(tmp_path, summary):
    view = PortfolioView(
        summary=summary,
        tier="medium",
        display_holdings=summary.holdings[:1],
        updated_at=datetime(2026, 1, 2, tzinfo=timezone.utc),
    )
    path = write_snapshot(tmp_path / "widget" / "portfolio_widget_data.json", view)

    data = read_snapshot(path)
    assert data["summary"]["totalValue"] == pytest.approx(2000.0)
    assert data["displayHoldings"][0]["symbol"] == "AAPL"
    assert data["tier"] == "medium"
    assert not (tmp_path / "widget" / "portfolio_widget_data.json.tmp").exists()


def test_snapshot_writes_nan_as_null(tmp_path):
    bad = calculate_portfolio([Holding(symbol="X", shares=float("nan"), cost_basis=1)], {"X": Quote(price=1, previous_close=1)})
    view = PortfolioView(summary=bad, tier="small", updated_at=datetime(2026, 1, 2, tzinfo=timezone.utc))
    path = write_snapshot(tmp_path / "snap.json", view)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["totalValue"] is None


def test_read_missing_snapshot_returns_none(tmp_path):
    assert read_snapshot(tmp_path / "none.json") is None
