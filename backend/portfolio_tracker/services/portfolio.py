from __future__ import annotations

from typing import List, Mapping

from portfolio_tracker.models.records import EnrichedHolding, Holding, PortfolioSummary, Quote

def _percent(gain: float, base: float) -> float:
    # NaN base fails the comparison and reports 0, same as a non-positive base
    return (gain / base) * 100 if base > 0 else 0.0

def enrich_holding(holding: Holding, quote: Quote) -> EnrichedHolding:
    current_value = holding.shares * quote.price
    cost_total = holding.shares * holding.cost_basis
    gain_loss = current_value - cost_total
    return EnrichedHolding(
        symbol=holding.symbol,
        shares=holding.shares,
        cost_basis=holding.cost_basis,
        date_added=holding.date_added,
        current_price=quote.price,
        previous_close=quote.previous_close,
        price_available=quote.available,
        current_value=current_value,
        cost_total=cost_total,
        gain_loss=gain_loss,
        gain_loss_percent=_percent(gain_loss, cost_total),
    )

def calculate_portfolio(holdings: List[Holding], quotes: Mapping[str, Quote]) -> PortfolioSummary:
    """Value every holding against its quote and total the portfolio. No I/O."""
    total_value = 0.0
    total_cost = 0.0
    enriched: List[EnrichedHolding] = []
    unavailable: List[str] = []

    for h in holdings:
        quote = quotes.get(h.symbol)
        if quote is None:
            quote = Quote.unavailable()
        if not quote.available and h.symbol not in unavailable:
            unavailable.append(h.symbol)
        row = enrich_holding(h, quote)
        total_value += row.current_value
        total_cost += row.cost_total
        enriched.append(row)

    change = total_value - total_cost
    return PortfolioSummary(
        holdings=enriched,
        total_value=total_value,
        total_cost=total_cost,
        change=change,
        change_percent=_percent(change, total_cost),
        unavailable_symbols=unavailable,
    )
