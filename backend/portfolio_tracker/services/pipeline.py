from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, List, Union

from loguru import logger

from portfolio_tracker.models.records import Holding, PortfolioView
from portfolio_tracker.services.holdings import load_holdings
from portfolio_tracker.services.portfolio import calculate_portfolio
from portfolio_tracker.services.presentation import DisplayTier, SelectionPolicy, select_holdings
from portfolio_tracker.services.price_client import PriceSource
from portfolio_tracker.services.prices import PriceResolver

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

async def value_portfolio(
    holdings: List[Holding],
    source: PriceSource,
    tier: Union[DisplayTier, str] = DisplayTier.MEDIUM,
    *,
    delay_s: float = 0.1,
    timeout_s: float = 5.0,
    policy: SelectionPolicy = SelectionPolicy(),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], datetime] = _utcnow,
) -> PortfolioView:
    """
    Holdings -> quotes -> summary -> display selection, fresh on every call.

    An empty holdings list skips the price source entirely and yields an
    all-zero summary, which the widget shows as "no holdings".
    """
    tier = DisplayTier(tier)
    quotes = {}
    if holdings:
        resolver = PriceResolver(source, delay_s=delay_s, timeout_s=timeout_s, sleep=sleep)
        quotes = await resolver.resolve(h.symbol for h in holdings)

    summary = calculate_portfolio(holdings, quotes)
    shown = select_holdings(summary, tier, policy)
    logger.info(
        f"Valued {len(summary.holdings)} holdings for tier {tier.value}: "
        f"total={summary.total_value:.2f} change={summary.change:.2f}; showing {len(shown)}"
    )
    return PortfolioView(summary=summary, tier=tier.value, display_holdings=shown, updated_at=clock())

async def run_pipeline(
    holdings_path: Union[str, Path],
    source: PriceSource,
    tier: Union[DisplayTier, str] = DisplayTier.MEDIUM,
    **kwargs,
) -> PortfolioView:
    holdings = await asyncio.to_thread(load_holdings, holdings_path)
    return await value_portfolio(holdings, source, tier, **kwargs)
