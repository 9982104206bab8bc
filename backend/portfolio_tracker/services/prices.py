from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterable

from loguru import logger

from portfolio_tracker.models.records import Quote
from portfolio_tracker.services.price_client import PriceSource
from portfolio_tracker.services.rate_limiter import RequestThrottle

class PriceResolver:
    """
    Resolves one quote per distinct symbol, one lookup at a time.

    Lookups run in first-seen order with `delay_s` between them. A lookup that
    fails or exceeds `timeout_s` yields `Quote.unavailable()` and the batch
    carries on, so the result always covers every requested symbol.
    """
    def __init__(
        self,
        source: PriceSource,
        delay_s: float = 0.1,
        timeout_s: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.source = source
        self.delay_s = delay_s
        self.timeout_s = timeout_s
        self._sleep = sleep

    async def _lookup(self, symbol: str) -> Quote:
        try:
            return await asyncio.wait_for(self.source.fetch_quote(symbol), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"Price lookup for {symbol} timed out after {self.timeout_s}s")
        except Exception as e:
            logger.warning(f"Price lookup for {symbol} failed: {e}")
        return Quote.unavailable()

    async def resolve(self, symbols: Iterable[str]) -> Dict[str, Quote]:
        ordered = list(dict.fromkeys(symbols))
        throttle = RequestThrottle(self.delay_s, sleep=self._sleep)

        quotes: Dict[str, Quote] = {}
        for sym in ordered:
            async with throttle:
                quotes[sym] = await self._lookup(sym)

        missing = sum(1 for q in quotes.values() if not q.available)
        logger.info(f"Resolved {len(quotes) - missing}/{len(quotes)} quotes")
        return quotes
