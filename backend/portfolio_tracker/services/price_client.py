from __future__ import annotations

import asyncio
import random
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import httpx
from loguru import logger

from portfolio_tracker.core.settings import Settings
from portfolio_tracker.models.records import Quote

# Yahoo rejects requests without a browser-like agent
DEFAULT_HEADERS = {
    "User-Agent": ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
                   "AppleWebKit/537.36 (KHTML, like Gecko) "
                   "Chrome/120.0.0.0 Safari/537.36"),
    "Accept": "application/json, text/plain, */*",
}

class PriceLookupError(Exception):
    """The provider answered, but not with a usable quote."""

class PriceSource(Protocol):
    async def fetch_quote(self, symbol: str) -> Quote: ...

    async def aclose(self) -> None: ...

def _as_price(value: Any, field: str, symbol: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PriceLookupError(f"{symbol}: {field} missing or not numeric ({value!r})")
    return float(value)

class _HttpQuoteSource:
    """Shared httpx plumbing: timeout, retry on 429/5xx with jittered backoff."""

    def __init__(self, timeout_s: float, max_retries: int = 2,
                 client: Optional[httpx.AsyncClient] = None):
        self.timeout_s = timeout_s
        self.max_retries = max(1, max_retries)
        self.client = client or httpx.AsyncClient(timeout=timeout_s, headers=DEFAULT_HEADERS)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        delay = 0.5
        for attempt in range(self.max_retries):
            try:
                resp = await self.client.get(url, params=params)
                status = resp.status_code
                # retry only on 429 and 5xx
                if status == 429 or (500 <= status < 600):
                    raise httpx.HTTPStatusError(f"{status}", request=resp.request, response=resp)
                resp.raise_for_status()
                try:
                    return resp.json()
                except ValueError as e:
                    raise PriceLookupError(f"non-JSON response from {url}") from e

            except httpx.HTTPError as e:
                if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500 \
                        and e.response.status_code != 429:
                    # non-retryable client error (unknown symbol, bad token)
                    raise
                if attempt == self.max_retries - 1:
                    logger.error(f"HTTP error after retries: {e}")
                    raise
                sleep_s = delay + random.random() * 0.3
                logger.warning(f"HTTP error ({e}); retrying in {sleep_s:.2f}s...")
                await asyncio.sleep(sleep_s)
                delay = min(delay * 2, 8.0)

class YahooChartSource(_HttpQuoteSource):
    def __init__(self, base_url: str, timeout_s: float, max_retries: int = 2,
                 client: Optional[httpx.AsyncClient] = None):
        super().__init__(timeout_s, max_retries, client)
        self.base_url = base_url.rstrip("/")

    async def fetch_quote(self, symbol: str) -> Quote:
        data = await self._get_json(f"{self.base_url}/{quote(symbol, safe='')}")
        # Shape: {"chart": {"result": [{"meta": {"regularMarketPrice": .., "previousClose": ..}}], "error": null}}
        try:
            meta = data["chart"]["result"][0]["meta"]
        except (KeyError, IndexError, TypeError) as e:
            raise PriceLookupError(f"{symbol}: no chart meta in response") from e
        if not isinstance(meta, dict):
            raise PriceLookupError(f"{symbol}: no chart meta in response")

        prev = meta.get("previousClose")
        if prev is None:
            prev = meta.get("chartPreviousClose")
        return Quote(
            price=_as_price(meta.get("regularMarketPrice"), "regularMarketPrice", symbol),
            previous_close=_as_price(prev, "previousClose", symbol),
        )

class FinnhubQuoteSource(_HttpQuoteSource):
    def __init__(self, api_key: str, quote_url: str, timeout_s: float, max_retries: int = 2,
                 client: Optional[httpx.AsyncClient] = None):
        super().__init__(timeout_s, max_retries, client)
        self.api_key = api_key
        self.quote_url = quote_url

    async def fetch_quote(self, symbol: str) -> Quote:
        if not self.api_key:
            raise RuntimeError("FINNHUB_API_KEY missing")
        data = await self._get_json(self.quote_url, {"symbol": symbol, "token": self.api_key})
        # Shape: {"c": current, "pc": previous close, "d": .., "dp": .., "t": epoch}
        if not isinstance(data, dict):
            raise PriceLookupError(f"{symbol}: unexpected quote payload")
        price = _as_price(data.get("c"), "c", symbol)
        prev = _as_price(data.get("pc"), "pc", symbol)
        if price == 0 and prev == 0:
            # Finnhub's answer for symbols it does not know
            raise PriceLookupError(f"{symbol}: unknown to Finnhub")
        return Quote(price=price, previous_close=prev)

def build_price_source(cfg: Settings) -> PriceSource:
    provider = cfg.price_provider
    if provider == "yahoo":
        return YahooChartSource(cfg.yahoo_chart_url, cfg.http_timeout_s, cfg.http_max_retries)
    if provider == "finnhub":
        return FinnhubQuoteSource(cfg.finnhub_api_key, cfg.finnhub_quote_url,
                                  cfg.http_timeout_s, cfg.http_max_retries)
    raise RuntimeError(f"Unknown PRICE_PROVIDER {provider!r}")
