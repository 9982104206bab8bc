# backend/portfolio_tracker/core/settings.py
import os
from pathlib import Path
from typing import List, Set
from pydantic import BaseModel, ConfigDict, field_validator
from dotenv import load_dotenv

from portfolio_tracker.services.presentation import DisplayTier, SelectionPolicy

# Resolve backend directory and load .env explicitly
BACKEND_DIR = Path(__file__).resolve().parents[2]  # .../backend
load_dotenv(BACKEND_DIR / ".env")  # do NOT set override=True; shell exports still win

def _split_csv(value: str) -> List[str]:
    return [t.strip() for t in value.split(",") if t.strip()]

class Settings(BaseModel):
    # env-derived defaults go through the validators too, so bad config fails at import
    model_config = ConfigDict(validate_default=True)

    env: str = os.getenv("APP_ENV", "dev")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # empty: no CORS middleware; the widget is not a browser client
    cors_origins: str = os.getenv("CORS_ORIGINS", "")

    holdings_path: str = os.getenv("HOLDINGS_PATH", "portfolio.csv")
    snapshot_path: str = os.getenv("SNAPSHOT_PATH", "portfolio_widget_data.json")

    price_provider: str = os.getenv("PRICE_PROVIDER", "yahoo").lower()
    yahoo_chart_url: str = os.getenv("YAHOO_CHART_URL", "https://query1.finance.yahoo.com/v8/finance/chart")
    finnhub_api_key: str = os.getenv("FINNHUB_API_KEY", "")
    finnhub_quote_url: str = os.getenv("FINNHUB_QUOTE_URL", "https://finnhub.io/api/v1/quote")

    # spacing between consecutive lookups; the quote providers rate limit per IP
    price_request_delay_s: float = float(os.getenv("PRICE_REQUEST_DELAY_S", "0.1"))
    http_timeout_s: float = float(os.getenv("HTTP_TIMEOUT_S", "5"))
    http_max_retries: int = int(os.getenv("HTTP_MAX_RETRIES", "2"))

    display_top_n: int = int(os.getenv("DISPLAY_TOP_N", "3"))
    totals_only_tiers: str = os.getenv("TOTALS_ONLY_TIERS", "small")

    @field_validator("totals_only_tiers")
    @classmethod
    def _known_tiers(cls, v: str) -> str:
        known = {t.value for t in DisplayTier}
        unknown = [t for t in _split_csv(v) if t not in known]
        if unknown:
            raise ValueError(f"unknown display tier(s) {unknown}; expected some of {sorted(known)}")
        return v

    def totals_only_tier_names(self) -> Set[str]:
        return set(_split_csv(self.totals_only_tiers))

    def cors_origin_list(self) -> List[str]:
        return _split_csv(self.cors_origins)

    def selection_policy(self) -> SelectionPolicy:
        return SelectionPolicy.from_names(self.display_top_n, self.totals_only_tier_names())

settings = Settings()
