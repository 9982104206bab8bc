from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

# External JSON keeps the widget's camelCase keys; python side stays snake_case.
_RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)

class Holding(BaseModel):
    symbol: str = Field(min_length=1)
    shares: float
    cost_basis: float
    date_added: str = ""

    model_config = _RECORD_CONFIG

class Quote(BaseModel):
    price: float = 0.0
    previous_close: float = 0.0
    # False only for the {0, 0} placeholder; a real quote may legitimately be 0
    available: bool = True

    model_config = _RECORD_CONFIG

    @classmethod
    def unavailable(cls) -> "Quote":
        return cls(price=0.0, previous_close=0.0, available=False)

class EnrichedHolding(Holding):
    current_price: float
    previous_close: float
    price_available: bool = True
    current_value: float
    cost_total: float
    gain_loss: float
    gain_loss_percent: float

class PortfolioSummary(BaseModel):
    holdings: List[EnrichedHolding] = Field(default_factory=list)
    total_value: float = 0.0
    total_cost: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    unavailable_symbols: List[str] = Field(default_factory=list)

    model_config = _RECORD_CONFIG

class PortfolioView(BaseModel):
    summary: PortfolioSummary
    tier: str
    display_holdings: List[EnrichedHolding] = Field(default_factory=list)
    updated_at: datetime

    model_config = _RECORD_CONFIG
