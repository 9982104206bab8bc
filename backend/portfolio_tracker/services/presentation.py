from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List

from portfolio_tracker.models.records import EnrichedHolding, PortfolioSummary

class DisplayTier(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extraLarge"

@dataclass(frozen=True)
class SelectionPolicy:
    top_n: int = 3
    totals_only_tiers: FrozenSet[DisplayTier] = field(default_factory=lambda: frozenset({DisplayTier.SMALL}))

    @classmethod
    def from_names(cls, top_n: int, tier_names: Iterable[str]) -> "SelectionPolicy":
        return cls(top_n=max(0, top_n), totals_only_tiers=frozenset(DisplayTier(n) for n in tier_names))

def _rank_key(h: EnrichedHolding):
    # NaN values go last; sorted() is stable so equal values keep input order
    v = h.current_value
    return (1, 0.0) if math.isnan(v) else (0, -v)

def select_holdings(
    summary: PortfolioSummary,
    tier: DisplayTier,
    policy: SelectionPolicy = SelectionPolicy(),
) -> List[EnrichedHolding]:
    """Largest positions first, truncated to `policy.top_n`; totals-only tiers get nothing."""
    if tier in policy.totals_only_tiers or policy.top_n <= 0:
        return []
    return sorted(summary.holdings, key=_rank_key)[: policy.top_n]
