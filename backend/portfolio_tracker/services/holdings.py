# backend/portfolio_tracker/services/holdings.py
from __future__ import annotations

from pathlib import Path
from typing import List, Union

import pandas as pd
from loguru import logger

from portfolio_tracker.models.records import Holding

DELIMITER = ","
COLUMNS = ["symbol", "shares", "costBasis", "dateAdded"]

def _split_row(line: str) -> List[str]:
    # no quoting support: a field containing the delimiter shifts the columns
    parts = line.split(DELIMITER)
    parts += [""] * (len(COLUMNS) - len(parts))
    return parts[: len(COLUMNS)]

# leading numeric prefix: "10 shares" -> 10, "150$" -> 150, "$150" -> no match
_NUMBER_PREFIX = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity)"

def _coerce_numeric_cols(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    # text without a numeric prefix becomes NaN and is carried into the totals on purpose
    for c in cols:
        prefix = df[c].astype(str).str.extract(_NUMBER_PREFIX, expand=False)
        df[c] = pd.to_numeric(prefix, errors="coerce").astype(float)
    return df

def parse_holdings(text: str) -> List[Holding]:
    """
    Parse `symbol,shares,costBasis,dateAdded` text into holdings.

    The first non-blank line is the header and is skipped by position.
    Rows without a symbol are dropped; numeric fields are never validated.
    """
    lines = [line for line in (text or "").lstrip("\ufeff").splitlines() if line.strip()]
    if len(lines) <= 1:
        return []

    df = pd.DataFrame([_split_row(line) for line in lines[1:]], columns=COLUMNS, dtype=object)
    df["symbol"] = df["symbol"].str.strip()
    df["dateAdded"] = df["dateAdded"].str.strip()

    dropped = df["symbol"].eq("")
    if dropped.any():
        logger.debug(f"Dropped {int(dropped.sum())} holdings rows without a symbol")
    df = df.loc[~dropped].reset_index(drop=True)

    df = _coerce_numeric_cols(df, ["shares", "costBasis"])
    return [
        Holding(
            symbol=r["symbol"],
            shares=float(r["shares"]),
            cost_basis=float(r["costBasis"]),
            date_added=r["dateAdded"],
        )
        for r in df.to_dict(orient="records")
    ]

def load_holdings(path: Union[str, Path]) -> List[Holding]:
    """Read holdings from `path`; a missing or unreadable file means no holdings."""
    p = Path(path)
    try:
        content = p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Holdings source {p} unavailable: {e}")
        return []

    holdings = parse_holdings(content)
    logger.info(f"Loaded {len(holdings)} holdings from {p}")
    return holdings
