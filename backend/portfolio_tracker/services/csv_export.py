from io import BytesIO
import pandas as pd

from portfolio_tracker.models.records import PortfolioSummary

def to_csv_bytes(summary: PortfolioSummary) -> bytes:
    rows = [h.model_dump(by_alias=True) for h in summary.holdings]
    rows.append({
        "symbol": "TOTAL",
        "currentValue": summary.total_value,
        "costTotal": summary.total_cost,
        "gainLoss": summary.change,
        "gainLossPercent": summary.change_percent,
    })
    df = pd.DataFrame(rows)
    # Column order: holding input fields, then valuation
    preferred = ["symbol", "shares", "costBasis", "dateAdded",
                 "currentPrice", "previousClose", "priceAvailable",
                 "currentValue", "costTotal", "gainLoss", "gainLossPercent"]
    cols = [c for c in preferred if c in df.columns] + [c for c in df.columns if c not in preferred]
    df = df[cols]
    bio = BytesIO()
    df.to_csv(bio, index=False)
    return bio.getvalue()
