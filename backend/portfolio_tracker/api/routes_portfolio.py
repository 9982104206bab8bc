from __future__ import annotations

import asyncio
import io
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response, StreamingResponse
from loguru import logger

from portfolio_tracker.core.settings import settings
from portfolio_tracker.models.records import PortfolioView
from portfolio_tracker.services.csv_export import to_csv_bytes
from portfolio_tracker.services.holdings import parse_holdings
from portfolio_tracker.services.pipeline import run_pipeline, value_portfolio
from portfolio_tracker.services.presentation import DisplayTier
from portfolio_tracker.services.price_client import PriceSource, build_price_source
from portfolio_tracker.services.snapshot import read_snapshot, write_snapshot

router = APIRouter()  # mounted under /portfolio

# -------------------- helpers --------------------
async def get_price_source() -> AsyncIterator[PriceSource]:
    """One client per request; nothing is shared between refreshes."""
    source = build_price_source(settings)
    try:
        yield source
    finally:
        await source.aclose()

def _pipeline_kwargs() -> Dict[str, Any]:
    return {
        "delay_s": settings.price_request_delay_s,
        "timeout_s": settings.http_timeout_s,
        "policy": settings.selection_policy(),
    }

def _view_response(view: PortfolioView) -> Response:
    # model_dump_json turns NaN into null; starlette's JSONResponse would refuse it
    return Response(content=view.model_dump_json(by_alias=True), media_type="application/json")

# -------------------- valuation --------------------
@router.get("")
async def get_portfolio(
    tier: DisplayTier = Query(DisplayTier.MEDIUM),
    source: PriceSource = Depends(get_price_source),
) -> Response:
    view = await run_pipeline(settings.holdings_path, source, tier, **_pipeline_kwargs())
    return _view_response(view)

@router.post("/value-file")
async def value_file(
    file: UploadFile = File(...),
    tier: DisplayTier = Form(DisplayTier.MEDIUM),
    source: PriceSource = Depends(get_price_source),
) -> Response:
    try:
        content = (await file.read()).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read holdings: {e}")

    holdings = parse_holdings(content)
    logger.info(f"Parsed {len(holdings)} holdings from upload {file.filename}")
    view = await value_portfolio(holdings, source, tier, **_pipeline_kwargs())
    return _view_response(view)

# -------------------- exports --------------------
@router.get("/export.csv")
async def export_csv(source: PriceSource = Depends(get_price_source)):
    view = await run_pipeline(settings.holdings_path, source, DisplayTier.MEDIUM, **_pipeline_kwargs())
    return StreamingResponse(
        io.BytesIO(to_csv_bytes(view.summary)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="portfolio.csv"'},
    )

@router.post("/refresh")
async def refresh(
    tier: DisplayTier = Query(DisplayTier.MEDIUM),
    source: PriceSource = Depends(get_price_source),
) -> Response:
    view = await run_pipeline(settings.holdings_path, source, tier, **_pipeline_kwargs())
    await asyncio.to_thread(write_snapshot, settings.snapshot_path, view)
    return _view_response(view)

@router.get("/snapshot")
def snapshot():
    data = read_snapshot(settings.snapshot_path)
    if data is None:
        raise HTTPException(status_code=404, detail="No snapshot yet; POST /portfolio/refresh first")
    return data
