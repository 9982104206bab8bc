# backend/portfolio_tracker/main.py
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from portfolio_tracker.core.settings import settings
from portfolio_tracker.api.routes_portfolio import router as portfolio_router

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

app = FastAPI(title="Portfolio Tracker API", version="1.0.0")

# CORS only when a browser client is configured
if settings.cors_origin_list():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])

@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.get("/health")
def health():
    logger.info("Health check ok")
    return {"status": "ok", "env": settings.env}

@app.get("/config/check")
def config_check():
    return {
        "price_provider": settings.price_provider,
        "finnhub_key_present": bool(settings.finnhub_api_key),
        "holdings_path": settings.holdings_path,
    }
