"""
Dashboard - API.

============================================================
RESPONSIBILITY
============================================================
Provides a REST API over one decision log viewer session
and the news feed.

- Thin consumer: every endpoint delegates to the viewer
- Load failures are reported in the response body
- The viewer is closed on application shutdown
============================================================
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from decision_log import DecisionLogConfig, DecisionLogViewer, HttpDecisionSource
from news_ingestion import JinseLivesCollector
from dashboard.routers import decisions, news

logger = logging.getLogger(__name__)


# ============================================================
# FastAPI Application
# ============================================================

def create_app(
    viewer: DecisionLogViewer,
    news_collector: Optional[JinseLivesCollector] = None,
    initial_trader_id: Optional[str] = None,
) -> FastAPI:
    """
    Build the dashboard application.

    Args:
        viewer: Decision log viewer backing the /decisions routes
        news_collector: News collector backing /news (503 when omitted)
        initial_trader_id: Subject selected at startup

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if initial_trader_id:
            await viewer.set_subject(initial_trader_id)
        yield
        await viewer.close()

    app = FastAPI(
        title="Decision Log Dashboard API",
        description="Browsable log of automated trading decision cycles.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.viewer = viewer
    app.state.news_collector = news_collector
    app.state.started_at = datetime.now(timezone.utc)

    app.include_router(decisions.router)
    app.include_router(news.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "service": "Decision Log Dashboard API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        uptime = (datetime.now(timezone.utc) - app.state.started_at).total_seconds()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": uptime,
            "viewer": viewer.get_stats(),
            "news": news_collector.get_health_status() if news_collector else None,
        }

    return app


def build_default_app() -> FastAPI:
    """
    Application factory for uvicorn.

    Reads DecisionLogConfig from the environment and selects
    DECISION_LOG_TRADER_ID at startup when set.
    """
    import os

    config = DecisionLogConfig.from_env()
    viewer = DecisionLogViewer(HttpDecisionSource(config), config=config)
    logger.info(f"Dashboard decision source: {config.api_base_url}")

    return create_app(
        viewer,
        news_collector=JinseLivesCollector(),
        initial_trader_id=os.getenv("DECISION_LOG_TRADER_ID") or None,
    )
