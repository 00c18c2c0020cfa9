"""
FastAPI application factory for the economy simulation API.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from econsim import __version__
from econsim.api.routers import market, metrics, nations, regions, simulation
from econsim.api.sessions import SessionManager

# Load .env: project root first, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/econsim/api/app.py → project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=os.environ.get("ECONSIM_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title="Regional Economy Simulation API",
        description="REST API for advancing and inspecting the regional economy simulation",
        version=__version__,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=os.environ.get("ECONSIM_CORS_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.session_manager = SessionManager()

    application.include_router(simulation.router, prefix="/api/simulation", tags=["simulation"])
    application.include_router(regions.router, prefix="/api/regions", tags=["regions"])
    application.include_router(nations.router, prefix="/api/nations", tags=["nations"])
    application.include_router(market.router, prefix="/api/market", tags=["market"])
    application.include_router(metrics.router, prefix="/api/metrics", tags=["metrics"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return application


app = create_app()
