"""
FastAPI application factory.
"""
import logging

from fastapi import FastAPI

from aquachem.api.dependencies import get_settings
from aquachem.api.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="AquaChem Forecasting Service",
        description="Water chemistry trend forecasts and retrospective accuracy reports",
        version="0.1.0",
    )
    app.include_router(router)
    return app
