"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from fusion.api.routes import bindings
from fusion.config import get_settings
from fusion.utilities import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await bindings.close_resolver()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Fusion Data Bindings", lifespan=lifespan)
    app.include_router(bindings.router, prefix="/api")
    return app
