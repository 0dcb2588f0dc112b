"""
Main FastAPI application for the manifest bot.
"""
from fastapi import FastAPI
import logging

from . import __version__
from .config import get_settings
from .routers.health import router as health_router
from .routers.webhook import router as webhook_router


settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Routers (Twilio is configured with the bare path, so no API prefix)
app.include_router(health_router)
app.include_router(webhook_router)


@app.get("/", tags=["root"])
async def root() -> dict:
    """Simple root endpoint."""
    return {"name": app.title, "version": app.version}


def run() -> None:
    import uvicorn

    logger.info("Starting server on port %d", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
