import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from social_listener.core.config import settings
from social_listener.core.logging import configure_logging
from social_listener.api.v1.endpoints.themes import router as themes_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level)
    if settings.themes_payload_path.exists():
        logger.info(f"Serving themes from {settings.themes_payload_path}")
    else:
        logger.warning(f"Themes payload {settings.themes_payload_path} missing - /api/themes will be empty")
    logger.info("Available endpoints: GET /api/themes, GET /api/themes/{id}/tweets")

    yield

    # Shutdown
    logger.info("Themes API stopped")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(themes_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}


def run() -> None:
    """Serve the themes API on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
