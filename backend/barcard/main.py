"""
FastAPI application for the creature card front-end.

Run with:
    uvicorn barcard.main:create_app --factory
"""
import functools
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from barcard.config import Settings, get_settings
from barcard.orchestrator.controller import GenerationController
from barcard.providers.images.base import ImageProvider
from barcard.providers.images.huggingface_image_client import HuggingFaceImageClient
from barcard.providers.llm.base import CreatureInfoProvider
from barcard.providers.llm.gemini_llm_client import GeminiCreatureClient
from barcard.routers import cards
from barcard.scanner.session import ScannerSession
from barcard.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    info_client: Optional[CreatureInfoProvider] = None,
    image_client: Optional[ImageProvider] = None,
    scanner_factory=None,
) -> FastAPI:
    """
    Build the application.

    Settings are validated here, so a missing API key stops the process before
    it starts serving (ConfigurationError).

    Args:
        settings: Preloaded settings (default: read from environment)
        info_client: Creature info provider override
        image_client: Image provider override
        scanner_factory: ScannerSession factory override
    """
    settings = settings or get_settings()
    setup_logger(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # API clients are created once and shared for the whole process
        info = info_client or GeminiCreatureClient(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_S,
        )
        image = image_client or HuggingFaceImageClient(
            api_key=settings.HUGGING_FACE_API_KEY,
            model=settings.HF_IMAGE_MODEL,
            base_url=settings.HF_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_S,
        )
        scanner = scanner_factory or functools.partial(
            ScannerSession,
            camera_index=settings.CAMERA_INDEX,
            interval=settings.SCAN_INTERVAL_S,
        )

        controller = GenerationController(
            info_client=info,
            image_client=image,
            debounce_ms=settings.DEBOUNCE_MS,
            pipeline=settings.PIPELINE,
            scanner_factory=scanner,
        )
        app.state.settings = settings
        app.state.controller = controller
        logger.info(f"Barcard started (env={settings.ENV}, pipeline={settings.PIPELINE})")

        try:
            yield
        finally:
            await controller.aclose()
            await info.aclose()
            await image.aclose()
            logger.info("Barcard stopped")

    app = FastAPI(title="Barcard", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(cards.router, prefix="/api/v1", tags=["cards"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app, factory=True, host="0.0.0.0", port=8000)
