"""
Application settings for Barcard.
Secrets and tunables are read from the environment (and an optional .env file).
"""
import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from barcard.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Process-wide configuration, validated once at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Required secrets (one per external API)
    GEMINI_API_KEY: str = Field(min_length=1)
    HUGGING_FACE_API_KEY: str = Field(min_length=1)

    # Generative text
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # Generative image
    HF_IMAGE_MODEL: str = "stabilityai/stable-diffusion-3.5-medium"
    HF_BASE_URL: str = "https://router.huggingface.co/hf-inference/models"

    HTTP_TIMEOUT_S: float = 120.0

    # Controller
    DEBOUNCE_MS: int = 500
    PIPELINE: Literal["creature", "barcode"] = "creature"

    # Scanner
    CAMERA_INDEX: int = 0
    SCAN_INTERVAL_S: float = 0.1

    # Server
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    FRONTEND_ORIGIN: str = "http://localhost:5173"


@lru_cache
def get_settings() -> Settings:
    """
    Load and validate settings.

    Returns:
        Cached Settings instance

    Raises:
        ConfigurationError: If a required secret is missing or a value is invalid
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        logger.error(f"Invalid configuration: {missing}")
        raise ConfigurationError(
            f"Missing or invalid configuration: {', '.join(missing)}"
        ) from e
