"""Configuration management for Smart Recipe Generator.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Recipe Model: used for recipe generation and personalized suggestions (JSON output)
        # Default: gemini-2.5-pro (better at following the response schema)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-pro")
        # Image Detection Model: separate model for the ingredient photo (plain text output)
        # Default: gemini-2.5-flash (fast, cost-effective for images)
        self.IMAGE_DETECTION_MODEL: str = os.getenv("IMAGE_DETECTION_MODEL", "gemini-2.5-flash")
        # Number of recipes requested per generation or suggestion cycle. Default: 3
        self.RECIPE_COUNT: int = int(os.getenv("RECIPE_COUNT", "3"))
        # Temperature: unset means the model default is used
        temperature = os.getenv("TEMPERATURE")
        self.TEMPERATURE: Optional[float] = float(temperature) if temperature else None
        # Maximum image size (in MB) that can be sent for ingredient identification. Default: 5 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
        # Image Compression: Enable/disable image compression before upload
        self.COMPRESS_IMG: bool = _env_flag("COMPRESS_IMG", "true")
        # Image Compression Threshold: Only compress if image size is above this (in KB)
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))
        # Directory holding saved favorites, ratings and the wishlist
        self.STORAGE_DIR: str = os.getenv("STORAGE_DIR", ".smart_recipes")

    def validate(self) -> None:
        """Validate required configuration.

        Only needed before talking to Gemini; the preference store and the
        prompt builder work without an API key.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if self.RECIPE_COUNT < 1:
            raise ValueError(f"RECIPE_COUNT must be at least 1, got: {self.RECIPE_COUNT}")
        if self.TEMPERATURE is not None and not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_IMAGE_SIZE_MB < 1:
            raise ValueError(
                f"MAX_IMAGE_SIZE_MB must be at least 1, got: {self.MAX_IMAGE_SIZE_MB}"
            )
        if not self.STORAGE_DIR:
            raise ValueError("STORAGE_DIR must not be empty")


# Create module-level config instance (validated lazily by the Gemini backend)
config = Config()
