"""Generative model boundary.

The recipe generator only needs two capabilities from a model:

1. identify_ingredients(): photo in, free text out (comma-separated names)
2. complete(): prompt in, text out, optionally constrained to a JSON schema

RecipeModel describes that contract so a different backend, a mock or a
local fixture can be dropped in. GeminiRecipeModel implements it on top of
the google-genai SDK.
"""

import asyncio
from typing import Optional, Protocol

from google import genai
from google.genai import errors, types

from smart_recipes.prompts.prompts import IDENTIFY_INGREDIENTS_PROMPT
from smart_recipes.utils.config import Config, config as default_config
from smart_recipes.utils.logger import logger


class ModelCallError(Exception):
    """Raised when a model call fails.

    Some failures still carry the raw text the model produced (for example a
    JSON payload the SDK could not validate); it is kept in ``response_text``
    so the interpreter can attempt recovery.
    """

    def __init__(self, message: str, response_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.response_text = response_text


class RecipeModel(Protocol):
    """Capability interface for the external generative model."""

    async def identify_ingredients(self, image: bytes, mime_type: str) -> str:
        """Return the ingredients visible in the image as free text."""
        ...

    async def complete(self, prompt: str, schema: Optional[dict] = None) -> str:
        """Return the model's text answer, JSON-shaped when a schema is given."""
        ...


def _error_response_text(error: Exception) -> Optional[str]:
    """Extract any response text attached to an SDK error."""
    response = getattr(error, "response", None)
    text = getattr(response, "text", None)
    if isinstance(text, str) and text.strip():
        return text
    return None


class GeminiRecipeModel:
    """RecipeModel backed by Google Gemini.

    The SDK client is synchronous, so calls run in a worker thread via
    asyncio.to_thread to keep the event loop responsive.
    """

    def __init__(self, settings: Optional[Config] = None, client: Optional[genai.Client] = None) -> None:
        """Initialize the Gemini backend.

        Args:
            settings: Configuration to use. Defaults to the module-level config.
            client: Pre-built google-genai client (mainly for tests).

        Raises:
            ValueError: If configuration is invalid (e.g. GEMINI_API_KEY missing).
        """
        self.settings = settings or default_config
        if client is None:
            self.settings.validate()
            client = genai.Client(api_key=self.settings.GEMINI_API_KEY)
        self.client = client

    async def _generate(self, model: str, contents, generation_config=None) -> str:
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=model,
                contents=contents,
                config=generation_config,
            )
        except errors.APIError as e:
            logger.warning(f"Gemini API call failed ({model}): {e}")
            raise ModelCallError(f"Gemini API error: {e}", response_text=_error_response_text(e)) from e
        except Exception as e:
            logger.warning(f"Gemini call failed ({model}): {e}")
            raise ModelCallError(f"Gemini call failed: {e}", response_text=_error_response_text(e)) from e

        text = response.text
        if not text:
            raise ModelCallError(f"Gemini returned an empty response ({model})")
        return text

    async def identify_ingredients(self, image: bytes, mime_type: str) -> str:
        """Ask the vision model for the ingredients in a photo (plain text answer)."""
        logger.debug(f"Identifying ingredients with {self.settings.IMAGE_DETECTION_MODEL} ({len(image)} bytes, {mime_type})")
        return await self._generate(
            self.settings.IMAGE_DETECTION_MODEL,
            [
                IDENTIFY_INGREDIENTS_PROMPT,
                types.Part.from_bytes(data=image, mime_type=mime_type),
            ],
        )

    async def complete(self, prompt: str, schema: Optional[dict] = None) -> str:
        """Send a text prompt, constraining the answer to JSON when a schema is given."""
        generation_config = None
        if schema is not None or self.settings.TEMPERATURE is not None:
            generation_config = types.GenerateContentConfig(
                temperature=self.settings.TEMPERATURE,
                response_mime_type="application/json" if schema is not None else None,
                response_schema=schema,
            )

        logger.debug(f"Calling {self.settings.GEMINI_MODEL} (prompt: {len(prompt)} chars, schema: {schema is not None})")
        return await self._generate(self.settings.GEMINI_MODEL, prompt, generation_config)
