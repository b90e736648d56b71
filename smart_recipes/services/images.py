"""Ingredient photo loading and preparation.

Turns whatever the user supplied as a photo into bytes the vision model can
take, plus their MIME type:

- load_image_bytes(): raw bytes, file path, data URL or http(s) URL (async)
- validate_image_format(): JPEG, PNG or WEBP, detected from magic bytes
- validate_image_size(): MAX_IMAGE_SIZE_MB limit
- compress_image(): Pillow re-encode for large photos
- prepare_image(): the full pipeline, raising ImageIdentificationFailed

Optional steps (compression, remote fetch) degrade gracefully: their failures
are logged and the pipeline continues or reports a missing image.
"""

import base64
from io import BytesIO
from pathlib import Path
from typing import Optional

import aiohttp
import filetype
from PIL import Image

from smart_recipes.utils.config import config
from smart_recipes.utils.errors import ImageIdentificationFailed
from smart_recipes.utils.logger import logger

SUPPORTED_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(coro, operation_name: str, log_level: str = "warning", default_return=None):
    """Await an optional operation, logging and returning default_return on failure.

    Args:
        coro: Awaitable coroutine to execute.
        operation_name: Description for logging (e.g., "Fetch image from URL").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def safe_execute_sync(func, operation_name: str, log_level: str = "warning", default_return=None):
    """Synchronous version of safe_execute_async."""
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def detect_mime_type(image_bytes: bytes) -> Optional[str]:
    """Return the MIME type for supported image bytes, None otherwise."""
    kind = filetype.guess(image_bytes)
    if kind is None:
        return None
    return SUPPORTED_MIME_TYPES.get(kind.extension)


def validate_image_format(image_bytes: bytes) -> bool:
    """Validate image format (JPEG, PNG or WEBP) from magic bytes, not extension."""
    if detect_mime_type(image_bytes) is None:
        logger.warning(f"Invalid image format: {filetype.guess(image_bytes)}. Only JPEG, PNG and WEBP supported.")
        return False
    return True


def validate_image_size(image_bytes: bytes) -> bool:
    """Validate image size against MAX_IMAGE_SIZE_MB."""
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


def compress_image(image_bytes: bytes, max_width: int = 1024) -> bytes:
    """Compress a photo for upload using Pillow.

    Re-encodes as JPEG (quality 85, optimized, progressive), flattening
    transparency onto white and shrinking images wider than max_width.
    Photos below COMPRESS_IMG_THRESHOLD_KB are returned untouched, as are
    photos Pillow cannot read.

    Args:
        image_bytes: Raw image bytes to compress
        max_width: Maximum image width in pixels

    Returns:
        Compressed JPEG bytes, or the original bytes
    """
    size_kb = len(image_bytes) / 1024
    if size_kb < config.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(
            f"Image size {size_kb:.1f}KB below compression threshold "
            f"({config.COMPRESS_IMG_THRESHOLD_KB}KB), skipping compression"
        )
        return image_bytes

    def _compress():
        img = Image.open(BytesIO(image_bytes))

        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[-1])
            img = rgb_img
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed_bytes = output.getvalue()

        logger.debug(
            f"Image compressed: {size_kb:.1f}KB → {len(compressed_bytes) / 1024:.1f}KB"
        )
        return compressed_bytes

    return safe_execute_sync(_compress, "Image compression", log_level="warning", default_return=image_bytes)


async def load_image_bytes(image_source: str | bytes | Path) -> Optional[bytes]:
    """Load image bytes from the supported source kinds.

    - bytes: returned as-is
    - data URLs (data:image/jpeg;base64,...): decoded from base64
    - http(s) URLs: fetched with aiohttp (10s timeout)
    - anything else: treated as a local file path

    Returns:
        Image bytes, or None on any failure (logged as warning).
    """
    if isinstance(image_source, bytes):
        return image_source

    if isinstance(image_source, Path):
        return safe_execute_sync(image_source.read_bytes, f"Read image file: {image_source}")

    if image_source.startswith("data:"):

        def _decode_data_url():
            _, encoded = image_source.split(",", 1)
            return base64.b64decode(encoded)

        return safe_execute_sync(_decode_data_url, "Decode data URL")

    if image_source.startswith(("http://", "https://")):

        async def _fetch_url():
            async with aiohttp.ClientSession() as session:
                async with session.get(image_source, timeout=aiohttp.ClientTimeout(total=10)) as response:
                    response.raise_for_status()
                    return await response.read()

        return await safe_execute_async(_fetch_url(), f"Fetch image from URL: {image_source}")

    return safe_execute_sync(Path(image_source).read_bytes, f"Read image file: {image_source}")


async def prepare_image(image_source: str | bytes | Path) -> tuple[bytes, str]:
    """Load → validate → compress a photo for the vision model.

    Returns:
        Tuple of (image_bytes, mime_type).

    Raises:
        ImageIdentificationFailed: If the image cannot be loaded, has an
            unsupported format, or is too large.
    """
    image_bytes = await load_image_bytes(image_source)
    if not image_bytes:
        raise ImageIdentificationFailed("Could not read the image. Please try another photo or enter ingredients manually.")

    if not validate_image_format(image_bytes):
        raise ImageIdentificationFailed("Unsupported image format. Please upload a JPEG, PNG or WEBP photo.")

    if not validate_image_size(image_bytes):
        raise ImageIdentificationFailed(f"Image too large. Maximum size is {config.MAX_IMAGE_SIZE_MB}MB.")

    if config.COMPRESS_IMG:
        image_bytes = compress_image(image_bytes)

    return image_bytes, detect_mime_type(image_bytes)
