"""Receipt image checks and preparation.

Format is detected from magic bytes (filetype), not from the upload's declared
content type. Large photos are downscaled with Pillow before being sent to the
vision model; receipts stay legible well below phone-camera resolution.
"""

from io import BytesIO
from typing import Optional

import filetype
from PIL import Image

from pantry_service.utils.config import config
from pantry_service.utils.logger import logger

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
DEFAULT_MIME_TYPE = "image/jpeg"
MAX_WIDTH = 1600


def detect_mime_type(image_bytes: bytes) -> Optional[str]:
    """Supported mime type sniffed from magic bytes, or None if not JPEG/PNG/WEBP."""
    kind = filetype.guess(image_bytes)
    if kind is None or kind.mime not in SUPPORTED_MIME_TYPES:
        return None
    return kind.mime


def validate_image_size(image_bytes: bytes) -> bool:
    """True if the image fits within MAX_IMAGE_SIZE_MB."""
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


def compress_image(image_bytes: bytes, max_width: int = MAX_WIDTH) -> bytes:
    """Downscale and re-encode a receipt photo as JPEG.

    Images at or below COMPRESS_IMG_THRESHOLD_KB are returned untouched, and so is
    the original whenever Pillow cannot decode or re-encode the image.

    Args:
        image_bytes: Raw image bytes.
        max_width: Maximum width in pixels. Default: 1600.

    Returns:
        Compressed JPEG bytes, or the original bytes.
    """
    size_kb = len(image_bytes) / 1024
    if size_kb <= config.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(f"Image size {size_kb:.1f}KB below compression threshold, skipping compression")
        return image_bytes

    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (OSError, Image.DecompressionBombError) as e:
        logger.warning(f"Image compression skipped, cannot decode image: {e}")
        return image_bytes

    if img.mode != "RGB":
        img = img.convert("RGB")
    if img.width > max_width:
        ratio = max_width / img.width
        img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

    output = BytesIO()
    try:
        img.save(output, format="JPEG", quality=85, optimize=True)
    except OSError as e:
        logger.warning(f"Image compression failed, sending original: {e}")
        return image_bytes

    compressed = output.getvalue()
    if len(compressed) >= len(image_bytes):
        return image_bytes

    logger.debug(f"Image compressed: {size_kb:.1f}KB -> {len(compressed) / 1024:.1f}KB")
    return compressed


def prepare_image(image_bytes: bytes) -> tuple[bytes, str]:
    """Bytes and mime type to send to the vision model.

    Unknown formats are passed through as image/jpeg; the upload layer has already
    restricted what gets here.
    """
    mime_type = detect_mime_type(image_bytes) or DEFAULT_MIME_TYPE
    if config.COMPRESS_IMG:
        compressed = compress_image(image_bytes)
        if compressed is not image_bytes:
            return compressed, "image/jpeg"
    return image_bytes, mime_type
