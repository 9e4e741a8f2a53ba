"""Image checks and preparation before a vision call.

- validate_image_format(): JPEG/PNG only, detected from magic bytes
- validate_image_size(): MAX_IMAGE_SIZE_MB limit
- compress_image(): Pillow re-encode for smaller uploads
- prepare_image(): all of the above, raising ImageValidationError
"""

from io import BytesIO

import filetype
from PIL import Image

from src.utils.config import config
from src.utils.errors import ImageValidationError
from src.utils.logger import logger
from src.utils.safe_execute import safe_execute_sync


def image_mime_type(image_bytes: bytes) -> str:
    """MIME type from magic bytes ("image/jpeg" when unknown)."""
    kind = filetype.guess(image_bytes)
    if kind is not None and kind.extension == "png":
        return "image/png"
    return "image/jpeg"


def validate_image_format(image_bytes: bytes) -> bool:
    """Validate image format (JPEG or PNG only).

    Uses filetype to detect the actual format from magic bytes, not from a
    file extension.
    """
    kind = filetype.guess(image_bytes)
    if kind is None or kind.extension not in ("jpg", "jpeg", "png"):
        logger.warning(f"Invalid image format: {kind}. Only JPEG and PNG supported.")
        return False
    return True


def validate_image_size(image_bytes: bytes) -> bool:
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


def compress_image(image_bytes: bytes, max_width: int = 1024) -> bytes:
    """Compress image for API transmission using Pillow.

    JPEG quality=85 + optimize + progressive. Images wider than `max_width` are
    resized, RGBA/LA/P are flattened onto white. Images smaller than
    COMPRESS_IMG_THRESHOLD_KB are returned unchanged, as are images Pillow
    cannot decode.

    Args:
        image_bytes: Raw image bytes to compress
        max_width: Maximum image width in pixels

    Returns:
        Compressed image bytes, or the original bytes.
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
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode == "RGBA":
                rgb_img.paste(img, mask=img.split()[-1])
            else:
                rgb_img.paste(img)
            img = rgb_img

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed_bytes = output.getvalue()

        logger.debug(f"Image compressed: {size_kb:.1f}KB → {len(compressed_bytes) / 1024:.1f}KB")
        # Re-encoding an already optimized image can grow it
        return compressed_bytes if len(compressed_bytes) < len(image_bytes) else image_bytes

    return safe_execute_sync(_compress, "Image compression", log_level="warning", default_return=image_bytes)


def prepare_image(image_bytes: bytes) -> bytes:
    """Validate an uploaded image and optionally compress it.

    Raises:
        ImageValidationError: If the image is empty, not JPEG/PNG, or too large.
    """
    if not image_bytes:
        raise ImageValidationError("No image data provided")
    if not validate_image_format(image_bytes):
        raise ImageValidationError("Invalid image format. Only JPEG and PNG are supported.")
    if not validate_image_size(image_bytes):
        raise ImageValidationError(f"Image exceeds the {config.MAX_IMAGE_SIZE_MB}MB size limit")

    if config.COMPRESS_IMG:
        image_bytes = compress_image(image_bytes)
    return image_bytes
