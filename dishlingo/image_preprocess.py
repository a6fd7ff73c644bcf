"""Backend-side downscale of menu photos before they are sent to the model.

Only base64 data URIs are touched. Remote URLs and anything that fails to
decode are passed through as-is and left for the model to deal with.
"""

import base64
import binascii
import logging
import re
import time
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from dishlingo.config import BACKEND_MAX_SIDE_PX, USE_BACKEND_RESIZE

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


def split_data_uri(image: str) -> Optional[Tuple[str, bytes]]:
    """Return (mime type, raw bytes) for a base64 image data URI, else None."""
    match = _DATA_URI.match(image or "")
    if not match:
        return None
    try:
        return match.group("mime"), base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        return None


def resize_image_bytes(data: bytes, max_side: int = BACKEND_MAX_SIDE_PX) -> Optional[bytes]:
    """
    Shrink so that the longer side == max_side, keep aspect ratio, force JPEG.
    Returns None when the image is already small enough.
    """
    with Image.open(BytesIO(data)) as img:
        if max(img.size) <= max_side:
            return None
        img.thumbnail((max_side, max_side))
        out = BytesIO()
        img.convert("RGB").save(out, format="JPEG", quality=90)  # PNG -> JPEG
        return out.getvalue()


def preprocess_image(image: str, max_side: int = BACKEND_MAX_SIDE_PX) -> str:
    decoded = split_data_uri(image)
    if decoded is None:
        return image

    mime, data = decoded
    try:
        resized = resize_image_bytes(data, max_side=max_side)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning("Could not decode %s image for resize: %s", mime, e)
        return image

    if resized is None:
        return image
    logger.info("Resized %s image: %.1fkb -> %.1fkb", mime, len(data) / 1024, len(resized) / 1024)
    return "data:image/jpeg;base64," + base64.b64encode(resized).decode("utf-8")


def preprocess_images(images: Sequence[str]) -> List[str]:
    if not USE_BACKEND_RESIZE:
        logger.info("Backend resize disabled via USE_BACKEND_RESIZE")
        return list(images)

    start = time.time()
    processed = [preprocess_image(image) for image in images]
    logger.info(
        "[PIPELINE] Preprocessed %s images in %sms",
        len(processed),
        round((time.time() - start) * 1000, 2),
    )
    return processed
