"""
Image Capture & Normalization

Turns a user selected file into a self-contained ``data:image/jpeg`` URL:
decode -> draw onto an opaque surface at natural size -> JPEG -> base64.
Transparent pixels end up black, the same as a browser canvas exported with
``toDataURL('image/jpeg')``.
"""

import io
import base64
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from photogenius.core.exceptions import ImageDecodeError
from photogenius.core.logging import get_logger

logger = get_logger(__name__)

DATA_URL_PREFIX = "data:"
IMAGE_DATA_URL_PREFIX = "data:image"
CAPTURE_MIME_TYPE = "image/jpeg"
DEFAULT_JPEG_QUALITY = 92

ImageSource = Union[str, Path, bytes, BinaryIO]


def to_data_url(data: bytes, mime_type: str) -> str:
    """Embed raw bytes as a base64 data URL."""
    encoded = base64.b64encode(data).decode("utf-8")
    return f"{DATA_URL_PREFIX}{mime_type};base64,{encoded}"


def is_image_data_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith(IMAGE_DATA_URL_PREFIX)


def _read_source(source: ImageSource) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def _decode(raw: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(details={"reason": str(exc)}) from exc
    return ImageOps.exif_transpose(image)


def _flatten(image: Image.Image) -> Image.Image:
    """Draw the bitmap onto an opaque black surface of the same size."""
    rgba = image.convert("RGBA")
    surface = Image.new("RGB", rgba.size, (0, 0, 0))
    surface.paste(rgba, mask=rgba.getchannel("A"))
    return surface


def capture_image(source: ImageSource, quality: int = DEFAULT_JPEG_QUALITY) -> str:
    """
    Decode an image file and re-encode it as a JPEG data URL.

    Args:
        source: Path, raw bytes or a binary file object
        quality: JPEG quality (1-95)

    Returns:
        ``data:image/jpeg;base64,...`` string

    Raises:
        ImageDecodeError: when the input cannot be decoded as an image
    """
    raw = _read_source(source)
    image = _decode(raw)
    surface = _flatten(image)

    buffer = io.BytesIO()
    surface.save(buffer, format="JPEG", quality=quality)
    encoded = buffer.getvalue()

    logger.debug(
        "image_captured",
        width=surface.width,
        height=surface.height,
        input_size=len(raw),
        output_size=len(encoded)
    )
    return to_data_url(encoded, CAPTURE_MIME_TYPE)
