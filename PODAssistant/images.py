"""
images.py

Loading and validation of uploaded POD images.

Handles:
- File path sanitization against path traversal
- Size enforcement
- Format detection and decoding checks via Pillow
- Conversion to the data URL form carried on chat messages
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from PODAssistant import config

logger = logging.getLogger(__name__)


class PODImageError(Exception):
    """Raised when an uploaded image cannot be accepted."""

    pass


class PODImage(BaseModel):
    """An uploaded image payload, validated and ready to send to a model."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw encoded image bytes")
    mime_type: str = Field(..., description="MIME type detected by Pillow")
    source: str = Field(default="upload", description="File name or origin label")

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"

    @property
    def size_mb(self) -> float:
        return len(self.data) / (1024 * 1024)


def _check_size(size_bytes: int, label: str) -> None:
    if size_bytes == 0:
        raise PODImageError(f"Image is empty: {label}")

    size_mb = size_bytes / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        raise PODImageError(
            f"Image too large: {size_mb:.1f}MB exceeds "
            f"limit of {config.MAX_IMAGE_SIZE_MB}MB"
        )


def image_from_bytes(data: bytes, source: str = "upload") -> PODImage:
    """
    Validate raw image bytes and wrap them in a ``PODImage``.

    The bytes must decode as one of ``config.ALLOWED_IMAGE_FORMATS``.

    Raises:
        PODImageError: If the payload is empty, too large or not an image.
    """
    _check_size(len(data), source)

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise PODImageError(f"Not a readable image: {source}") from e
    except Exception as e:
        # Includes Pillow's DecompressionBombError for oversized dimensions.
        raise PODImageError(f"Rejected image {source}: {e}") from e

    mime_type = config.ALLOWED_IMAGE_FORMATS.get(image_format or "")
    if mime_type is None:
        raise PODImageError(
            f"Unsupported image format '{image_format}'. "
            f"Allowed: {sorted(config.ALLOWED_IMAGE_FORMATS)}"
        )

    logger.info("Accepted %s image from %s (%d bytes)", image_format, source, len(data))
    return PODImage(data=data, mime_type=mime_type, source=source)


def image_from_data_url(data_url: str, source: str = "upload") -> PODImage:
    """Decode a ``data:<mime>;base64,<payload>`` URL into a ``PODImage``."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise PODImageError("Expected a base64 data URL")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PODImageError("Malformed base64 image payload") from e

    return image_from_bytes(data, source=source)


def load_pod_image(file_path: Union[str, Path]) -> PODImage:
    """
    Load a POD image from disk.

    Args:
        file_path: Path to the image file.

    Returns:
        Validated ``PODImage``.

    Raises:
        PODImageError: If the path is unsafe, missing or not an image.
    """
    raw = str(file_path)
    if ".." in Path(raw).parts:
        raise PODImageError(f"Path traversal detected in: {raw}")

    path = Path(file_path).expanduser()
    if not path.exists():
        raise PODImageError(f"File not found: {path}")
    if not path.is_file():
        raise PODImageError(f"Not a regular file: {path}")

    _check_size(path.stat().st_size, path.name)
    return image_from_bytes(path.read_bytes(), source=path.name)
