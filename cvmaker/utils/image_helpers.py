"""Photo handling for the PDF export."""

import base64
import binascii
import re
from io import BytesIO
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

# Fixed photo box: 35 x 45 mm at 300 dpi
PHOTO_BOX_PX: Tuple[int, int] = (413, 531)

_DATA_URI = re.compile(r"^data:(?P<mime>image/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<data>.*)$", re.DOTALL)


class PhotoError(ValueError):
    """Raised when an embedded photo cannot be decoded."""


def is_inline_image(photo: Optional[str]) -> bool:
    """Whether the photo is embedded data rather than a remote reference."""
    if not photo:
        return False
    return photo.startswith("data:") or not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", photo)


def decode_photo(photo: str) -> bytes:
    """
    Decode an embedded photo (data URI or bare base64).

    Args:
        photo: Data URI or base64 string

    Returns:
        bytes: Raw image bytes

    Raises:
        PhotoError: If the string is not valid base64 image data
    """
    match = _DATA_URI.match(photo.strip())
    payload = match.group("data") if match else photo.strip()
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PhotoError(f"Photo is not valid base64 data: {e}") from e


def fit_photo(photo: str, box: Tuple[int, int] = PHOTO_BOX_PX) -> str:
    """
    Decode, verify and shrink a photo into a fixed box.

    Args:
        photo: Data URI or base64 string
        box: Maximum (width, height) in pixels

    Returns:
        str: PNG data URI of the fitted image

    Raises:
        PhotoError: If the data is not a readable raster image
    """
    raw = decode_photo(photo)
    try:
        with Image.open(BytesIO(raw)) as candidate:
            candidate.verify()
        # verify() leaves the image unusable, so reopen for the actual work
        with Image.open(BytesIO(raw)) as image:
            image = image.convert("RGBA") if image.mode in ("P", "LA", "RGBA") else image.convert("RGB")
            image.thumbnail(box, Image.Resampling.LANCZOS)
            buffer = BytesIO()
            image.save(buffer, format="PNG")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise PhotoError(f"Photo is not a readable image: {e}") from e

    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
