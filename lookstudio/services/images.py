"""
Image reference helpers.

An ImageRef is a string: either a data URL ("data:image/png;base64,...") or an
http(s) URL. Generated images always come back as data URLs.
"""

import base64
import binascii
import logging
from typing import Optional

import httpx

from ..core.errors import GenerationFailure

logger = logging.getLogger(__name__)

ImageRef = str

DEFAULT_MIME = "image/jpeg"

# Browser-like headers; some CDNs refuse bare clients (hotlink protection)
_FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


def decode_data_url(ref: str) -> tuple[bytes, str]:
    """Split a data URL (or raw base64) into (bytes, mime_type)."""
    mime = DEFAULT_MIME
    payload = ref
    if ref.startswith("data:"):
        header, _, payload = ref.partition(",")
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime = declared
    try:
        return base64.b64decode(payload, validate=False), mime
    except (binascii.Error, ValueError) as e:
        raise GenerationFailure(f"Invalid base64 image data: {e}") from e


def to_data_url(data: bytes, mime_type: Optional[str] = None) -> ImageRef:
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type or 'image/png'};base64,{encoded}"


async def load_image(
    ref: ImageRef,
    client: httpx.AsyncClient,
) -> tuple[bytes, str]:
    """Resolve an ImageRef to (bytes, mime_type), downloading http(s) references."""
    if not ref:
        raise GenerationFailure("Missing image reference")
    if not ref.startswith(("http://", "https://")):
        return decode_data_url(ref)

    try:
        response = await client.get(ref, headers=_FETCH_HEADERS, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Image download failed (%s): %s", ref, e)
        raise GenerationFailure(
            "Could not download image. This might be a network issue or the image URL is invalid."
        ) from e

    content_type = response.headers.get("content-type", "").split(";", 1)[0].strip()
    if not content_type.startswith("image/"):
        raise GenerationFailure(
            f"Invalid content type for {ref}. Expected an image, got '{content_type or 'unknown'}'"
        )
    return response.content, content_type
