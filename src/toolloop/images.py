"""
Multimodal input handling for the initial human message.

URL images are downloaded and inlined as base64 data URIs so every
provider receives the same payload shape.
"""

from __future__ import annotations

import asyncio
import base64
import functools
import logging
from typing import List, Optional, Sequence

import requests

from .types import ContentPart, ImageInput, ImagePart, Message, Role, TextPart

logger = logging.getLogger(__name__)


class ImageFetchError(RuntimeError):
    """Raised when a URL-referenced image cannot be loaded."""


def _download(url: str, timeout: float) -> requests.Response:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response


async def fetch_image_as_data_uri(url: str, timeout: float = 30.0) -> str:
    """
    Fetch an image over HTTP and return it as a ``data:`` URI.

    The blocking request runs in the default executor. The MIME type comes
    from the response ``Content-Type`` header and defaults to ``image/png``.

    Raises:
        ImageFetchError: On network errors or non-2xx responses.
    """
    logger.info("Fetching image from URL: %s", url)
    loop = asyncio.get_running_loop()
    try:
        response = await loop.run_in_executor(None, functools.partial(_download, url, timeout))
    except requests.exceptions.RequestException as exc:
        raise ImageFetchError(f"Failed to load image from URL {url}: {exc}") from exc

    content_type = response.headers.get("Content-Type") or "image/png"
    content_type = content_type.split(";", 1)[0].strip() or "image/png"
    encoded = base64.b64encode(response.content).decode("utf-8")
    return f"data:{content_type};base64,{encoded}"


async def image_to_part(image: ImageInput, timeout: float = 30.0) -> ImagePart:
    if image.type == "base64":
        if not image.data:
            raise ValueError("Base64 image input requires 'data'")
        return ImagePart(url=f"data:{image.mime_type};base64,{image.data}")
    if image.type == "url":
        if not image.url:
            raise ValueError("URL image input requires 'url'")
        return ImagePart(url=await fetch_image_as_data_uri(image.url, timeout=timeout))
    raise ValueError(f"Unsupported image input type: {image.type!r}")


async def build_human_message(
    text: str,
    images: Optional[Sequence[ImageInput]] = None,
    fetch_timeout: float = 30.0,
) -> Message:
    """
    Create the opening human message, multimodal when images are supplied.

    Each image is followed by an ``Image description: ...`` text part when the
    input carries a description.
    """
    if not images:
        return Message(role=Role.HUMAN, content=text)

    logger.info("Creating multimodal message with %d images", len(images))
    parts: List[ContentPart] = [TextPart(text=text)]
    for image in images:
        parts.append(await image_to_part(image, timeout=fetch_timeout))
        if image.description:
            parts.append(TextPart(text=f"Image description: {image.description}"))
    return Message(role=Role.HUMAN, content=parts)


__all__ = ["ImageFetchError", "fetch_image_as_data_uri", "image_to_part", "build_human_message"]
