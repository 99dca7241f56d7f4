"""Payload checks that run before any decoding or inference."""
from __future__ import annotations

from ..errors import InputError
from ..messages import MessageCatalog, get_messages

MAX_IMAGE_BYTES = 1024 * 1024


def validate_image(image_bytes: bytes, messages: MessageCatalog | None = None) -> bytes:
    """Return ``image_bytes`` unchanged, or raise ``InputError`` when over 1 MiB."""
    if len(image_bytes) > MAX_IMAGE_BYTES:
        catalog = messages or get_messages()
        raise InputError(catalog.image_too_large, status_code=400)
    return image_bytes
