"""Error types shared by the prediction pipeline and the HTTP layer."""
from __future__ import annotations


class ClientError(Exception):
    """Failure caused by the request; surfaced verbatim with its status code."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InputError(ClientError):
    """The submitted image was rejected or could not be run through the model."""


class StoreError(Exception):
    """The prediction store could not complete a read or write."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImageDecodeError(ValueError):
    """Raised by the preprocessor when bytes are not a usable JPEG image."""


__all__ = ["ClientError", "InputError", "StoreError", "ImageDecodeError"]
