"""Image decoding and tensor preparation for the classifier."""
from __future__ import annotations

import io

import torch
from PIL import Image, UnidentifiedImageError
from torchvision import transforms
from torchvision.transforms import InterpolationMode

from ..errors import ImageDecodeError

IMAGE_SIZE = 224

# Tensor-side nearest resize samples src = floor(dst * in / out), which is what
# the model saw during training. PIL's NEAREST samples pixel centres instead.
IMAGE_TRANSFORM = transforms.Compose(
    [
        transforms.PILToTensor(),
        transforms.Resize((IMAGE_SIZE, IMAGE_SIZE), interpolation=InterpolationMode.NEAREST),
        transforms.Lambda(lambda chw: chw.permute(1, 2, 0)),
    ]
)


# MPO is a JPEG stream with a multi-picture extension; the first frame is used.
JPEG_FORMATS = frozenset({"JPEG", "MPO"})


def decode_jpeg(image_bytes: bytes) -> Image.Image:
    """Decode JPEG bytes into a fully loaded 3-channel RGB image."""
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image_format = image.format
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ImageDecodeError(f"Could not decode image: {exc}") from exc
    if image_format not in JPEG_FORMATS:
        raise ImageDecodeError(f"Unsupported image format: {image_format}")
    if image.mode != "RGB":
        raise ImageDecodeError(f"Expected 3 RGB channels, got mode {image.mode}")
    return image


def image_to_tensor(image: Image.Image) -> torch.Tensor:
    """Resize an RGB image and return a ``[1, 224, 224, 3]`` float32 tensor."""
    if image.mode != "RGB":
        raise ImageDecodeError(f"Expected an RGB image, got mode {image.mode}")
    tensor = IMAGE_TRANSFORM(image).unsqueeze(0)
    return tensor.float()


def transform_image_bytes(image_bytes: bytes) -> torch.Tensor:
    """Convert raw JPEG bytes into the channels-last batch the model expects."""
    return image_to_tensor(decode_jpeg(image_bytes))
