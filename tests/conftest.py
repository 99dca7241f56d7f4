"""Shared fixtures: a recording model, sample images and a wired-up app."""
from __future__ import annotations

import io
import os

os.environ.setdefault("ONCOSCAN_LOG_DIR", "")
os.environ.setdefault("ONCOSCAN_STORE", "memory")

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from oncoscan.config import Settings
from oncoscan.main import create_app
from oncoscan.services.inference import InferenceEngine
from oncoscan.services.pipeline import PredictionService
from oncoscan.services.store import InMemoryPredictionStore


class RecordingModel:
    """Callable stand-in for the classifier that records how often it ran."""

    def __init__(self, output=(0.9,)) -> None:
        self.output = output
        self.calls = 0
        self.shapes = []

    def __call__(self, tensor):
        self.calls += 1
        self.shapes.append(tuple(tensor.shape))
        return np.asarray([self.output], dtype=np.float64)


class ExplodingModel:
    def __call__(self, tensor):
        raise RuntimeError("forward pass failed")


def encode_image(image: Image.Image, image_format: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image(Image.new("RGB", (320, 240), color=(180, 40, 60)))


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image(Image.new("RGB", (64, 64), color="white"), "PNG")


@pytest.fixture
def recorder() -> RecordingModel:
    return RecordingModel()


@pytest.fixture
def store() -> InMemoryPredictionStore:
    return InMemoryPredictionStore()


@pytest.fixture
def service(recorder, store) -> PredictionService:
    return PredictionService(engine=InferenceEngine(recorder), store=store)


@pytest.fixture
def settings() -> Settings:
    return Settings(ONCOSCAN_STORE="memory", ONCOSCAN_LOCALE="en", ONCOSCAN_LOG_DIR="")


@pytest.fixture
def client(settings, recorder, store):
    app = create_app(settings, model=recorder, store=store)
    assert app.state.prediction_service.store is store
    with TestClient(app) as test_client:
        yield test_client
