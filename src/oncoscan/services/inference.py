"""Model loading and the single forward pass behind each prediction."""
from __future__ import annotations

import contextlib
import hashlib
import threading
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urlparse

import numpy as np
import requests
import torch

from ..config import Settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

ModelFn = Callable[[torch.Tensor], Any]


class InferenceEngine:
    """Wrap a loaded model and turn its output into a 0-100 confidence score."""

    def __init__(self, model: ModelFn, *, serialize: bool = False) -> None:
        self.model = model
        self._lock: threading.Lock | None = threading.Lock() if serialize else None

    def forward(self, tensor: torch.Tensor) -> np.ndarray:
        guard = self._lock if self._lock is not None else contextlib.nullcontext()
        with guard, torch.no_grad():
            output = self.model(tensor)
        return _to_numpy(output)

    def infer(self, tensor: torch.Tensor) -> float:
        scores = self.forward(tensor)
        if scores.size == 0:
            raise ValueError("Model returned an empty output")
        return float(np.max(scores)) * 100


def _to_numpy(output: Any) -> np.ndarray:
    if isinstance(output, torch.Tensor):
        output = output.detach().cpu().numpy()
    return np.asarray(output, dtype=np.float64)


def resolve_model_path(settings: Settings) -> Path:
    """Return a local file for the configured model, downloading it if needed."""
    source = settings.model_source.strip()
    if not source:
        raise ValueError("No model location configured (set MODEL_URL or LOCAL_MODEL_URL)")
    if urlparse(source).scheme in {"http", "https"}:
        return download_model(source, Path(settings.model_cache_dir))
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    return path


def download_model(url: str, cache_dir: Path, *, timeout: float = 60.0) -> Path:
    suffix = Path(urlparse(url).path).suffix or ".pt"
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
    destination = cache_dir / f"model-{digest}{suffix}"
    if destination.exists():
        logger.info("Using cached model {}", destination)
        return destination
    cache_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading model from {}", url)
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    partial = destination.with_suffix(destination.suffix + ".part")
    partial.write_bytes(response.content)
    partial.replace(destination)
    return destination


def load_model(settings: Settings) -> torch.jit.ScriptModule:
    """Load the TorchScript classifier once for the lifetime of the process."""
    source = settings.model_source
    logger.info("Trying to load model from: {}", source)
    try:
        path = resolve_model_path(settings)
        model = torch.jit.load(str(path), map_location="cpu")
    except Exception:
        logger.exception("Error loading model from {}", source)
        raise
    model.eval()
    return model


__all__ = ["InferenceEngine", "load_model", "resolve_model_path", "download_model"]
