"""Prediction pipeline and history read path."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..errors import InputError, StoreError
from ..messages import MessageCatalog, get_messages
from ..schemas import HistoryView, PredictionRecord
from ..utils.logger import get_logger
from .inference import InferenceEngine
from .policy import CANCER_THRESHOLD, ClassificationResult, classify
from .preprocess import transform_image_bytes
from .store import PredictionStore
from .validation import validate_image

logger = get_logger(__name__)


@dataclass(frozen=True)
class PredictionOutcome:
    message: str
    record: PredictionRecord


def utc_timestamp(now: datetime | None = None) -> str:
    moment = (now or datetime.now(tz=timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class PredictionService:
    engine: InferenceEngine
    store: PredictionStore
    messages: MessageCatalog = field(default_factory=get_messages)
    threshold: float = CANCER_THRESHOLD

    def run_classification(self, image_bytes: bytes) -> ClassificationResult:
        validate_image(image_bytes, self.messages)
        # Decode and inference failures share one opaque client message.
        try:
            tensor = transform_image_bytes(image_bytes)
            confidence_score = self.engine.infer(tensor)
        except Exception as exc:
            logger.warning("Prediction failed for {} byte payload: {!r}", len(image_bytes), exc)
            raise InputError(self.messages.prediction_failed, status_code=400) from exc
        return classify(confidence_score, self.messages, self.threshold)

    def predict(self, image_bytes: bytes) -> PredictionOutcome:
        result = self.run_classification(image_bytes)
        record = PredictionRecord(
            id=str(uuid.uuid4()),
            result=result.label,
            suggestion=result.suggestion,
            confidenceScore=result.confidence_score,
            createdAt=utc_timestamp(),
        )
        try:
            self.store.put(record.id, record.to_document())
        except StoreError:
            logger.exception("Failed to store prediction {}", record.id)
            raise
        logger.info(
            "Stored prediction id={} result={} score={:.4f}",
            record.id,
            record.result.value,
            record.confidenceScore,
        )
        message = (
            self.messages.predicted_successfully
            if result.confidence_score > 0
            else self.messages.use_correct_picture
        )
        return PredictionOutcome(message=message, record=record)

    def get_history(self, record_id: str) -> Optional[HistoryView]:
        record = self.store.get(record_id)
        if record is None:
            return None
        return HistoryView.from_record(record)

    def list_history(self) -> List[HistoryView]:
        return [HistoryView.from_record(record) for record in self.store.list()]


__all__ = ["PredictionOutcome", "PredictionService", "utc_timestamp"]
