"""Confidence-to-diagnosis policy."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..messages import MessageCatalog, get_messages

CANCER_THRESHOLD: float = 1.0


class DiagnosisLabel(str, Enum):
    CANCER = "Cancer"
    NON_CANCER = "Non-cancer"


@dataclass(frozen=True)
class ClassificationResult:
    label: DiagnosisLabel
    suggestion: str
    confidence_score: float


def classify(
    confidence_score: float,
    messages: MessageCatalog | None = None,
    threshold: float = CANCER_THRESHOLD,
) -> ClassificationResult:
    """Scores strictly below ``threshold`` are non-cancer; everything else is cancer."""
    catalog = messages or get_messages()
    if confidence_score < threshold:
        return ClassificationResult(
            label=DiagnosisLabel.NON_CANCER,
            suggestion=catalog.non_cancer_suggestion,
            confidence_score=confidence_score,
        )
    return ClassificationResult(
        label=DiagnosisLabel.CANCER,
        suggestion=catalog.cancer_suggestion,
        confidence_score=confidence_score,
    )
