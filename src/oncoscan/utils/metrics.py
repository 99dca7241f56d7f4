"""Evaluation metrics for the OncoScan classifier."""
from __future__ import annotations

from typing import Dict, Iterable, Sequence

from sklearn.metrics import accuracy_score, confusion_matrix, f1_score


def classification_report(
    y_true: Iterable[str],
    y_pred: Iterable[str],
    *,
    positive: str = "Cancer",
    negative: str = "Non-cancer",
) -> Dict[str, float]:
    """Summarise binary predictions; sensitivity is the recall of ``positive``."""
    y_true = list(y_true)
    y_pred = list(y_pred)
    if not y_true:
        raise ValueError("At least one labelled sample is required")
    labels: Sequence[str] = [negative, positive]
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=labels).ravel()
    return {
        "samples": float(len(y_true)),
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "macro_f1": float(f1_score(y_true, y_pred, labels=labels, average="macro", zero_division=0)),
        "sensitivity": _ratio(tp, tp + fn),
        "specificity": _ratio(tn, tn + fp),
    }


def _ratio(numerator: int, denominator: int) -> float:
    return float(numerator) / float(denominator) if denominator else 0.0
