"""Evaluate the deployed classifier on a labelled image folder."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterator, Tuple

from oncoscan.config import get_settings
from oncoscan.messages import get_messages
from oncoscan.services.inference import InferenceEngine, load_model
from oncoscan.services.policy import DiagnosisLabel, classify
from oncoscan.services.preprocess import transform_image_bytes
from oncoscan.services.validation import validate_image
from oncoscan.utils.logger import get_logger
from oncoscan.utils.metrics import classification_report

logger = get_logger("evaluate")

LABEL_DIRS = {
    "cancer": DiagnosisLabel.CANCER,
    "non_cancer": DiagnosisLabel.NON_CANCER,
}


def iter_samples(data_dir: Path) -> Iterator[Tuple[Path, DiagnosisLabel]]:
    for folder, label in LABEL_DIRS.items():
        for path in sorted((data_dir / folder).glob("*.jp*g")):
            yield path, label


def main() -> None:
    parser = argparse.ArgumentParser(description="Score the classifier on data/eval/{cancer,non_cancer}")
    parser.add_argument("--data-dir", type=Path, default=Path("data/eval"))
    parser.add_argument("--output", type=Path, default=Path("reports/metrics.json"))
    args = parser.parse_args()

    settings = get_settings()
    messages = get_messages(settings.locale)
    engine = InferenceEngine(load_model(settings))

    y_true, y_pred = [], []
    for path, expected in iter_samples(args.data_dir):
        try:
            image_bytes = validate_image(path.read_bytes(), messages)
            score = engine.infer(transform_image_bytes(image_bytes))
        except Exception as exc:
            logger.warning("Skipping {}: {}", path, exc)
            continue
        y_true.append(expected.value)
        y_pred.append(classify(score, messages, settings.cancer_threshold).label.value)

    metrics = classification_report(y_true, y_pred)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(metrics, indent=2))
    logger.info("Evaluation metrics: {}", metrics)


if __name__ == "__main__":
    main()
