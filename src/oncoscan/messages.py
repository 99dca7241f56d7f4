"""User-facing message catalogs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class MessageCatalog:
    image_too_large: str
    prediction_failed: str
    cancer_suggestion: str
    non_cancer_suggestion: str
    predicted_successfully: str = "Model is predicted successfully"
    use_correct_picture: str = "Please use the correct picture"
    prediction_not_found: str = "Prediction not found"


CATALOGS: Dict[str, MessageCatalog] = {
    "en": MessageCatalog(
        image_too_large="Image size is too large, maximum 1MB.",
        prediction_failed="An error occurred while performing prediction",
        cancer_suggestion="See a doctor immediately!",
        non_cancer_suggestion="No cancer indication detected.",
    ),
    "id": MessageCatalog(
        image_too_large="Ukuran gambar terlalu besar. Maksimum 1MB.",
        prediction_failed="Terjadi kesalahan dalam melakukan prediksi",
        cancer_suggestion="Segera periksa ke dokter!",
        non_cancer_suggestion="Penyakit kanker tidak terdeteksi.",
    ),
}


def get_messages(locale: str = "en") -> MessageCatalog:
    key = (locale or "en").strip().lower()
    try:
        return CATALOGS[key]
    except KeyError:
        raise ValueError(
            f"Unsupported locale {locale!r}; expected one of {sorted(CATALOGS)}"
        ) from None


__all__ = ["MessageCatalog", "CATALOGS", "get_messages"]
