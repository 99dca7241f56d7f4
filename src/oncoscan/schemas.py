"""Pydantic models for prediction records, history views and response envelopes."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field

from .services.policy import DiagnosisLabel


class PredictionRecord(BaseModel):
    id: str = Field(..., description="Generated UUID4 identifier")
    result: DiagnosisLabel
    suggestion: str
    confidenceScore: float = Field(..., description="max(model output) * 100")
    createdAt: str = Field(..., description="UTC ISO-8601 creation time")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class HistoryEntry(BaseModel):
    result: DiagnosisLabel
    createdAt: str
    suggestion: str
    id: str


class HistoryView(BaseModel):
    id: str
    history: HistoryEntry

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "HistoryView":
        return cls(
            id=record["id"],
            history=HistoryEntry(
                result=record["result"],
                createdAt=record["createdAt"],
                suggestion=record["suggestion"],
                id=record["id"],
            ),
        )


class PredictionResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
    data: PredictionRecord


class HistoryResponse(BaseModel):
    status: Literal["success"] = "success"
    data: Union[HistoryView, List[HistoryView]]


class FailResponse(BaseModel):
    status: Literal["fail"] = "fail"
    message: str


__all__ = [
    "PredictionRecord",
    "HistoryEntry",
    "HistoryView",
    "PredictionResponse",
    "HistoryResponse",
    "FailResponse",
]
