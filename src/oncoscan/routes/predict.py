"""Endpoints for submitting images and reading prediction history."""
from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..schemas import FailResponse, HistoryResponse, PredictionResponse
from ..services.pipeline import PredictionService

router = APIRouter()


def get_prediction_service(request: Request) -> PredictionService:
    return request.app.state.prediction_service


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PredictionResponse,
    responses={400: {"model": FailResponse}, 413: {"model": FailResponse}},
)
async def submit_prediction(
    image: UploadFile | None = File(default=None),
    service: PredictionService = Depends(get_prediction_service),
) -> PredictionResponse:
    """Classify an uploaded image and store the outcome."""
    image_bytes = await image.read() if image is not None else b""
    outcome = await run_in_threadpool(service.predict, image_bytes)
    return PredictionResponse(message=outcome.message, data=outcome.record)


@router.get("/histories", status_code=status.HTTP_200_OK, response_model=HistoryResponse)
async def list_predictions(
    service: PredictionService = Depends(get_prediction_service),
) -> HistoryResponse:
    """Return every stored prediction; order is whatever the store yields."""
    views = await run_in_threadpool(service.list_history)
    return HistoryResponse(data=views)


@router.get(
    "/histories/{prediction_id}",
    status_code=status.HTTP_200_OK,
    response_model=HistoryResponse,
    responses={404: {"model": FailResponse}},
)
async def get_prediction(
    prediction_id: str,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await run_in_threadpool(service.get_history, prediction_id)
    if view is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=FailResponse(message=service.messages.prediction_not_found).model_dump(),
        )
    return HistoryResponse(data=view)
