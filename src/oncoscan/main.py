"""FastAPI entrypoint for the OncoScan prediction service."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import __version__
from .config import Settings, get_settings
from .errors import ClientError, StoreError
from .messages import MessageCatalog, get_messages
from .routes import predict
from .services.inference import InferenceEngine, ModelFn, load_model
from .services.pipeline import PredictionService
from .services.store import PredictionStore, create_store
from .services.validation import MAX_IMAGE_BYTES
from .utils.logger import get_logger

logger = get_logger(__name__)

PAYLOAD_TOO_LARGE_MESSAGE = "Payload content length greater than maximum allowed: 1000000"


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "fail", "message": message})


class PayloadLimitMiddleware:
    """Reject request bodies larger than ``max_bytes`` before routing.

    A declared ``Content-Length`` is checked up front. Bodies without one
    (chunked uploads) are counted as they are received, and the read fails
    with a 413 once the limit is crossed.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = MAX_IMAGE_BYTES) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            await _fail(413, PAYLOAD_TOO_LARGE_MESSAGE)(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # HTTPException passes through FastAPI's body parsing untouched.
                    raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)


def build_service(
    settings: Settings,
    model: ModelFn,
    store: PredictionStore,
    messages: MessageCatalog,
) -> PredictionService:
    return PredictionService(
        engine=InferenceEngine(model, serialize=settings.serialize_inference),
        store=store,
        messages=messages,
        threshold=settings.cancer_threshold,
    )


def create_app(
    settings: Settings | None = None,
    *,
    model: ModelFn | None = None,
    store: PredictionStore | None = None,
) -> FastAPI:
    """Build the API; the model is loaded at startup unless one is injected."""
    cfg = settings or get_settings()
    messages = get_messages(cfg.locale)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.prediction_service is None:
            loaded = await run_in_threadpool(load_model, cfg)
            app.state.prediction_service = build_service(
                cfg, loaded, store if store is not None else create_store(cfg), messages
            )
        logger.info("OncoScan API ready environment={} store={}", cfg.environment, cfg.store_backend)
        yield

    app = FastAPI(title="OncoScan Prediction API", version=__version__, lifespan=lifespan)
    app.state.settings = cfg
    app.state.prediction_service = (
        build_service(cfg, model, store if store is not None else create_store(cfg), messages)
        if model is not None
        else None
    )

    app.add_middleware(PayloadLimitMiddleware, max_bytes=MAX_IMAGE_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ClientError)
    async def handle_client_error(request: Request, exc: ClientError) -> JSONResponse:
        return _fail(exc.status_code, exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        return _fail(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(str(error.get("msg", "")) for error in exc.errors())
        return _fail(400, details or "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _fail(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
        return _fail(getattr(exc, "status_code", 500), str(exc) or exc.__class__.__name__)

    app.include_router(predict.router, prefix="/predict", tags=["predict"])

    @app.get("/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        """Simple readiness endpoint for orchestration and CI checks."""
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    cfg = get_settings()
    logger.info("Server start at: http://{}:{}", cfg.host, cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_level="info")
