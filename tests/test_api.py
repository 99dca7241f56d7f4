"""Integration tests for FastAPI endpoints."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import ExplodingModel, RecordingModel
from oncoscan.errors import StoreError
from oncoscan.main import PAYLOAD_TOO_LARGE_MESSAGE, create_app
from oncoscan.messages import get_messages
from oncoscan.services.store import InMemoryPredictionStore


def _upload(client, payload: bytes, filename: str = "scan.jpg"):
    return client.post("/predict", files={"image": (filename, payload, "image/jpeg")})


def test_healthcheck(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_submit_prediction_returns_created_record(client, jpeg_bytes, store):
    response = _upload(client, jpeg_bytes)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "Model is predicted successfully"
    data = body["data"]
    assert set(data) == {"id", "result", "suggestion", "confidenceScore", "createdAt"}
    assert data["result"] == "Cancer"
    assert data["suggestion"] == get_messages().cancer_suggestion
    assert data["confidenceScore"] == pytest.approx(90.0)
    assert store.get(data["id"]) == data


def test_low_confidence_prediction_is_non_cancer(settings, jpeg_bytes):
    app = create_app(settings, model=RecordingModel((0.005,)), store=InMemoryPredictionStore())
    with TestClient(app) as client:
        response = _upload(client, jpeg_bytes)
    assert response.status_code == 201
    assert response.json()["data"]["result"] == "Non-cancer"
    assert response.json()["data"]["confidenceScore"] == pytest.approx(0.5)


def test_oversized_body_is_rejected_before_the_model(client, recorder, store):
    response = _upload(client, bytes(2 * 1024 * 1024))
    assert response.status_code == 413
    assert response.json() == {"status": "fail", "message": PAYLOAD_TOO_LARGE_MESSAGE}
    assert recorder.calls == 0
    assert store.list() == []


def test_invalid_image_returns_generic_client_error(client, png_bytes, store):
    response = _upload(client, png_bytes, filename="scan.png")
    assert response.status_code == 400
    assert response.json() == {"status": "fail", "message": get_messages().prediction_failed}
    assert store.list() == []


def test_missing_image_field_is_a_client_error(client, recorder):
    response = client.post("/predict", data={"other": "value"})
    assert response.status_code == 400
    assert response.json()["status"] == "fail"
    assert recorder.calls == 0


def test_model_failure_returns_generic_client_error(settings, jpeg_bytes):
    app = create_app(settings, model=ExplodingModel(), store=InMemoryPredictionStore())
    with TestClient(app) as client:
        response = _upload(client, jpeg_bytes)
    assert response.status_code == 400
    assert response.json()["message"] == get_messages().prediction_failed


def test_store_failure_is_a_server_fault(settings, recorder, jpeg_bytes):
    class BrokenStore(InMemoryPredictionStore):
        def put(self, record_id, record):
            raise StoreError("prediction store unavailable")

    app = create_app(settings, model=recorder, store=BrokenStore())
    with TestClient(app) as client:
        response = _upload(client, jpeg_bytes)
    assert response.status_code == 500
    assert response.json() == {"status": "fail", "message": "prediction store unavailable"}


def test_history_listing_and_lookup(client, jpeg_bytes):
    created = [_upload(client, jpeg_bytes).json()["data"] for _ in range(2)]

    listing = client.get("/predict/histories")
    assert listing.status_code == 200
    assert listing.json()["status"] == "success"
    assert len(listing.json()["data"]) == 2

    record = created[0]
    single = client.get(f"/predict/histories/{record['id']}")
    assert single.status_code == 200
    assert single.json()["data"] == {
        "id": record["id"],
        "history": {
            "result": record["result"],
            "createdAt": record["createdAt"],
            "suggestion": record["suggestion"],
            "id": record["id"],
        },
    }


def test_empty_history_is_an_empty_list(client):
    response = client.get("/predict/histories")
    assert response.status_code == 200
    assert response.json() == {"status": "success", "data": []}


def test_unknown_prediction_is_not_found(client):
    response = client.get("/predict/histories/nonexistent-id")
    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Prediction not found"}


def test_unknown_route_uses_fail_envelope(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.json()["status"] == "fail"


def test_localized_error_messages(jpeg_bytes, png_bytes):
    from oncoscan.config import Settings

    settings = Settings(ONCOSCAN_STORE="memory", ONCOSCAN_LOCALE="id")
    app = create_app(settings, model=RecordingModel(), store=InMemoryPredictionStore())
    with TestClient(app) as client:
        failed = _upload(client, png_bytes)
        ok = _upload(client, jpeg_bytes)
    assert failed.json()["message"] == "Terjadi kesalahan dalam melakukan prediksi"
    assert ok.json()["data"]["suggestion"] == "Segera periksa ke dokter!"


def test_model_is_loaded_at_startup_when_not_injected(settings, monkeypatch, jpeg_bytes):
    from oncoscan import main

    loaded = RecordingModel((0.42,))
    monkeypatch.setattr(main, "load_model", lambda cfg: loaded)
    app = create_app(settings)
    assert app.state.prediction_service is None
    with TestClient(app) as client:
        response = _upload(client, jpeg_bytes)
    assert response.status_code == 201
    assert response.json()["data"]["confidenceScore"] == pytest.approx(42.0)
    assert loaded.calls == 1


def test_injected_empty_store_is_used(tmp_path, jpeg_bytes):
    from oncoscan.config import Settings

    settings = Settings(ONCOSCAN_STORE="filesystem", ONCOSCAN_STORE_DIR=str(tmp_path / "fs"))
    store = InMemoryPredictionStore()
    app = create_app(settings, model=RecordingModel(), store=store)
    assert app.state.prediction_service.store is store

    with TestClient(app) as client:
        response = _upload(client, jpeg_bytes)
    assert response.status_code == 201
    assert len(store) == 1
    assert not (tmp_path / "fs").exists()


def test_chunked_oversized_body_is_rejected_before_the_model(client, recorder, store):
    boundary = "oncoscan-boundary"
    body = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="image"; filename="scan.jpg"\r\n'
        "Content-Type: image/jpeg\r\n\r\n"
    ).encode() + bytes(2 * 1024 * 1024) + f"\r\n--{boundary}--\r\n".encode()

    def chunks():
        step = 64 * 1024
        for start in range(0, len(body), step):
            yield body[start : start + step]

    response = client.post(
        "/predict",
        content=chunks(),
        headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
    )
    assert response.status_code == 413
    assert response.json() == {"status": "fail", "message": PAYLOAD_TOO_LARGE_MESSAGE}
    assert recorder.calls == 0
    assert store.list() == []


def test_chunked_small_body_is_accepted(client, jpeg_bytes, store):
    boundary = "oncoscan-boundary"
    body = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="image"; filename="scan.jpg"\r\n'
        "Content-Type: image/jpeg\r\n\r\n"
    ).encode() + jpeg_bytes + f"\r\n--{boundary}--\r\n".encode()

    response = client.post(
        "/predict",
        content=iter([body]),
        headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
    )
    assert response.status_code == 201
    assert len(store.list()) == 1
