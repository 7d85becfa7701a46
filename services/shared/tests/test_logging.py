"""Pruebas del logging estructurado y del middleware de contexto."""

import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.logging import RequestContextLogMiddleware, _shop_from_path, configure_logging


def _records(caplog):
    parsed = []
    for record in caplog.records:
        try:
            parsed.append(json.loads(record.getMessage()))
        except ValueError:
            continue
    return parsed


def test_shop_from_path():
    assert _shop_from_path("/shops/demo/availability") == "demo"
    assert _shop_from_path("/shops/status") is None
    assert _shop_from_path("/health") is None


def test_configure_logging_renders_json(caplog):
    caplog.set_level(logging.INFO)
    logger = configure_logging("shop")

    logger.info("stock_updated", item="Shampoo")

    events = [event for event in _records(caplog) if event.get("event") == "stock_updated"]
    assert events
    assert events[0]["service"] == "shop"
    assert events[0]["item"] == "Shampoo"
    assert events[0]["level"] == "info"


def test_middleware_binds_request_context(caplog):
    caplog.set_level(logging.INFO)
    logger = configure_logging("shop")
    app = FastAPI()
    app.add_middleware(RequestContextLogMiddleware, logger=logger)

    @app.get("/shops/{slug}/public")
    def profile(slug: str):
        return {"slug": slug}

    response = TestClient(app).get("/shops/demo/public", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"
    completed = [event for event in _records(caplog) if event.get("event") == "request_completed"]
    assert completed
    assert completed[-1]["request_id"] == "req-123"
    assert completed[-1]["shop_slug"] == "demo"
    assert completed[-1]["status_code"] == 200


def test_middleware_generates_request_id():
    app = FastAPI()
    app.add_middleware(RequestContextLogMiddleware)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    response = TestClient(app).get("/ping")

    assert response.headers["X-Request-ID"]
