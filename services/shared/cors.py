"""CORS configuration driven by ``ENVIRONMENT`` and ``CORS_ORIGINS``."""

from __future__ import annotations

import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import current_environment


def get_cors_origins() -> List[str]:
    """Origenes permitidos para CORS.

    - Desarrollo: ``["*"]``
    - Producción: dominios de ``CORS_ORIGINS`` separados por coma (obligatorio)

    Raises:
        ValueError: en producción sin ``CORS_ORIGINS`` válido
    """
    if current_environment() not in ("production", "prod"):
        return ["*"]

    raw = os.getenv("CORS_ORIGINS", "").strip()
    if not raw:
        raise ValueError(
            "CORS_ORIGINS must be set in production, e.g. "
            "CORS_ORIGINS=https://turnolibre.app,https://admin.turnolibre.app"
        )

    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        raise ValueError("CORS_ORIGINS must contain at least one valid domain in production.")
    return origins


def configure_cors(app: FastAPI) -> None:
    origins = get_cors_origins()

    allow_credentials = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"
    max_age = int(os.getenv("CORS_MAX_AGE", "600"))

    # Con origen "*" el navegador rechaza credenciales
    if origins == ["*"]:
        allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        max_age=max_age,
    )
