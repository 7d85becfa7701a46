"""Liveness and readiness endpoints for the FastAPI services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def check_database_health(engine: Optional[Engine]) -> bool:
    """Ejecuta ``SELECT 1`` contra el engine; False si no responde."""
    if engine is None:
        return False

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except SQLAlchemyError:
        return False


async def check_redis_health(redis_client: Optional[redis.Redis] = None) -> Optional[bool]:
    """Verifica si Redis está disponible.

    Returns:
        True si responde al PING,
        False si está configurado pero no responde,
        None si no está configurado
    """
    if redis_client is None:
        return None

    try:
        redis_client.ping()
        return True
    except redis.RedisError:
        return False


def create_health_router(
    service_name: str,
    database_engine: Optional[Engine] = None,
    redis_client: Optional[redis.Redis] = None,
) -> APIRouter:
    """Router con ``/health`` (proceso vivo) y ``/ready`` (dependencias disponibles)."""
    router = APIRouter(tags=["Health"])

    @router.get("/health", status_code=status.HTTP_200_OK)
    def health():
        return {
            "status": "ok",
            "service": service_name,
            "timestamp": _utc_timestamp(),
        }

    @router.get("/ready", status_code=status.HTTP_200_OK)
    async def ready():
        """Devuelve 503 si la base de datos o un Redis configurado no responden."""
        checks = {}

        db_healthy = check_database_health(database_engine)
        checks["database"] = db_healthy

        redis_healthy = await check_redis_health(redis_client)
        checks["redis"] = redis_healthy

        # None en redis significa "no configurado", no cuenta como falla
        all_healthy = db_healthy and redis_healthy is not False

        response_data = {
            "status": "ready" if all_healthy else "not_ready",
            "service": service_name,
            "timestamp": _utc_timestamp(),
            "checks": checks,
        }
        return JSONResponse(
            content=response_data,
            status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return router
