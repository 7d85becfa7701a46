"""Async lifespan helpers shared by FastAPI services."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.schema import MetaData

logger = structlog.get_logger(__name__)


def database_lifespan_factory(
    *,
    service_name: str,
    metadata: MetaData,
    engine,
    retries: int = 10,
    wait_seconds: float = 2.0,
):
    """Return a FastAPI lifespan that creates the tables before serving requests.

    The database container usually comes up after the service, so table
    creation is retried ``retries`` times before giving up silently and letting
    ``/ready`` report the outage.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        for attempt in range(retries):
            try:
                metadata.create_all(bind=engine)
                break
            except OperationalError as exc:  # pragma: no cover - only when DB is down
                logger.warning(
                    "database_unavailable",
                    service=service_name,
                    attempt=attempt + 1,
                    wait_seconds=wait_seconds,
                    error=str(exc),
                )
                await asyncio.sleep(wait_seconds)
        yield

    return _lifespan
