"""Shared utilities used across services."""

from .config import ServiceConfig, load_service_config
from .cors import configure_cors
from .health import create_health_router
from .logging import RequestContextLogMiddleware, configure_logging
from .messaging import EventPublisher
from .startup import database_lifespan_factory
from .timezones import ensure_timezone, local_now, local_today

__all__ = [
    "ServiceConfig",
    "load_service_config",
    "configure_cors",
    "create_health_router",
    "RequestContextLogMiddleware",
    "configure_logging",
    "EventPublisher",
    "database_lifespan_factory",
    "ensure_timezone",
    "local_now",
    "local_today",
]
