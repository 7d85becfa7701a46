"""Redis cache helpers for read-mostly shop documents.

Public shop profiles are read on every visit to a booking page and change
rarely, so they are kept in Redis with a configurable TTL and invalidated on
every write of the shop document.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import redis


PROFILE_CACHE_PREFIX = "profile:shop:"


def create_redis_cache(redis_url: Optional[str]) -> Optional[redis.Redis]:
    """Crea el cliente Redis para cache.

    Returns:
        Cliente Redis, o None si no hay URL configurada
    """
    if not redis_url or not redis_url.strip():
        return None

    try:
        return redis.Redis.from_url(redis_url, decode_responses=True)
    except ValueError:
        return None


def _get_profile_cache_key(slug: str) -> str:
    return f"{PROFILE_CACHE_PREFIX}{slug}"


def get_cached_profile(cache: Optional[redis.Redis], slug: str) -> Optional[Dict[str, Any]]:
    """Recupera el perfil público de un local, o None si no está en cache."""
    if cache is None:
        return None

    try:
        cached_data = cache.get(_get_profile_cache_key(slug))
    except redis.RedisError:
        return None

    if cached_data is None:
        return None

    try:
        return json.loads(cached_data)
    except json.JSONDecodeError:
        return None


def set_cached_profile(
    cache: Optional[redis.Redis],
    slug: str,
    profile: Dict[str, Any],
    ttl: int = 300,
) -> bool:
    """Guarda el perfil público con TTL (segundos). Devuelve True si se guardó."""
    if cache is None:
        return False

    try:
        cache.set(_get_profile_cache_key(slug), json.dumps(profile, default=str), ex=ttl)
        return True
    except redis.RedisError:
        return False


def invalidate_profile_cache(cache: Optional[redis.Redis], slug: str) -> bool:
    if cache is None:
        return False

    try:
        cache.delete(_get_profile_cache_key(slug))
        return True
    except redis.RedisError:
        return False


def get_cache_ttl(ttl_type: str, default: int = 300) -> int:
    """Obtiene el TTL de ``CACHE_TTL_<TIPO>``, con ``default`` si falta o es inválido."""
    ttl_str = os.getenv(f"CACHE_TTL_{ttl_type.upper()}")

    if ttl_str:
        try:
            return int(ttl_str)
        except ValueError:
            pass

    return default
