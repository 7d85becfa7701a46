"""Pruebas del cache Redis de perfiles públicos."""

import json
import os
from unittest.mock import MagicMock, patch

import redis

from shared.cache import (
    PROFILE_CACHE_PREFIX,
    create_redis_cache,
    get_cache_ttl,
    get_cached_profile,
    invalidate_profile_cache,
    set_cached_profile,
)


class TestRedisCache:
    """Creación del cliente de cache."""

    def test_create_redis_cache_with_url(self):
        cache = create_redis_cache("redis://localhost:6379")
        assert cache is not None

    def test_create_redis_cache_without_url(self):
        assert create_redis_cache(None) is None

    def test_create_redis_cache_with_empty_url(self):
        assert create_redis_cache("   ") is None


class TestProfileCache:
    """Cache del perfil público de un local."""

    def test_set_and_get_cached_profile(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = None
        profile = {"slug": "demo", "name": "Barbería Demo", "services": []}

        assert get_cached_profile(mock_redis, "demo") is None

        assert set_cached_profile(mock_redis, "demo", profile, ttl=120) is True
        key, value = mock_redis.set.call_args[0]
        assert key == f"{PROFILE_CACHE_PREFIX}demo"
        assert json.loads(value) == profile
        assert mock_redis.set.call_args.kwargs["ex"] == 120

        mock_redis.get.return_value = json.dumps(profile)
        cached = get_cached_profile(mock_redis, "demo")
        assert cached["name"] == "Barbería Demo"

    def test_get_cached_profile_invalid_json(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = "no es json"

        assert get_cached_profile(mock_redis, "demo") is None

    def test_invalidate_profile_cache(self):
        mock_redis = MagicMock()

        assert invalidate_profile_cache(mock_redis, "demo") is True
        mock_redis.delete.assert_called_once_with(f"{PROFILE_CACHE_PREFIX}demo")

    def test_redis_errors_degrade_to_cache_miss(self):
        """Una caída de Redis nunca rompe la lectura del perfil."""
        mock_redis = MagicMock()
        mock_redis.get.side_effect = redis.ConnectionError("down")
        mock_redis.set.side_effect = redis.ConnectionError("down")
        mock_redis.delete.side_effect = redis.ConnectionError("down")

        assert get_cached_profile(mock_redis, "demo") is None
        assert set_cached_profile(mock_redis, "demo", {"slug": "demo"}) is False
        assert invalidate_profile_cache(mock_redis, "demo") is False

    def test_cache_without_redis_is_noop(self):
        assert get_cached_profile(None, "demo") is None
        assert set_cached_profile(None, "demo", {"slug": "demo"}) is False
        assert invalidate_profile_cache(None, "demo") is False


class TestCacheTtl:
    def test_ttl_from_environment(self):
        with patch.dict(os.environ, {"CACHE_TTL_PROFILE": "900"}):
            assert get_cache_ttl("profile") == 900

    def test_ttl_invalid_value_uses_default(self):
        with patch.dict(os.environ, {"CACHE_TTL_PROFILE": "mucho"}):
            assert get_cache_ttl("profile", default=60) == 60

    def test_ttl_missing_uses_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_cache_ttl("profile") == 300
