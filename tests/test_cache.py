"""
Tests for the Redis cache helpers.
"""
import json
from unittest.mock import MagicMock, patch

import pytest
import redis

from gev_api.common import cache


def test_generate_cache_key_is_order_independent():
    first = cache.generate_cache_key("relatorios", {"periodo": "mes", "limite": 5})
    second = cache.generate_cache_key("relatorios", {"limite": 5, "periodo": "mes"})

    assert first == second == "relatorios:limite=5:periodo=mes"


def test_generate_cache_key_skips_missing_params():
    assert cache.generate_cache_key("produtos", {"search": None}) == "produtos"


class TestCacheOperations:
    """Cache calls against a mocked Redis client."""

    @pytest.fixture
    def mock_redis(self):
        client = MagicMock()
        with patch.object(cache, "get_redis_client", return_value=client):
            yield client

    @pytest.mark.asyncio
    async def test_get_cache_decodes_json(self, mock_redis):
        mock_redis.get.return_value = json.dumps([{"id": 1}])

        assert await cache.get_cache("produtos") == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_get_cache_miss(self, mock_redis):
        mock_redis.get.return_value = None

        assert await cache.get_cache("produtos") is None

    @pytest.mark.asyncio
    async def test_redis_errors_degrade_to_a_miss(self, mock_redis):
        mock_redis.get.side_effect = redis.exceptions.ConnectionError("down")

        assert await cache.get_cache("produtos") is None

    @pytest.mark.asyncio
    async def test_set_cache_uses_ttl(self, mock_redis):
        mock_redis.set.return_value = True

        assert await cache.set_cache("relatorios:x", {"a": 1}, ttl=60) is True
        mock_redis.set.assert_called_once_with("relatorios:x", json.dumps({"a": 1}), ex=60)

    @pytest.mark.asyncio
    async def test_invalidate_products_deletes_matching_keys(self, mock_redis):
        mock_redis.scan_iter.return_value = iter(["produtos", "produtos:search=polo"])
        mock_redis.delete.return_value = 2

        await cache.invalidate_products()

        mock_redis.scan_iter.assert_called_once_with(match="produtos*")
        mock_redis.delete.assert_called_once_with("produtos", "produtos:search=polo")


@pytest.mark.asyncio
async def test_disabled_cache_is_a_no_op(monkeypatch):
    monkeypatch.setattr(cache, "CACHE_ENABLED", False)

    assert cache.get_redis_client() is None
    assert await cache.get_cache("produtos") is None
    assert await cache.set_cache("produtos", []) is False
    assert await cache.delete_pattern("produtos*") == 0
