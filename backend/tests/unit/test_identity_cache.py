from __future__ import annotations

import json
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from socialfeed.feed.domain import models
from socialfeed.feed.domain.exceptions import UpstreamUnavailableError
from socialfeed.feed.infra.identity_cache import CachedIdentityStore


class _BrokenRedis:
    async def get(self, key):
        raise RedisConnectionError("down")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("down")


@pytest.mark.asyncio
async def test_miss_then_hit(store, fake_redis):
    store.users["alice"] = models.DisplayInfo(
        username="alice",
        nickname="Alice",
        picture=models.ImageRef(id=uuid4(), format="jpg", width=10, height=10),
    )
    cache = CachedIdentityStore(store, fake_redis, ttl_seconds=60)

    first = await cache.find_display_info("alice")
    second = await cache.find_display_info("alice")

    assert first == second
    assert second.picture.format == "jpg"
    assert store.calls_to("find_display_info") == ["alice"]
    assert 0 < await fake_redis.ttl("feed:author:alice") <= 60


@pytest.mark.asyncio
async def test_unknown_user_is_not_cached(store, fake_redis):
    cache = CachedIdentityStore(store, fake_redis)

    assert await cache.find_display_info("ghost") is None
    assert await cache.find_display_info("ghost") is None

    assert store.calls_to("find_display_info") == ["ghost", "ghost"]
    assert await fake_redis.get("feed:author:ghost") is None


@pytest.mark.asyncio
async def test_redis_outage_falls_through(store):
    store.add_user("alice", nickname="Alice")
    cache = CachedIdentityStore(store, _BrokenRedis())

    info = await cache.find_display_info("alice")
    again = await cache.find_display_info("alice")

    assert info.nickname == again.nickname == "Alice"
    assert store.calls_to("find_display_info") == ["alice", "alice"]


@pytest.mark.asyncio
async def test_inner_store_fault_propagates(store, fake_redis):
    store.failures["find_display_info"] = UpstreamUnavailableError()
    cache = CachedIdentityStore(store, fake_redis)

    with pytest.raises(UpstreamUnavailableError):
        await cache.find_display_info("alice")


@pytest.mark.asyncio
async def test_corrupt_entry_is_refetched(store, fake_redis):
    store.add_user("alice", nickname="Alice")
    await fake_redis.set("feed:author:alice", json.dumps({"nickname": 5}))
    cache = CachedIdentityStore(store, fake_redis)

    info = await cache.find_display_info("alice")

    assert info.nickname == "Alice"
    assert json.loads(await fake_redis.get("feed:author:alice"))["username"] == "alice"


@pytest.mark.asyncio
async def test_exists_is_not_cached(store, fake_redis):
    store.add_user("alice")
    cache = CachedIdentityStore(store, fake_redis)

    assert await cache.exists("alice") is True
    assert await cache.exists("bob") is False
    assert store.calls_to("exists") == ["alice", "bob"]
