from __future__ import annotations

from uuid import uuid4

import pytest

from socialfeed.feed.domain.exceptions import UpstreamUnavailableError
from socialfeed.feed.services.cursor import CursorResolver
from stubs import InMemoryFeedStore


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "   "])
async def test_blank_token_means_first_page(token):
    store = InMemoryFeedStore()

    resolved = await CursorResolver(store).resolve(token)

    assert resolved.anchor is None
    assert resolved.stale is False
    assert store.calls == []


@pytest.mark.asyncio
async def test_known_post_becomes_anchor(store):
    post = store.add_post("alice", "hi")

    resolved = await CursorResolver(store).resolve(str(post.id))

    assert resolved.found
    assert resolved.anchor.id == post.id
    assert not resolved.stale


@pytest.mark.asyncio
async def test_unknown_post_is_stale(store):
    resolved = await CursorResolver(store).resolve(str(uuid4()))

    assert not resolved.found
    assert resolved.stale


@pytest.mark.asyncio
async def test_malformed_token_is_stale_without_lookup(store):
    resolved = await CursorResolver(store).resolve("12345")

    assert not resolved.found
    assert resolved.stale
    assert store.calls_to("get_post") == []


@pytest.mark.asyncio
async def test_store_fault_propagates(store):
    store.failures["get_post"] = UpstreamUnavailableError()

    with pytest.raises(UpstreamUnavailableError):
        await CursorResolver(store).resolve(str(uuid4()))
