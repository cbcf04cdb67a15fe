"""
tests.test_directory_cache

Directory snapshot cache and per-user status cache.

Responsibilities:
- Freshness boundaries (no fetch inside TTL, exactly one fetch after it).
- Serve-stale on refresh failure; unknown when nothing was ever captured.
- Readers do not wait behind an in-flight refresh when they hold a snapshot.
"""

from __future__ import annotations

import asyncio

import pytest

from edge_gate.directory_clients.models import (
    DirectoryEntry,
    DirectoryFetchError,
    DirectoryTimeoutError,
    UserStatus,
)
from edge_gate.gate.directory import DirectorySnapshot, DirectorySnapshotCache, StatusCheckCache
from tests.fakes import FakeClock, FakeDirectorySource, FakeStatusSource

TTL = 15.0


def _cache(source: FakeDirectorySource, clock: FakeClock, **kwargs) -> DirectorySnapshotCache:
    return DirectorySnapshotCache(source=source, ttl_seconds=TTL, clock=clock, **kwargs)


@pytest.mark.asyncio
async def test_fetch_only_after_ttl_expires() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=False)])
    cache = _cache(source, clock)

    t0 = clock.now
    await cache.lookup("alice")
    assert source.calls == 1

    await cache.lookup("alice", now=t0 + TTL - 1)
    assert source.calls == 1

    await cache.lookup("alice", now=t0 + TTL + 1)
    assert source.calls == 2


@pytest.mark.asyncio
async def test_statuses_from_snapshot() -> None:
    clock = FakeClock()
    source = FakeDirectorySource(
        [DirectoryEntry("Alice", banned=True), DirectoryEntry("bob", banned=False)]
    )
    cache = _cache(source, clock)

    assert (await cache.lookup("alice")).status == UserStatus.banned
    assert (await cache.lookup("ALICE")).status == UserStatus.banned
    assert (await cache.lookup("bob")).status == UserStatus.active
    assert (await cache.lookup("ghost")).status == UserStatus.deleted
    assert await cache.banned_set() == frozenset({"alice"})
    assert await cache.exists("Bob") is True
    assert await cache.exists("ghost") is False


@pytest.mark.asyncio
async def test_existence_not_tracked() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=True)])
    cache = _cache(source, clock, track_existence=False)

    assert (await cache.lookup("ghost")).status == UserStatus.active
    assert (await cache.lookup("alice")).status == UserStatus.banned


@pytest.mark.asyncio
async def test_unknown_when_never_captured() -> None:
    clock = FakeClock()
    source = FakeDirectorySource()
    source.error = DirectoryTimeoutError("slow")
    cache = _cache(source, clock)

    found = await cache.lookup("bob")
    assert found.status == UserStatus.unknown
    assert found.failure == "UpstreamTimeout"
    assert await cache.banned_set() is None
    assert await cache.exists("bob") is None


@pytest.mark.asyncio
async def test_serves_stale_snapshot_when_refresh_fails() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=True), DirectoryEntry("bob", banned=False)])
    cache = _cache(source, clock)
    await cache.lookup("alice")

    clock.advance(TTL + 1)
    source.error = DirectoryFetchError("HTTP 503")
    found = await cache.lookup("alice")
    assert found.status == UserStatus.banned
    assert found.stale is True
    assert found.failure == "UpstreamError"
    assert (await cache.lookup("bob")).status == UserStatus.active

    # Recovery clears the stale flag.
    source.error = None
    found = await cache.lookup("alice")
    assert found.stale is False
    assert found.failure is None


@pytest.mark.asyncio
async def test_refresh_picks_up_new_ban() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=False)])
    cache = _cache(source, clock)
    assert (await cache.lookup("alice")).status == UserStatus.active

    source.entries = [DirectoryEntry("alice", banned=True)]
    clock.advance(TTL - 1)
    assert (await cache.lookup("alice")).status == UserStatus.active
    clock.advance(2)
    assert (await cache.lookup("alice")).status == UserStatus.banned


@pytest.mark.asyncio
async def test_reader_does_not_wait_on_inflight_refresh() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=False)])
    cache = _cache(source, clock)
    await cache.lookup("alice")

    clock.advance(TTL + 1)
    source.entries = [DirectoryEntry("alice", banned=True)]
    source.gate = asyncio.Event()
    refresher = asyncio.create_task(cache.lookup("alice"))
    await asyncio.sleep(0)

    found = await asyncio.wait_for(cache.lookup("alice"), timeout=1)
    assert found.status == UserStatus.active
    assert found.stale is True
    assert source.calls == 2

    source.gate.set()
    assert (await refresher).status == UserStatus.banned


@pytest.mark.asyncio
async def test_newest_capture_wins() -> None:
    clock = FakeClock()
    source = FakeDirectorySource([DirectoryEntry("alice", banned=True)])
    cache = _cache(source, clock)

    await cache.refresh(now=2000.0)
    source.entries = [DirectoryEntry("alice", banned=False)]
    # An older capture finishing late must not replace the newer one.
    await cache.refresh(now=1990.0)
    assert cache.snapshot is not None
    assert cache.snapshot.as_of == 2000.0
    assert cache.snapshot.banned_usernames == frozenset({"alice"})


def test_snapshot_from_entries() -> None:
    snap = DirectorySnapshot.from_entries(
        [DirectoryEntry("Alice", banned=True), DirectoryEntry("bob", banned=False)], as_of=1.0
    )
    assert snap.banned_usernames == frozenset({"alice"})
    assert snap.existing_usernames == frozenset({"alice", "bob"})


@pytest.mark.asyncio
async def test_status_cache_ttl_and_stale() -> None:
    clock = FakeClock()
    source = FakeStatusSource({"alice": UserStatus.active})
    cache = StatusCheckCache(source=source, ttl_seconds=TTL, clock=clock)

    assert (await cache.lookup("alice")).status == UserStatus.active
    assert (await cache.lookup("Alice")).status == UserStatus.active
    assert source.calls == 1

    clock.advance(TTL + 1)
    source.error = DirectoryTimeoutError("slow")
    found = await cache.lookup("alice")
    assert found.status == UserStatus.active
    assert found.stale is True

    found = await cache.lookup("bob")
    assert found.status == UserStatus.unknown
    assert found.failure == "UpstreamTimeout"


@pytest.mark.asyncio
async def test_status_cache_evicts_oldest() -> None:
    clock = FakeClock()
    source = FakeStatusSource({"a": UserStatus.active, "b": UserStatus.banned, "c": UserStatus.active})
    cache = StatusCheckCache(source=source, ttl_seconds=TTL, max_entries=2, clock=clock)

    for name in ("a", "b", "c"):
        await cache.lookup(name)
    assert source.calls == 3
    await cache.lookup("a")
    assert source.calls == 4
