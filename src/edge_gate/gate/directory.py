"""
edge_gate.gate.directory

Directory views used by the decision engine.

Responsibilities:
- `DirectorySnapshotCache`: a TTL-bounded, lazily refreshed snapshot of the whole
  directory (bulk strategy).
- `StatusCheckCache`: the same freshness rules applied per username (status strategy).

Freshness rules (both strategies):
- A value captured at `as_of` is fresh while `now - as_of < ttl`.
- An expired value triggers a refresh on the next lookup. Success replaces it;
  failure keeps serving the old value flagged `stale`.
- With nothing ever captured, a failed refresh yields `UserStatus.unknown`.
- While a refresh is in flight, readers holding an old value serve it instead of
  waiting. Readers with nothing cached fetch on their own; duplicate fetches are
  accepted and the newest capture wins.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from edge_gate.directory_clients.models import (
    DirectoryEntry,
    DirectoryFetchError,
    DirectoryTimeoutError,
    UserStatus,
)
from edge_gate.directory_clients.normalize import canonical_username
from edge_gate.observability.logging import get_logger

log = get_logger(__name__)

Clock = Callable[[], float]


class DirectorySource(Protocol):
    async def fetch(self) -> list[DirectoryEntry]: ...


class StatusSource(Protocol):
    async def check(self, username: str) -> UserStatus: ...


class DirectoryView(Protocol):
    async def lookup(self, username: str, now: float | None = None) -> DirectoryLookup: ...


@dataclass(frozen=True, slots=True)
class DirectorySnapshot:
    as_of: float
    banned_usernames: frozenset[str]
    # None when the source only reports ban state and existence is not tracked.
    existing_usernames: frozenset[str] | None = None

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[DirectoryEntry],
        *,
        as_of: float,
        track_existence: bool = True,
    ) -> DirectorySnapshot:
        entries = list(entries)
        return cls(
            as_of=as_of,
            banned_usernames=frozenset(canonical_username(e.username) for e in entries if e.banned),
            existing_usernames=(
                frozenset(canonical_username(e.username) for e in entries) if track_existence else None
            ),
        )

    def status_of(self, username: str) -> UserStatus:
        key = canonical_username(username)
        if self.existing_usernames is not None and key not in self.existing_usernames:
            return UserStatus.deleted
        if key in self.banned_usernames:
            return UserStatus.banned
        return UserStatus.active


@dataclass(frozen=True, slots=True)
class DirectoryLookup:
    status: UserStatus
    stale: bool = False
    # Set when the latest refresh failed: "UpstreamTimeout" or "UpstreamError".
    failure: str | None = None


def _failure_kind(e: DirectoryFetchError) -> str:
    return "UpstreamTimeout" if isinstance(e, DirectoryTimeoutError) else "UpstreamError"


class DirectorySnapshotCache:
    """
    One instance per process, shared by every request handler.
    """

    def __init__(
        self,
        *,
        source: DirectorySource,
        ttl_seconds: float,
        track_existence: bool = True,
        clock: Clock = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._track_existence = track_existence
        self._clock = clock
        self._snapshot: DirectorySnapshot | None = None
        self._in_flight = 0
        self._last_failure: str | None = None

    @property
    def snapshot(self) -> DirectorySnapshot | None:
        return self._snapshot

    def is_fresh(self, now: float) -> bool:
        return self._snapshot is not None and now - self._snapshot.as_of < self._ttl

    async def banned_set(self, now: float | None = None) -> frozenset[str] | None:
        snapshot, _ = await self._current(now)
        return snapshot.banned_usernames if snapshot is not None else None

    async def exists(self, username: str, now: float | None = None) -> bool | None:
        snapshot, _ = await self._current(now)
        if snapshot is None:
            return None
        return snapshot.status_of(username) != UserStatus.deleted

    async def lookup(self, username: str, now: float | None = None) -> DirectoryLookup:
        snapshot, stale = await self._current(now)
        failure = self._last_failure if stale else None
        if snapshot is None:
            return DirectoryLookup(status=UserStatus.unknown, stale=True, failure=failure)
        return DirectoryLookup(status=snapshot.status_of(username), stale=stale, failure=failure)

    async def _current(self, now: float | None) -> tuple[DirectorySnapshot | None, bool]:
        now = self._clock() if now is None else now
        if self.is_fresh(now):
            return self._snapshot, False
        if self._snapshot is not None and self._in_flight:
            # Someone else is revalidating; do not queue behind them.
            return self._snapshot, True
        refreshed = await self.refresh(now)
        return self._snapshot, not refreshed

    async def refresh(self, now: float | None = None) -> bool:
        as_of = self._clock() if now is None else now
        self._in_flight += 1
        try:
            entries = await self._source.fetch()
        except DirectoryFetchError as e:
            self._last_failure = _failure_kind(e)
            log.warning(
                "directory_refresh_failed",
                error=str(e),
                failure=self._last_failure,
                serving_stale=self._snapshot is not None,
            )
            return False
        finally:
            self._in_flight -= 1

        candidate = DirectorySnapshot.from_entries(
            entries, as_of=as_of, track_existence=self._track_existence
        )
        # Concurrent refreshes may finish out of order; keep the newest capture.
        if self._snapshot is None or candidate.as_of >= self._snapshot.as_of:
            self._snapshot = candidate
        self._last_failure = None
        log.debug(
            "directory_refreshed",
            users=len(entries),
            banned=len(candidate.banned_usernames),
        )
        return True


@dataclass(frozen=True, slots=True)
class _StatusEntry:
    status: UserStatus
    as_of: float


class StatusCheckCache:
    """
    Per-username variant backed by the status endpoint.
    """

    def __init__(
        self,
        *,
        source: StatusSource,
        ttl_seconds: float,
        max_entries: int = 10_000,
        clock: Clock = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, _StatusEntry] = {}
        self._in_flight: set[str] = set()

    async def lookup(self, username: str, now: float | None = None) -> DirectoryLookup:
        now = self._clock() if now is None else now
        key = canonical_username(username)
        cached = self._entries.get(key)
        if cached is not None and now - cached.as_of < self._ttl:
            return DirectoryLookup(status=cached.status)
        if cached is not None and key in self._in_flight:
            return DirectoryLookup(status=cached.status, stale=True)

        self._in_flight.add(key)
        try:
            status = await self._source.check(username)
        except DirectoryFetchError as e:
            failure = _failure_kind(e)
            log.warning("status_check_failed", username=username, error=str(e), failure=failure)
            if cached is None:
                return DirectoryLookup(status=UserStatus.unknown, stale=True, failure=failure)
            return DirectoryLookup(status=cached.status, stale=True, failure=failure)
        finally:
            self._in_flight.discard(key)

        current = self._entries.get(key)
        if current is None or now >= current.as_of:
            self._store(key, _StatusEntry(status=status, as_of=now))
        return DirectoryLookup(status=status)

    def _store(self, key: str, entry: _StatusEntry) -> None:
        self._entries.pop(key, None)
        if len(self._entries) >= self._max_entries:
            # Oldest insertion goes first; dicts keep insertion order.
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = entry


# --- Module Notes -----------------------------------------------------------
# Replicas each own their cache, so after a ban they may disagree for up to one TTL.
# That window is the accepted cost of not hitting the store on every request.
