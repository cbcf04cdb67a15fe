"""
tests.fakes

Controllable clock and directory sources (no network).
"""

from __future__ import annotations

import asyncio

from edge_gate.directory_clients.models import DirectoryEntry, DirectoryFetchError, UserStatus


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDirectorySource:
    def __init__(self, entries: list[DirectoryEntry] | None = None) -> None:
        self.entries = entries or []
        self.error: DirectoryFetchError | None = None
        self.calls = 0
        # When set, fetch() waits on it, simulating a slow upstream.
        self.gate: asyncio.Event | None = None

    async def fetch(self) -> list[DirectoryEntry]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeStatusSource:
    def __init__(self, statuses: dict[str, UserStatus] | None = None) -> None:
        self.statuses = statuses or {}
        self.error: DirectoryFetchError | None = None
        self.calls = 0

    async def check(self, username: str) -> UserStatus:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.statuses.get(username, UserStatus.deleted)
