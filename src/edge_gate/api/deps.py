"""
edge_gate.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the gate.
- Encapsulate app.state access patterns (settings/sessionmaker/gate).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edge_gate.gate.wiring import Gate
from edge_gate.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app is built from an explicit Settings object; routes must see the same one.
    return request.app.state.settings  # type: ignore[attr-defined]


def gate_dep(request: Request) -> Gate:
    return request.app.state.gate  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
