"""
edge_gate.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Read the directory (single user, full list) for the directory endpoints.
- Administrative mutations (upsert, ban/unban, delete) used by seeding and operators.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edge_gate.db.models import User
from edge_gate.directory_clients.normalize import canonical_username


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, username: str) -> User | None:
        stmt = select(User).where(User.username_key == canonical_username(username))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[User]:
        stmt = select(User).order_by(User.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def upsert(self, *, username: str, role: str = "user", banned: bool = False) -> User:
        user = await self.get(username)
        if user is None:
            user = User(
                username=username.strip(),
                username_key=canonical_username(username),
                role=role,
                banned=banned,
            )
            self._session.add(user)
        else:
            user.role = role
            user.banned = banned
            user.updated_at = datetime.utcnow()
        await self._session.flush()
        return user

    async def set_banned(self, username: str, banned: bool) -> bool:
        user = await self.get(username)
        if user is None:
            return False
        user.banned = banned
        user.updated_at = datetime.utcnow()
        await self._session.flush()
        return True

    async def delete(self, username: str) -> bool:
        user = await self.get(username)
        if user is None:
            return False
        await self._session.delete(user)
        await self._session.flush()
        return True


# --- Module Notes -----------------------------------------------------------
# Mutations here become visible to gated requests only after the next directory
# refresh, i.e. within one cache TTL per replica.
