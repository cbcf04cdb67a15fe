"""
edge_gate.db.models

Persistence schema for the user directory.

Responsibilities:
- Define `User`, the only record the gate's directory endpoints read.

Only the fields the authorization decision needs live here; passwords and profile
data belong to the login surface.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from edge_gate.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity; production systems may use tz-aware types.
    return datetime.utcnow()


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Stored as given; uniqueness and lookups use the lower-cased form.
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    username_key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
