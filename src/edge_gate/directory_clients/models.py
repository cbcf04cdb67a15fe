"""
edge_gate.directory_clients.models

Directory value types and fetch errors.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class UserStatus(enum.StrEnum):
    active = "ACTIVE"
    banned = "BANNED"
    deleted = "DELETED"
    # Neither confirmed live nor confirmed banned: nothing authoritative was ever obtained.
    unknown = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    username: str
    banned: bool
    role: str | None = None


class DirectoryFetchError(Exception):
    """Directory source could not be read (transport, status code, body)."""


class DirectoryTimeoutError(DirectoryFetchError):
    """Directory source did not answer within the configured deadline."""


class DirectoryFormatError(DirectoryFetchError):
    """Directory source answered with something other than a recognized JSON document."""
