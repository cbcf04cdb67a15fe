"""
edge_gate.auth.models

Auth domain models.

Responsibilities:
- Define the end-user `Credential` carried in the cookie.
- Define the internal caller identity (`Principal`) for bearer-protected endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Credential:
    """
    Identity presented by the browser. Never mutated; a re-login replaces it.
    """

    username: str | None = None
    password: str | None = None
    signature: str | None = None


@dataclass(frozen=True, slots=True)
class Principal:
    subject: str
    roles: frozenset[str]

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles
