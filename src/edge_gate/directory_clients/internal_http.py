"""
edge_gate.directory_clients.internal_http

HTTP client boundary used by the gate to read the user directory.

Responsibilities:
- Attach short-lived JWT credentials (role=internal_system) to directory calls.
- Defeat every intermediate cache (request headers + a cache-busting query parameter).
- Enforce a hard per-fetch deadline.
- Translate transport failures, bad status codes and non-JSON bodies into
  `DirectoryFetchError` subclasses; never hand HTML error pages to the parser.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import httpx

from edge_gate.auth.jwt import JwtConfig, issue_token
from edge_gate.directory_clients.models import (
    DirectoryEntry,
    DirectoryFetchError,
    DirectoryFormatError,
    DirectoryTimeoutError,
    UserStatus,
)
from edge_gate.directory_clients.normalize import extract_user_list, normalize_users
from edge_gate.settings import Settings

NO_CACHE_REQUEST_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0",
    "Pragma": "no-cache",
}


@dataclass(frozen=True, slots=True)
class InternalApiAuth:
    subject: str = "edge-gate"
    roles: tuple[str, ...] = ("internal_system",)


class _InternalClient:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        auth: InternalApiAuth | None = None,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._http = http
        self._auth = auth or InternalApiAuth()
        self._wall_clock = wall_clock

    def _authz(self) -> dict[str, str]:
        token = issue_token(
            cfg=JwtConfig.from_settings(self._settings),
            subject=self._auth.subject,
            roles=list(self._auth.roles),
            ttl=timedelta(minutes=5),
        )
        return {"Authorization": f"Bearer {token}"}

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        timeout = self._settings.directory_timeout_seconds
        params = {**params, "_t": str(int(self._wall_clock() * 1000))}
        try:
            # asyncio.timeout bounds the whole exchange; httpx's own timeout only bounds
            # each phase, so a slow-dripping upstream could otherwise exceed the deadline.
            async with asyncio.timeout(timeout):
                return await self._http.get(
                    path,
                    params=params,
                    headers={**NO_CACHE_REQUEST_HEADERS, **self._authz()},
                    timeout=timeout,
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise DirectoryTimeoutError(f"{path} timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise DirectoryFetchError(f"{path} transport error: {e}") from e


class HttpDirectorySource(_InternalClient):
    """
    Bulk strategy: one request returns every user with its ban status.
    """

    async def fetch(self) -> list[DirectoryEntry]:
        r = await self._get(self._settings.directory_path, params={})
        if r.status_code != 200:
            raise DirectoryFetchError(f"directory returned HTTP {r.status_code}")
        document = _json_body(r)
        raw_users = extract_user_list(document)
        if raw_users is None:
            raise DirectoryFormatError("directory document has no recognizable user list")
        return normalize_users(raw_users)


class HttpStatusSource(_InternalClient):
    """
    Per-user strategy: 200 active, 404 deleted, 403 banned.
    """

    async def check(self, username: str) -> UserStatus:
        r = await self._get(self._settings.status_path, params={"username": username})
        if r.status_code == 200:
            return UserStatus.active
        if r.status_code == 404:
            return UserStatus.deleted
        if r.status_code == 403:
            return UserStatus.banned
        raise DirectoryFetchError(f"status check returned HTTP {r.status_code}")


def _json_body(r: httpx.Response) -> Any:
    content_type = r.headers.get("content-type", "")
    if "json" not in content_type.lower():
        raise DirectoryFormatError(f"directory returned non-JSON content-type {content_type!r}")
    try:
        return r.json()
    except ValueError as e:
        raise DirectoryFormatError("directory returned malformed JSON") from e


# --- Module Notes -----------------------------------------------------------
# The paths called here must stay on the gate's exempt list, otherwise each refresh
# would itself be gated and recurse into another refresh.
