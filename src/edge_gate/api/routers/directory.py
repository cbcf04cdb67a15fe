"""
edge_gate.api.routers.directory

Directory endpoints read by the gate's refresh path.

Responsibilities:
- `/api/server-config`: the bulk directory document (sanitized user list).
- `/api/auth/status`: per-user existence/ban check.
- Forbid every layer of caching on both responses.

Both paths are on the gate's exempt list, so they are guarded by an internal bearer
token (role `internal_system`) instead of the user cookie.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from edge_gate.api.deps import db_session, settings_dep
from edge_gate.auth.deps import require_roles
from edge_gate.db.repositories.users import UserRepo
from edge_gate.directory_clients.normalize import normalize_users
from edge_gate.observability.logging import get_logger
from edge_gate.settings import Settings

log = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["directory"],
    dependencies=[Depends(require_roles("internal_system"))],
)

# Browsers, CDNs and edge platforms each honour a different header; send all of them.
NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
    "CDN-Cache-Control": "no-store",
    "Vercel-CDN-Cache-Control": "no-store",
    "Surrogate-Control": "no-store",
}

_STATUS_HEADERS = {"Cache-Control": "no-store, max-age=0"}


class DirectoryUser(BaseModel):
    username: str
    role: str | None = None
    banned: bool


class UserConfigBlock(BaseModel):
    Users: list[DirectoryUser]


class ServerConfigResponse(BaseModel):
    SiteName: str
    StorageType: str
    UserConfig: UserConfigBlock
    updatedAt: int


@router.get("/server-config")
async def server_config(
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    try:
        users = await UserRepo(session).list_all()
    except SQLAlchemyError:
        log.exception("server_config_unavailable")
        # A 503 lets the gate's refresh fail and fall back to stale/unknown.
        return JSONResponse(
            {"error": "server-config unavailable"},
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            headers=NO_STORE_HEADERS,
        )

    entries = normalize_users([{"username": u.username, "role": u.role, "banned": u.banned} for u in users])
    payload = ServerConfigResponse(
        SiteName=settings.site_name,
        StorageType=settings.storage_type,
        UserConfig=UserConfigBlock(
            Users=[DirectoryUser(username=e.username, role=e.role, banned=e.banned) for e in entries]
        ),
        updatedAt=int(time.time() * 1000),
    )
    return JSONResponse(payload.model_dump(), status_code=HTTP_200_OK, headers=NO_STORE_HEADERS)


@router.get("/auth/status")
async def auth_status(
    username: str | None = Query(default=None, max_length=128),
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    if not username:
        return JSONResponse({"message": "Missing username"}, status_code=HTTP_400_BAD_REQUEST, headers=_STATUS_HEADERS)

    try:
        user = await UserRepo(session).get(username)
    except SQLAlchemyError:
        log.exception("auth_status_failed", username=username)
        return JSONResponse(
            {"message": "Internal Server Error"},
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            headers=_STATUS_HEADERS,
        )

    if user is None:
        return JSONResponse({"message": "User deleted"}, status_code=HTTP_404_NOT_FOUND, headers=_STATUS_HEADERS)
    if user.banned:
        return JSONResponse({"message": "User banned"}, status_code=HTTP_403_FORBIDDEN, headers=_STATUS_HEADERS)
    return JSONResponse({"message": "User active"}, status_code=HTTP_200_OK, headers=_STATUS_HEADERS)


# --- Module Notes -----------------------------------------------------------
# Field names in the server-config payload are consumed verbatim by existing clients;
# keep `UserConfig.Users[].{username,role,banned}` stable.
