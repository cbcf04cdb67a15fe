"""
edge_gate.api.routers.login

Credential issuance and logout.

Responsibilities:
- `/api/login` (non-prod): mint the `auth` cookie the gate verifies.
- `/api/logout`: clear the cookie under every scope the gate would clear on deny.

Real password checking belongs to the login service; this route exists so that dev and
test environments can produce credentials in the exact wire format.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from edge_gate.api.deps import db_session, gate_dep, settings_dep
from edge_gate.auth.credentials import encode_credential
from edge_gate.auth.models import Credential
from edge_gate.auth.signing import secrets_match, sign_username
from edge_gate.db.repositories.users import UserRepo
from edge_gate.gate.wiring import Gate
from edge_gate.settings import Settings

router = APIRouter(prefix="/api", tags=["login"])

COOKIE_MAX_AGE = timedelta(days=7)


class LoginRequest(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=128)
    password: str | None = Field(default=None, max_length=256)


@router.post("/login")
async def login(
    body: LoginRequest,
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    secret = settings.auth_secret
    if not secret:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Server secret not configured")

    if settings.resolved_auth_mode == "shared_secret":
        if not body.password or not secrets_match(body.password, secret):
            raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Wrong password")
        credential = Credential(username=body.username, password=body.password)
    else:
        if not body.username:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Missing username")
        user = await UserRepo(session).get(body.username)
        if user is None:
            raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Unknown user")
        if user.banned:
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="User banned")
        credential = Credential(username=user.username, signature=sign_username(user.username, secret))

    response = JSONResponse({"ok": True, "username": credential.username})
    response.set_cookie(
        settings.cookie_name,
        encode_credential(credential),
        max_age=int(COOKIE_MAX_AGE.total_seconds()),
        path="/",
        samesite="lax",
    )
    return response


@router.post("/logout")
async def logout(request: Request, gate: Gate = Depends(gate_dep)) -> JSONResponse:
    response = JSONResponse({"ok": True})
    gate.lifecycle.clear_credential(response, host=request.url.hostname)
    return response
