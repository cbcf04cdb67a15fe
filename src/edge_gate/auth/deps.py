"""
edge_gate.auth.deps

FastAPI dependency functions for internal bearer authentication.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce role requirements via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from edge_gate.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from edge_gate.auth.models import Principal
from edge_gate.api.deps import settings_dep
from edge_gate.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    roles_raw = payload.get("roles", [])
    if not subject:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    if not isinstance(roles_raw, list):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token roles")

    return Principal(subject=subject, roles=frozenset(str(r) for r in roles_raw))


def require_roles(*required: str):
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Admin is allowed to bypass role checks (ops/debug).
        if principal.is_admin:
            return principal
        if not required_set.issubset(principal.roles):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# The directory endpoints are exempt from the cookie gate (the gate's own refresh
# calls them), so they are guarded here with role `internal_system` instead.
