"""
edge_gate.api.routers.session

Gated identity endpoint.

Responsibilities:
- Report who the gate let through (`/api/me`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from edge_gate.api.deps import gate_dep
from edge_gate.gate.wiring import Gate

router = APIRouter(prefix="/api", tags=["session"])


class MeResponse(BaseModel):
    username: str | None
    mode: str


@router.get("/me", response_model=MeResponse)
async def me(request: Request, gate: Gate = Depends(gate_dep)) -> MeResponse:
    # Only reachable with an allow verdict; shared-secret credentials may carry no username.
    return MeResponse(username=getattr(request.state, "username", None), mode=gate.engine.mode)
