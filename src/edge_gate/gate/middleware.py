"""
edge_gate.gate.middleware

HTTP middleware that runs the gate in front of every route.

Responsibilities:
- Ask the decision engine for a verdict using the request path and `auth` cookie.
- On allow, expose the username on `request.state` and continue.
- On deny, log the verdict and return the lifecycle's revoking response.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from edge_gate.gate.decision import Reason
from edge_gate.gate.wiring import Gate
from edge_gate.observability.logging import get_logger

log = get_logger(__name__)


class AuthGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # The gate is built at startup (see `edge_gate.api.app.create_app`).
        gate: Gate = request.app.state.gate
        decision = await gate.engine.decide(
            path=request.url.path,
            raw_cookie=request.cookies.get(gate.cookie_name),
        )

        if decision.allowed:
            request.state.username = decision.username
            if decision.reason == Reason.fail_open:
                log.warning("gate_fail_open", username=decision.username, failure=decision.failure)
            return await call_next(request)

        log.warning(
            "gate_denied",
            verdict=str(decision.verdict),
            reason=str(decision.reason),
            username=decision.username,
            stale=decision.stale,
            failure=decision.failure,
        )
        return gate.lifecycle.revoke(request, decision)


# --- Module Notes -----------------------------------------------------------
# Exempt routes reach the app with `request.state.username` set to None.
