"""
edge_gate.gate.lifecycle

Credential revocation on deny.

Responsibilities:
- Turn a deny `Decision` into the client-facing response: a login redirect for
  pages, a status code with a short JSON body for `/api/*`.
- Delete the credential cookie under every scope it may have been set with.

The cookie's original Domain attribute is unknown at this point, so one deletion
per plausible scope is emitted: host-only on `/`, and, for named hosts, the full
host and its registrable domain.
"""

from __future__ import annotations

import ipaddress
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from edge_gate.gate.decision import Decision, Reason, Verdict

_API_STATUS: dict[Verdict, int] = {
    Verdict.deny_unauthenticated: HTTP_401_UNAUTHORIZED,
    Verdict.deny_invalid_signature: HTTP_401_UNAUTHORIZED,
    Verdict.deny_banned: HTTP_403_FORBIDDEN,
    Verdict.deny_deleted: HTTP_403_FORBIDDEN,
    Verdict.deny_config_unavailable: HTTP_403_FORBIDDEN,
}

_MESSAGES: dict[Verdict, str] = {
    Verdict.deny_unauthenticated: "Not signed in or session expired",
    Verdict.deny_invalid_signature: "Credential signature is invalid",
    Verdict.deny_banned: "This account has been banned",
    Verdict.deny_deleted: "This account no longer exists",
    Verdict.deny_config_unavailable: "Authorization is temporarily unavailable",
}

# Query-string hint shown by the login page.
_LOGIN_ERROR_CODES: dict[Verdict, str] = {
    Verdict.deny_banned: "banned",
    Verdict.deny_deleted: "deleted",
    Verdict.deny_config_unavailable: "unavailable",
}


def cookie_domains(host: str | None) -> list[str | None]:
    """
    Domains to delete the credential under; None stands for a host-only cookie.
    """

    domains: list[str | None] = [None]
    if not host or host == "localhost" or _is_ip(host):
        return domains
    domains.append(host)
    labels = host.split(".")
    if len(labels) > 2:
        domains.append(".".join(labels[-2:]))
    return domains


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


class CredentialLifecycle:
    def __init__(
        self,
        *,
        cookie_name: str = "auth",
        login_path: str = "/login",
        warning_path: str = "/warning",
        api_prefix: str = "/api/",
    ) -> None:
        self._cookie_name = cookie_name
        self._login_path = login_path
        self._warning_path = warning_path
        self._api_prefix = api_prefix

    def is_api(self, path: str) -> bool:
        return path.startswith(self._api_prefix)

    def revoke(self, request: Request, decision: Decision) -> Response:
        if decision.allowed:
            raise ValueError("revoke() called for an allow decision")
        if self.is_api(request.url.path):
            response: Response = self._api_response(decision)
        else:
            response = RedirectResponse(self._redirect_target(request, decision))
        self.clear_credential(response, host=request.url.hostname)
        return response

    def clear_credential(self, response: Response, *, host: str | None) -> None:
        for domain in cookie_domains(host):
            response.delete_cookie(self._cookie_name, path="/", domain=domain, samesite="lax")

    def _api_response(self, decision: Decision) -> JSONResponse:
        body: dict[str, str] = {
            "error": decision.verdict.error_kind,
            "message": _MESSAGES[decision.verdict],
        }
        if decision.failure:
            body["reason"] = decision.failure
        return JSONResponse(
            body,
            status_code=_API_STATUS[decision.verdict],
            headers={"Cache-Control": "no-store"},
        )

    def _redirect_target(self, request: Request, decision: Decision) -> str:
        if decision.reason == Reason.missing_secret:
            # No credential can satisfy a gate without a secret; send the operator hint.
            return self._warning_path

        original = request.url.path
        if request.url.query:
            original = f"{original}?{request.url.query}"
        params = {"redirect": original}
        code = _LOGIN_ERROR_CODES.get(decision.verdict)
        if code is not None:
            params["error"] = code
        return f"{self._login_path}?{urlencode(params)}"


# --- Module Notes -----------------------------------------------------------
# `/api/logout` reuses `clear_credential` so a voluntary logout clears the same scopes.
