"""
edge_gate.gate.decision

Per-request authorization decision.

Responsibilities:
- Compose route exemption, credential decoding, signature/secret checks and the
  directory lookup into exactly one `Verdict`.
- Apply the configured fail policy when the directory state is unknown.

Checks run cheapest-first; only the directory lookup can do I/O, so obviously
unauthenticated traffic never triggers a refresh.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from edge_gate.auth.credentials import decode_credential
from edge_gate.auth.signing import secrets_match, verify_signature
from edge_gate.directory_clients.models import UserStatus
from edge_gate.gate.directory import DirectoryView
from edge_gate.gate.routes import RouteClassifier
from edge_gate.settings import AuthMode, FailPolicy


class Verdict(enum.StrEnum):
    allow = "Allow"
    deny_unauthenticated = "DenyUnauthenticated"
    deny_invalid_signature = "DenyInvalidSignature"
    deny_banned = "DenyBanned"
    deny_deleted = "DenyDeleted"
    deny_config_unavailable = "DenyConfigUnavailable"

    @property
    def is_allow(self) -> bool:
        return self is Verdict.allow

    @property
    def error_kind(self) -> str:
        # Stable, machine-readable names exposed to API clients.
        return self.value.removeprefix("Deny") if not self.is_allow else ""


class Reason(enum.StrEnum):
    exempt = "exempt"
    ok = "ok"
    missing_secret = "missing_secret"
    no_credential = "no_credential"
    malformed_credential = "malformed_credential"
    wrong_password = "wrong_password"
    incomplete_credential = "incomplete_credential"
    bad_signature = "bad_signature"
    deleted = "deleted"
    banned = "banned"
    directory_unavailable = "directory_unavailable"
    fail_open = "fail_open"


@dataclass(frozen=True, slots=True)
class Decision:
    verdict: Verdict
    reason: Reason
    username: str | None = None
    # True when the directory answer came from an expired snapshot.
    stale: bool = False
    # "UpstreamTimeout" / "UpstreamError" when a directory refresh just failed.
    failure: str | None = None

    @property
    def allowed(self) -> bool:
        return self.verdict.is_allow


class DecisionEngine:
    def __init__(
        self,
        *,
        classifier: RouteClassifier,
        directory: DirectoryView | None,
        secret: str | None,
        mode: AuthMode,
        fail_policy: FailPolicy = "closed",
    ) -> None:
        if mode == "multi_user" and directory is None:
            raise ValueError("multi_user mode requires a directory view")
        self._classifier = classifier
        self._directory = directory
        self._secret = secret or None
        self._mode = mode
        self._fail_policy = fail_policy

    @property
    def mode(self) -> AuthMode:
        return self._mode

    async def decide(self, *, path: str, raw_cookie: str | None) -> Decision:
        if self._classifier.is_exempt(path):
            return Decision(Verdict.allow, Reason.exempt)

        if self._secret is None:
            return Decision(Verdict.deny_config_unavailable, Reason.missing_secret)

        credential = decode_credential(raw_cookie)
        if credential is None:
            reason = Reason.malformed_credential if raw_cookie else Reason.no_credential
            return Decision(Verdict.deny_unauthenticated, reason)

        if self._mode == "shared_secret":
            # No user directory in this mode, so no ban/deletion check follows.
            if credential.password is None or not secrets_match(credential.password, self._secret):
                return Decision(Verdict.deny_unauthenticated, Reason.wrong_password)
            return Decision(Verdict.allow, Reason.ok, username=credential.username)

        username, signature = credential.username, credential.signature
        if not username or not signature:
            return Decision(Verdict.deny_unauthenticated, Reason.incomplete_credential, username=username)
        if not verify_signature(username, signature, self._secret):
            return Decision(Verdict.deny_invalid_signature, Reason.bad_signature, username=username)

        assert self._directory is not None
        found = await self._directory.lookup(username)
        extra = {"username": username, "stale": found.stale, "failure": found.failure}
        if found.status == UserStatus.deleted:
            return Decision(Verdict.deny_deleted, Reason.deleted, **extra)
        if found.status == UserStatus.banned:
            return Decision(Verdict.deny_banned, Reason.banned, **extra)
        if found.status == UserStatus.unknown:
            if self._fail_policy == "open":
                return Decision(Verdict.allow, Reason.fail_open, **extra)
            return Decision(Verdict.deny_config_unavailable, Reason.directory_unavailable, **extra)
        return Decision(Verdict.allow, Reason.ok, **extra)


# --- Module Notes -----------------------------------------------------------
# The engine is stateless per call; all shared state lives in the directory view.
