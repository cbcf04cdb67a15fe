"""
edge_gate.auth.credentials

Cookie credential codec.

Responsibilities:
- Decode the raw `auth` cookie value into a `Credential` without ever raising.
- Encode a `Credential` into the cookie value the login surface sets.

Wire format: URL-encoded JSON object with optional string fields
`username`, `password`, `signature`. Values that were URL-encoded twice by
older clients are accepted.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote, unquote

from edge_gate.auth.models import Credential

_FIELDS = ("username", "password", "signature")
MAX_COOKIE_LENGTH = 4096


def encode_credential(credential: Credential) -> str:
    payload = {k: getattr(credential, k) for k in _FIELDS if getattr(credential, k) is not None}
    return quote(json.dumps(payload, separators=(",", ":")), safe="")


def decode_credential(raw: str | None) -> Credential | None:
    """
    Return None for an absent cookie and for any value that is not a JSON object.

    Callers that need to tell "no cookie" from "garbage cookie" check `raw` themselves;
    both are anonymous, the latter is also cleared.
    """

    if not raw:
        return None

    payload = _parse(raw)
    if payload is None:
        return None

    fields = {k: _str_or_none(payload.get(k)) for k in _FIELDS}
    if not any(fields.values()):
        return None
    return Credential(**fields)


def _parse(raw: str) -> dict[str, Any] | None:
    # Browsers cap a cookie at ~4 KB; anything longer is not a credential we issued.
    if len(raw) > MAX_COOKIE_LENGTH:
        return None
    candidate = raw
    # One round for the normal encoding, one more for double-encoded legacy values.
    for _ in range(2):
        candidate = unquote(candidate)
        try:
            value = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        return value if isinstance(value, dict) else None
    return None


def _str_or_none(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        # JSON escapes can smuggle lone surrogates that no UTF-8 consumer accepts.
        value.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return value


# --- Module Notes -----------------------------------------------------------
# The decoder is on the hot path of every gated request and must stay free of I/O.
