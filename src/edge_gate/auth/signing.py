"""
edge_gate.auth.signing

HMAC-SHA256 signatures over usernames, and shared-secret comparison.

Responsibilities:
- Produce the hex signature the login surface embeds in the cookie.
- Verify a presented signature in constant time, returning False on any malformed input.
"""

from __future__ import annotations

import hashlib
import hmac


def sign_username(username: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), username.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(username: str, signature_hex: str, secret: str) -> bool:
    try:
        presented = bytes.fromhex(signature_hex)
        expected = hmac.new(secret.encode("utf-8"), username.encode("utf-8"), hashlib.sha256).digest()
    except (TypeError, ValueError):
        # ValueError covers bad hex and UnicodeEncodeError (lone surrogates).
        return False
    return hmac.compare_digest(presented, expected)


def secrets_match(presented: str, secret: str) -> bool:
    # Shared-secret mode compares the cookie password against the configured secret.
    try:
        return hmac.compare_digest(presented.encode("utf-8"), secret.encode("utf-8"))
    except UnicodeEncodeError:
        return False
