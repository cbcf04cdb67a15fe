"""
edge_gate.directory_clients.normalize

Normalization of upstream user lists.

Responsibilities:
- Locate the user list inside a directory document (`UserConfig.Users`, `Users`, `users`).
- Map alias fields (`username`/`name`/`userName`, `banned`/`disabled`/`status`,
  `role`/`userRole`) onto `DirectoryEntry`.
- Coerce the many encodings of "banned" into a single boolean.

Unrecognized shapes yield None / are dropped; nothing further is guessed.
"""

from __future__ import annotations

from typing import Any

from edge_gate.directory_clients.models import DirectoryEntry

_USERNAME_KEYS = ("username", "name", "userName")
_BANNED_KEYS = ("banned", "disabled", "status")
_ROLE_KEYS = ("role", "userRole")
_BANNED_STRINGS = frozenset({"1", "true", "banned", "disabled"})


def canonical_username(username: str) -> str:
    # Applied both when building snapshots and when looking a cookie username up.
    return username.strip().lower()


def coerce_banned(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int | float):
        return raw == 1
    if isinstance(raw, str):
        return raw.strip().lower() in _BANNED_STRINGS
    return False


def extract_user_list(document: Any) -> list[Any] | None:
    if not isinstance(document, dict):
        return None
    user_config = document.get("UserConfig")
    candidates = (
        user_config.get("Users") if isinstance(user_config, dict) else None,
        document.get("Users"),
        document.get("users"),
    )
    for candidate in candidates:
        if candidate is not None:
            return candidate if isinstance(candidate, list) else None
    return None


def normalize_users(raw_users: list[Any]) -> list[DirectoryEntry]:
    entries: list[DirectoryEntry] = []
    for raw in raw_users:
        if not isinstance(raw, dict):
            continue
        username = _first_present(raw, _USERNAME_KEYS)
        username = str(username).strip() if username is not None else ""
        if not username:
            continue
        role = _first_present(raw, _ROLE_KEYS)
        entries.append(
            DirectoryEntry(
                username=username,
                banned=coerce_banned(_first_present(raw, _BANNED_KEYS)),
                role=str(role) if role is not None else None,
            )
        )
    return entries


def _first_present(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


# --- Module Notes -----------------------------------------------------------
# Used on both sides of the wire: the server-config endpoint sanitizes stored users
# with it, and the snapshot cache re-normalizes whatever the endpoint returned.
