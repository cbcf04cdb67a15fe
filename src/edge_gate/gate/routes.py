"""
edge_gate.gate.routes

Static allow-list of paths that bypass the gate.

Every entry here is reachable without a credential. Adding an authenticated route
by mistake is an authorization bypass, so entries match by path segment: `/login`
covers `/login` and `/login/reset` but not `/login-history`. Entries ending in `/`
are plain prefixes.
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_EXEMPT_PATHS: tuple[str, ...] = (
    # Build output and static assets
    "/_next/static",
    "/_next/image",
    "/icons/",
    "/favicon.ico",
    "/robots.txt",
    "/manifest.json",
    "/logo.png",
    "/screenshot.png",
    # Login / registration surfaces
    "/login",
    "/register",
    "/warning",
    "/api/login",
    "/api/register",
    "/api/logout",
    # Scheduled jobs
    "/api/cron",
    # Directory refresh endpoints (the gate calls these itself)
    "/api/server-config",
    "/api/auth/status",
    # Probes
    "/healthz",
    "/readyz",
)


class RouteClassifier:
    def __init__(self, paths: Iterable[str] = DEFAULT_EXEMPT_PATHS) -> None:
        self._prefixes: list[str] = []
        self._segments: list[str] = []
        for p in paths:
            if not p.startswith("/"):
                raise ValueError(f"exempt path must be absolute: {p!r}")
            if p.endswith("/"):
                self._prefixes.append(p)
            else:
                self._segments.append(p)

    def with_paths(self, *paths: str) -> RouteClassifier:
        return RouteClassifier([*self._prefixes, *self._segments, *paths])

    def is_exempt(self, path: str) -> bool:
        # Dot segments could smuggle a gated route behind an exempt prefix.
        if "/../" in path or path.endswith("/.."):
            return False
        if any(path.startswith(p) for p in self._prefixes):
            return True
        return any(path == s or path.startswith(s + "/") for s in self._segments)
