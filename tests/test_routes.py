"""
tests.test_routes

Route classifier allow-list.
"""

from __future__ import annotations

import pytest

from edge_gate.gate.routes import RouteClassifier


@pytest.mark.parametrize(
    "path",
    [
        "/_next/static/chunk.js",
        "/_next/image",
        "/icons/192.png",
        "/favicon.ico",
        "/robots.txt",
        "/manifest.json",
        "/login",
        "/login/reset",
        "/register",
        "/warning",
        "/api/login",
        "/api/logout",
        "/api/cron",
        "/api/server-config",
        "/api/auth/status",
        "/healthz",
    ],
)
def test_exempt(path: str) -> None:
    assert RouteClassifier().is_exempt(path)


@pytest.mark.parametrize(
    "path",
    [
        "/",
        "/api/me",
        "/api/detail",
        "/loginx",
        "/login-history",
        "/api/server-configs",
        "/api/auth/statuses",
        "/admin",
        "/login/../api/me",
        "/_next/static/../../api/me",
    ],
)
def test_not_exempt(path: str) -> None:
    assert not RouteClassifier().is_exempt(path)


def test_with_paths_extends_without_mutating() -> None:
    base = RouteClassifier()
    extended = base.with_paths("/public", "/docs/")
    assert extended.is_exempt("/public/terms")
    assert extended.is_exempt("/docs/anything")
    assert not base.is_exempt("/public")


def test_relative_entry_rejected() -> None:
    with pytest.raises(ValueError):
        RouteClassifier(["login"])
