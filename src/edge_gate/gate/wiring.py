"""
edge_gate.gate.wiring

Composition of the gate from settings.

Responsibilities:
- Build exactly one directory view, decision engine and lifecycle per process.
- Keep the directory refresh endpoints on the exempt list whatever their configured path.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from edge_gate.directory_clients.internal_http import HttpDirectorySource, HttpStatusSource
from edge_gate.gate.decision import DecisionEngine
from edge_gate.gate.directory import DirectorySnapshotCache, DirectoryView, StatusCheckCache
from edge_gate.gate.lifecycle import CredentialLifecycle
from edge_gate.gate.routes import RouteClassifier
from edge_gate.settings import Settings


@dataclass(frozen=True, slots=True)
class Gate:
    engine: DecisionEngine
    lifecycle: CredentialLifecycle
    directory: DirectoryView | None
    cookie_name: str


def build_directory(*, settings: Settings, http: httpx.AsyncClient) -> DirectoryView:
    if settings.directory_strategy == "status":
        return StatusCheckCache(
            source=HttpStatusSource(settings=settings, http=http),
            ttl_seconds=settings.directory_ttl_seconds,
        )
    return DirectorySnapshotCache(
        source=HttpDirectorySource(settings=settings, http=http),
        ttl_seconds=settings.directory_ttl_seconds,
        track_existence=settings.directory_tracks_existence,
    )


def build_gate(*, settings: Settings, directory: DirectoryView | None) -> Gate:
    classifier = RouteClassifier().with_paths(
        settings.directory_path,
        settings.status_path,
        settings.login_path,
        settings.warning_path,
        *settings.extra_exempt_paths,
    )
    mode = settings.resolved_auth_mode
    engine = DecisionEngine(
        classifier=classifier,
        # Shared-secret mode never consults the directory.
        directory=directory if mode == "multi_user" else None,
        secret=settings.auth_secret,
        mode=mode,
        fail_policy=settings.fail_policy,
    )
    lifecycle = CredentialLifecycle(
        cookie_name=settings.cookie_name,
        login_path=settings.login_path,
        warning_path=settings.warning_path,
    )
    return Gate(engine=engine, lifecycle=lifecycle, directory=directory, cookie_name=settings.cookie_name)
