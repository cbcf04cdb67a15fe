"""
edge_gate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the gate and its endpoints.
- Hide secrets from repr/logging (shared auth secret, internal JWT secret).
- Resolve the authentication mode from explicit config or the storage type.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

AuthMode = Literal["shared_secret", "multi_user"]
FailPolicy = Literal["closed", "open"]


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev, except the auth secret which has no default
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="EDGE_GATE_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "edge-gate"
    log_level: str = "INFO"
    site_name: str = "Site"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Credential verification. A missing secret is itself an authorization outcome.
    auth_secret: str | None = Field(default=None, repr=False)
    auth_mode: AuthMode | None = None
    storage_type: Literal["localstorage", "d1", "redis", "upstash"] = "localstorage"
    cookie_name: str = "auth"

    # Directory snapshot cache
    fail_policy: FailPolicy = "closed"
    directory_strategy: Literal["bulk", "status"] = "bulk"
    directory_base_url: str = "http://127.0.0.1:8080"
    directory_path: str = "/api/server-config"
    status_path: str = "/api/auth/status"
    directory_ttl_seconds: float = Field(default=15.0, gt=0)
    directory_timeout_seconds: float = Field(default=3.0, gt=0)
    # Off when the directory lists only users with ban state rather than every account.
    directory_tracks_existence: bool = True

    # Redirect surfaces and operator-provided exemptions.
    login_path: str = "/login"
    warning_path: str = "/warning"
    extra_exempt_paths: list[str] = Field(default_factory=list)

    # Internal bearer tokens guarding the directory endpoints.
    jwt_alg: str = "HS256"
    jwt_issuer: str = "edge-gate"
    jwt_audience: str = "edge-gate-internal"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./edge_gate.db"

    @property
    def resolved_auth_mode(self) -> AuthMode:
        if self.auth_mode is not None:
            return self.auth_mode
        # Browser-local storage has no user directory; only the shared password exists.
        return "shared_secret" if self.storage_type == "localstorage" else "multi_user"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `auth_secret` doubles as the shared password (shared_secret mode) and the HMAC key
# for per-user signatures (multi_user mode). It never leaves the server.
