"""MediPass configuration settings.

MediPassSettings is the single configuration object accepted by
create_app(). It is a plain dataclass (not env-coupled) so tests can
inject config without touching os.environ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from medipass.observability.logging import LOG_FORMATS, level_number
from medipass.sharing.model import DEFAULT_TTL_HOURS

DEFAULT_SHARE_BASE_URL = "https://medipass.app"
DEFAULT_CORS_ORIGINS: tuple[str, ...] = (
    "http://localhost:8081",
    "http://localhost:19006",
)


@dataclass(frozen=True, slots=True)
class MediPassSettings:
    """Configuration for the MediPass FastAPI application.

    All fields have defaults suitable for local development. Non-local
    environments must supply Supabase credentials.
    """

    # ── Environment ────────────────────────────────────────────────
    environment: str = "local"
    """One of: local, dev, staging, production."""

    # ── Supabase ───────────────────────────────────────────────────
    supabase_url: str = ""
    """Supabase project URL (e.g. https://xyz.supabase.co)."""

    supabase_service_role_key: str = ""
    """Service-role key for PostgREST calls. Never log this."""

    supabase_jwt_secret: str = ""
    """HS256 secret for access tokens. When empty, JWKS (RS256) is used."""

    # ── Sharing ────────────────────────────────────────────────────
    share_base_url: str = DEFAULT_SHARE_BASE_URL
    """Public origin used to build ``<origin>/share/<sharing id>`` links."""

    default_ttl_hours: int = DEFAULT_TTL_HOURS

    # ── CORS ───────────────────────────────────────────────────────
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    # ── Logging ────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"
    """json or console."""

    @property
    def is_local(self) -> bool:
        return self.environment == "local"

    def share_url(self, sharing_id: str) -> str:
        return f"{self.share_base_url.rstrip('/')}/share/{sharing_id}"

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if self.default_ttl_hours <= 0:
            errors.append("default_ttl_hours must be positive")
        if not self.share_base_url.startswith(("https://", "http://")):
            errors.append("share_base_url must be an http(s) origin")
        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of: {', '.join(LOG_FORMATS)}")
        try:
            level_number(self.log_level)
        except ValueError as exc:
            errors.append(str(exc))
        if not self.is_local:
            if not self.supabase_url:
                errors.append(f"{self.environment}: supabase_url is required")
            if not self.supabase_service_role_key:
                errors.append(
                    f"{self.environment}: supabase_service_role_key is required"
                )
            if self.share_base_url.startswith("http://"):
                errors.append(f"{self.environment}: share_base_url must use https")
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> MediPassSettings:
        """Build settings from environment variables.

        Tests should construct MediPassSettings directly.
        """
        if env is None:
            env = dict(os.environ)

        cors_raw = env.get("CORS_ORIGINS", "")
        cors = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            environment=env.get("ENVIRONMENT", "local"),
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            supabase_jwt_secret=env.get("SUPABASE_JWT_SECRET", ""),
            share_base_url=env.get("SHARE_BASE_URL", DEFAULT_SHARE_BASE_URL),
            default_ttl_hours=int(env.get("SHARE_DEFAULT_TTL_HOURS", DEFAULT_TTL_HOURS)),
            cors_origins=cors,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json"),
        )
