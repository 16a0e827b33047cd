from __future__ import annotations

import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from stash_api.domain.exceptions import ConfigurationError


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _mode_env(name: str, mode: str, default: str = "") -> str:
    """Read ``NAME_LIVE``/``NAME_TEST`` depending on the Stripe mode, falling back to ``NAME``."""
    suffix = "LIVE" if mode == "live" else "TEST"
    return _env(f"{name}_{suffix}") or _env(name) or default


def _json(name: str, value: str | None) -> dict:
    if not value:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{name} is not valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError(f"{name} must be a JSON object.")
    return parsed


def _csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    stripe_mode: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_price_catalog: dict
    stripe_api_version: str
    openai_api_key: str
    openai_model: str
    openai_assistant_id: str
    openai_run_poll_interval_seconds: float
    openai_run_max_polls: int
    openai_timeout_seconds: float
    openai_max_retries: int
    google_client_id: str
    jwt_secret: str
    jwt_access_ttl_minutes: int
    database_url: str
    log_level: str
    cors_allow_origins: list[str]
    host: str
    port: int


def get_settings() -> Settings:
    mode = (_env("STRIPE_MODE", "test") or "test").strip().lower()
    if mode not in {"test", "live"}:
        raise ConfigurationError(f"STRIPE_MODE must be 'test' or 'live', got '{mode}'.")

    catalog_name = "STRIPE_PRICE_CATALOG_LIVE" if mode == "live" else "STRIPE_PRICE_CATALOG_TEST"
    return Settings(
        stripe_mode=mode,
        stripe_secret_key=_mode_env("STRIPE_SECRET_KEY", mode),
        stripe_webhook_secret=_mode_env("STRIPE_WEBHOOK_SECRET", mode),
        stripe_price_catalog=_json(catalog_name, _mode_env("STRIPE_PRICE_CATALOG", mode)),
        stripe_api_version=_env("STRIPE_API_VERSION", "2024-06-20"),
        openai_api_key=_env("OPENAI_API_KEY", ""),
        openai_model=_env("OPENAI_MODEL", "gpt-4o-mini"),
        openai_assistant_id=_env("OPENAI_ASSISTANT_ID", ""),
        openai_run_poll_interval_seconds=float(_env("OPENAI_RUN_POLL_INTERVAL_SECONDS", "1")),
        openai_run_max_polls=int(_env("OPENAI_RUN_MAX_POLLS", "60")),
        openai_timeout_seconds=float(_env("OPENAI_TIMEOUT_SECONDS", "30")),
        openai_max_retries=int(_env("OPENAI_MAX_RETRIES", "2")),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        jwt_secret=_env("JWT_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "60")),
        database_url=_env("DATABASE_URL", ""),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        cors_allow_origins=_csv(_env("CORS_ALLOW_ORIGINS", "*")),
        host=_env("HOST", "0.0.0.0"),
        port=int(_env("PORT", "8080")),
    )
