"""Application settings and CORS configuration."""

import json
import os
from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Legacy single/numbered key variables still honored when GEMINI_API_KEYS is unset
LEGACY_GEMINI_KEY_VARS: tuple[str, ...] = (
    "GEMINI_API_KEY",
    "GEMINI_API_KEY_1",
    "GEMINI_API_KEY_2",
    "GEMINI_API_KEY_3",
)


def _split_list_value(v: object, field_name: str) -> list[str]:
    """Normalize a list, CSV string, or JSON array string into list[str]."""
    if isinstance(v, list):
        return [str(i).strip() for i in v if str(i).strip()]
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return []
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError as e:
                raise ValueError(
                    f"{field_name} must be a CSV list or JSON array string"
                ) from e
            if not isinstance(parsed, list):
                raise ValueError(f"{field_name} JSON must be a list")
            return [str(i).strip() for i in parsed if str(i).strip()]
        # CSV fallback
        return [i.strip() for i in s.split(",") if i.strip()]
    raise ValueError(f"Invalid {field_name} type; expected str or list[str]")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env"), env_file_encoding="utf-8")

    # App
    APP_NAME: str = "Ascend AI"
    ENVIRONMENT: str = "development"  # development | production | test

    # Supabase-issued access tokens (HS256 shared secret)
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    JWT_ALGORITHM: str = "HS256"

    # CORS
    # Accept list or CSV/JSON string from env; normalized to list[str] by validators
    CORS_ORIGINS: list[str] | str = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    ALLOW_CREDENTIALS: bool = True

    # Gemini credentials and models
    GEMINI_API_KEYS: list[str] | str = []
    FAST_MODEL: str = "gemini-2.5-flash"
    PRIORITY_MODEL: str = "gemini-2.5-pro"
    KEY_ROTATION: Literal["round_robin", "ordered"] = "round_robin"
    RESPONSE_STRATEGY: Literal["heuristic_text", "schema_first"] = "heuristic_text"
    UPSTREAM_STREAMING: bool = True
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Simulated streaming pacing for flat responses and the local fallback
    SIMULATED_STREAMING_ENABLED: bool = True
    STREAM_CHUNK_SIZE: int = 50
    STREAM_INTERVAL_MS: int = 20

    # Quotas and anti-abuse
    DAILY_USAGE_LIMIT: int = 3
    DEVICE_ACCOUNT_LIMIT: int = 3

    # Upstash Rate Limiting
    # REST URL and token for Upstash Redis; optional in development/test
    UPSTASH_REDIS_REST_URL: str | None = None
    UPSTASH_REDIS_REST_TOKEN: str | None = None

    # Rate limit settings (requests per window)
    RATE_LIMIT_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: object) -> list[str]:
        """Allow list, CSV string, or JSON array string for CORS origins."""
        return _split_list_value(v, "CORS_ORIGINS")

    @field_validator("GEMINI_API_KEYS", mode="before")
    @classmethod
    def assemble_gemini_keys(cls, v: object) -> list[str]:
        """Allow list, CSV string, or JSON array string for API keys."""
        return _split_list_value(v, "GEMINI_API_KEYS")

    @model_validator(mode="after")
    def _collect_legacy_gemini_keys(self) -> "Settings":
        """Fall back to GEMINI_API_KEY / GEMINI_API_KEY_1..3 when no list is set."""
        if isinstance(self.GEMINI_API_KEYS, str):
            self.GEMINI_API_KEYS = self.assemble_gemini_keys(self.GEMINI_API_KEYS)
        if not self.GEMINI_API_KEYS:
            keys = [os.getenv(name, "").strip() for name in LEGACY_GEMINI_KEY_VARS]
            # Preserve order, drop blanks and duplicates
            self.GEMINI_API_KEYS = list(dict.fromkeys(k for k in keys if k))
        return self

    @model_validator(mode="after")
    def _validate_cors_credentials(self) -> "Settings":
        """Ensure wildcard origins are not used when credentials are allowed."""
        # Normalize in case the union allows a stray string at runtime
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = self.assemble_cors_origins(self.CORS_ORIGINS)
        if self.ALLOW_CREDENTIALS and any(
            o.strip() == "*" for o in (self.CORS_ORIGINS or [])
        ):
            raise ValueError(
                "CORS configuration error: ALLOW_CREDENTIALS=True but "
                "CORS_ORIGINS contains '*'. Use explicit origins when credentials "
                "are allowed."
            )
        return self

    @property
    def gemini_keys(self) -> list[str]:
        """API keys as a list regardless of how they were supplied."""
        if isinstance(self.GEMINI_API_KEYS, str):
            return _split_list_value(self.GEMINI_API_KEYS, "GEMINI_API_KEYS")
        return list(self.GEMINI_API_KEYS)


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env not in {"development", "production", "test"}:
        raise ValueError("ENVIRONMENT must be 'development', 'production', or 'test'")

    if env == "production":
        env_file = ".env.prod"
    elif env == "development":
        env_file = ".env.dev"
    else:
        # test environment - no env file needed, use defaults
        env_file = ""

    # The Settings initializer accepts a runtime-only `_env_file` kwarg used by
    # pydantic-settings; mypy's stub doesn't allow this call argument.
    settings = Settings(_env_file=env_file or None)  # type: ignore[call-arg]

    # Production must be able to verify Supabase access tokens
    if env == "production" and not settings.SUPABASE_JWT_SECRET:
        raise RuntimeError("SUPABASE_JWT_SECRET must be set in production")
    return settings
