from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_ALIASES = {
    "prod": "prod",
    "production": "prod",
    "dev": "dev",
    "development": "dev",
    "test": "test",
}


class KitSettings(BaseSettings):
    """Centralized asset/runtime configuration pulled from environment/.env."""

    app_env: str = Field("dev", alias="APP_ENV")
    # Importable package whose install directory holds static/assets/vite_manifest.json
    app_name: str = Field("app", alias="APP_NAME")
    install_root: Optional[str] = Field(None, alias="INSTALL_ROOT")
    vite_dev_server: str = Field("http://localhost:5173", alias="VITE_DEV_SERVER")
    static_url_prefix: str = Field("/static", alias="STATIC_URL_PREFIX")
    inertia_version: str = Field("1", alias="INERTIA_VERSION")
    inertia_camelize_props: bool = Field(False, alias="INERTIA_CAMELIZE_PROPS")
    app_version: str = Field("dev", alias="APP_VERSION")
    json_logs: bool = Field(False, alias="JSON_LOGS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("app_env", mode="before")
    @classmethod
    def _normalize_env(cls, value: str | None) -> str:
        val = (value or "dev").strip().lower()
        # Unknown tags behave like development
        return _ENV_ALIASES.get(val, "dev")

    @field_validator("app_name", mode="before")
    @classmethod
    def _normalize_app_name(cls, value: str | None) -> str:
        val = (value or "app").strip()
        return val or "app"

    @field_validator("install_root", mode="before")
    @classmethod
    def _strip_install_root(cls, value: str | None) -> Optional[str]:
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("vite_dev_server", mode="before")
    @classmethod
    def _normalize_dev_server(cls, value: str | None) -> str:
        val = (value or "http://localhost:5173").strip().rstrip("/")
        return val or "http://localhost:5173"

    @field_validator("static_url_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: str | None) -> str:
        val = (value if value is not None else "/static").strip().strip("/")
        # StaticFiles is mounted at this prefix; a root mount would shadow every page route
        if not val:
            raise ValueError("STATIC_URL_PREFIX must name a sub-path such as /static, not the site root")
        return "/" + val

    @field_validator("inertia_version", mode="before")
    @classmethod
    def _normalize_version(cls, value) -> str:
        val = str(value if value is not None else "1").strip()
        return val or "1"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str:
        val = (value or "INFO").strip().upper()
        if val not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return "INFO"
        return val

    @field_validator("inertia_camelize_props", "json_logs", mode="before")
    @classmethod
    def _parse_bool(cls, value) -> bool:
        if isinstance(value, bool):
            return value
        if value is None or value == "":
            return False
        return str(value).strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_settings() -> KitSettings:
    return KitSettings()


def reset_settings_cache() -> None:
    """Testing helper to clear cached settings."""
    get_settings.cache_clear()
