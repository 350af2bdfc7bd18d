import json
import os
import threading
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


load_dotenv()


def _parse_list(name: str, raw_value: str) -> list[str]:
    """Parse an env list given either as CSV or as a JSON array."""
    if raw_value.startswith("["):
        try:
            parsed_list = json.loads(raw_value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{name} JSON is malformed: {exc}") from exc
        if not isinstance(parsed_list, list):
            raise ValueError(f"{name} JSON must be an array")
        return [item.strip() for item in parsed_list if isinstance(item, str) and item.strip()]
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def _parse_bool(name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean value")


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_name: str = Field(default="Tenant CMS Backend")
    debug: bool = Field(default=False)
    database_url: str = Field(default="")
    allowed_origins: list[str] = Field(default_factory=list)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_recycle: int = Field(default=1800)
    db_pool_pre_ping: bool = Field(default=True)
    secret_key: str | None = Field(default=None)
    access_token_expire_minutes: int = Field(default=60)
    algorithm: str = Field(default="HS256")
    # Header spellings accepted on the public path, compared case-insensitively
    tenant_header_names: list[str] = Field(default_factory=lambda: ["x-tenant-slug"])
    tenant_cookie_name: str = Field(default="cms-tenant")
    public_forbidden_filter_paths: list[str] = Field(
        default_factory=lambda: ["tenant.slug", "tenant.domain"]
    )
    multi_tenant_create_fallback: Literal["first", "reject"] = Field(default="first")

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY", "").strip()
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set")

        raw_allowed_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
        if not raw_allowed_origins:
            raise ValueError("ALLOWED_ORIGINS environment variable must be set")

        allowed_origins = _parse_list("ALLOWED_ORIGINS", raw_allowed_origins)
        if not allowed_origins:
            raise ValueError("ALLOWED_ORIGINS must contain at least one origin")

        if "*" in allowed_origins:
            raise ValueError(
                "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
            )

        for origin in allowed_origins:
            parsed = urlparse(origin)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise ValueError(
                    "ALLOWED_ORIGINS must contain valid http/https origins with host"
                )

        database_url = os.getenv("DATABASE_URL", "").strip()
        if not database_url:
            raise ValueError("DATABASE_URL environment variable must be set")

        parsed_db = urlparse(database_url)
        if parsed_db.scheme != "postgresql+asyncpg":
            raise ValueError("DATABASE_URL must start with 'postgresql+asyncpg://'")
        if not parsed_db.hostname:
            raise ValueError("DATABASE_URL must include hostname")

        db_pool_size = int(os.getenv("DB_POOL_SIZE", cls.model_fields["db_pool_size"].default))
        if db_pool_size <= 0:
            raise ValueError("DB_POOL_SIZE must be greater than 0")

        db_max_overflow = int(
            os.getenv("DB_MAX_OVERFLOW", cls.model_fields["db_max_overflow"].default)
        )
        if db_max_overflow < 0:
            raise ValueError("DB_MAX_OVERFLOW must be greater than or equal to 0")

        db_pool_recycle = int(
            os.getenv("DB_POOL_RECYCLE", cls.model_fields["db_pool_recycle"].default)
        )
        if db_pool_recycle <= 0:
            raise ValueError("DB_POOL_RECYCLE must be greater than 0")

        db_pool_pre_ping = _parse_bool(
            "DB_POOL_PRE_PING",
            os.getenv("DB_POOL_PRE_PING", str(cls.model_fields["db_pool_pre_ping"].default)),
        )

        raw_header_names = os.getenv("TENANT_HEADER_NAMES", "").strip()
        if raw_header_names:
            tenant_header_names = [
                name.lower() for name in _parse_list("TENANT_HEADER_NAMES", raw_header_names)
            ]
            if not tenant_header_names:
                raise ValueError("TENANT_HEADER_NAMES must contain at least one header")
        else:
            tenant_header_names = ["x-tenant-slug"]

        raw_forbidden_paths = os.getenv("PUBLIC_FORBIDDEN_FILTER_PATHS", "").strip()
        if raw_forbidden_paths:
            forbidden_paths = _parse_list("PUBLIC_FORBIDDEN_FILTER_PATHS", raw_forbidden_paths)
        else:
            forbidden_paths = ["tenant.slug", "tenant.domain"]

        fallback = os.getenv("MULTI_TENANT_CREATE_FALLBACK", "first").strip().lower()
        if fallback not in {"first", "reject"}:
            raise ValueError("MULTI_TENANT_CREATE_FALLBACK must be 'first' or 'reject'")

        tenant_cookie_name = os.getenv(
            "TENANT_COOKIE_NAME", cls.model_fields["tenant_cookie_name"].default
        ).strip()
        if not tenant_cookie_name:
            raise ValueError("TENANT_COOKIE_NAME must not be empty")

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            database_url=database_url,
            allowed_origins=allowed_origins,
            secret_key=secret_key,
            access_token_expire_minutes=int(
                os.getenv(
                    "ACCESS_TOKEN_EXPIRE_MINUTES",
                    cls.model_fields["access_token_expire_minutes"].default,
                )
            ),
            algorithm=os.getenv("ALGORITHM", cls.model_fields["algorithm"].default),
            db_pool_size=db_pool_size,
            db_max_overflow=db_max_overflow,
            db_pool_recycle=db_pool_recycle,
            db_pool_pre_ping=db_pool_pre_ping,
            tenant_header_names=tenant_header_names,
            tenant_cookie_name=tenant_cookie_name,
            public_forbidden_filter_paths=forbidden_paths,
            multi_tenant_create_fallback=fallback,
        )


# Settings are built lazily so importing this module never validates the environment
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first access builds a single
    instance. The instance is immutable configuration for the process lifetime
    and is handed to resolvers and services through their constructors.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
