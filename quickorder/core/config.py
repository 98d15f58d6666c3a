"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend credentials are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except the Firestore credentials,
    which are required when database_backend is 'firestore'.
    """

    # App
    app_name: str = "quickorder"
    app_version: str = "1.0.0"
    debug: bool = False

    # Document store: "memory" (single process, dev/tests) or "firestore" (REST API)
    database_backend: str = "memory"
    # How often Firestore-backed subscriptions re-run their query (seconds).
    snapshot_poll_interval_seconds: float = 2.0

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    # Audience for Firebase ID token verification; defaults to the service account project.
    firebase_project_id: str | None = None

    # Identity: accept raw claims instead of a verified ID token. Never enable in production.
    identity_allow_unverified_claims: bool = False

    # Root admins (comma-separated). Phones are compared on their last 10 digits.
    root_admin_emails: str = "admin@example.com"
    root_admin_phones: str = "9876543210"

    # Session
    role_preference_cookie: str = "qo_role_pref"
    session_idle_seconds: int = 3600

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    rate_limit_enabled: bool = True

    # Redis pub/sub for cross-worker change notifications
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate the document store backend and its credentials.

        - memory: nothing required.
        - firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        """
        if self.database_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'memory' or 'firestore', got: {self.database_backend!r}"
            )
        if self.snapshot_poll_interval_seconds <= 0:
            raise ValueError("snapshot_poll_interval_seconds must be positive")
        return self

    @property
    def root_admin_email_list(self) -> list[str]:
        """Root admin emails, lowercased."""
        return [e.lower() for e in _split_csv(self.root_admin_emails)]

    @property
    def root_admin_phone_list(self) -> list[str]:
        return _split_csv(self.root_admin_phones)

    @property
    def allowed_origin_list(self) -> list[str]:
        return _split_csv(self.allowed_origins)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
