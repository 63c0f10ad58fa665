"""
Application settings.

Settings are loaded once at process start (``Settings.from_env``) and then
passed by reference to whatever needs them. Nothing outside this module
reads the environment.
"""

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Top-level configuration model."""

    # Admin session
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    jwt_secret: Optional[str] = None
    session_max_age: int = 24 * 60 * 60
    app_env: str = "development"

    # Backup
    backup_api_key: Optional[str] = None
    google_service_account_key: Optional[str] = None
    google_backup_spreadsheet_id: Optional[str] = None

    # Email
    brevo_api_key: Optional[str] = None
    brevo_api_url: str = BREVO_API_URL
    mail_from: str = "noreply@kateripharmacy.com"
    mail_from_name: str = "Kateri Pharmacy"
    admin_email: str = "admin@kateripharmacy.com"
    admin_dashboard_url: str = "http://localhost:3000/admin/web-orders"

    # Document store
    store_backend: Literal["minio", "memory"] = "minio"
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    minio_bucket: str = "pharmacy-desk"

    # Uploads
    uploads_dir: str = "public/uploads"
    uploads_url_prefix: str = "/uploads"

    # Logging
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @property
    def cookie_secure(self) -> bool:
        return self.app_env == "production"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests).
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            admin_username=env.get("ADMIN_USERNAME") or None,
            admin_password=env.get("ADMIN_PASSWORD") or None,
            jwt_secret=env.get("JWT_SECRET") or None,
            session_max_age=int(
                env.get("SESSION_MAX_AGE", defaults.session_max_age)
            ),
            app_env=env.get("APP_ENV", defaults.app_env),
            backup_api_key=env.get("BACKUP_API_KEY") or None,
            google_service_account_key=(
                env.get("GOOGLE_SERVICE_ACCOUNT_KEY") or None
            ),
            google_backup_spreadsheet_id=(
                env.get("GOOGLE_BACKUP_SPREADSHEET_ID") or None
            ),
            brevo_api_key=env.get("BREVO_API_KEY") or None,
            brevo_api_url=env.get("BREVO_API_URL", defaults.brevo_api_url),
            mail_from=(
                env.get("MAIL_FROM")
                or env.get("FROM_EMAIL")
                or defaults.mail_from
            ),
            mail_from_name=env.get("MAIL_FROM_NAME", defaults.mail_from_name),
            admin_email=env.get("ADMIN_EMAIL") or defaults.admin_email,
            admin_dashboard_url=env.get(
                "ADMIN_DASHBOARD_URL", defaults.admin_dashboard_url
            ),
            store_backend=env.get("STORE_BACKEND", defaults.store_backend),
            minio_endpoint=env.get("MINIO_ENDPOINT", defaults.minio_endpoint),
            minio_access_key=env.get(
                "MINIO_ROOT_USER", defaults.minio_access_key
            ),
            minio_secret_key=env.get(
                "MINIO_ROOT_PASSWORD", defaults.minio_secret_key
            ),
            minio_secure=_flag(env.get("MINIO_SECURE")),
            minio_bucket=env.get("MINIO_BUCKET_NAME", defaults.minio_bucket),
            uploads_dir=env.get("UPLOADS_DIR", defaults.uploads_dir),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
            log_format=env.get("LOG_FORMAT", defaults.log_format),
        )


def setup_logging(settings: Settings) -> None:
    """Configure logging from the loaded settings."""
    numeric_level = getattr(logging, settings.log_level, None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {settings.log_level}, defaulting to INFO")
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=settings.log_format,
        force=True,  # Override any existing configuration
    )

    # Suppress noisy Google API cache warnings
    logging.getLogger("googleapiclient.discovery_cache").setLevel(
        logging.ERROR
    )
