"""Process configuration read from environment variables.

Values are read once at startup (after ``load_dotenv()``) and passed
explicitly to the services that need them.
"""

import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Known weak value kept for local development only. Settings.validate()
# refuses to start with it outside development/test.
DEFAULT_DEV_SECRET = "your-secret-key"
DEVELOPMENT_ENVIRONMENTS = frozenset({"development", "dev", "local", "test"})

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class ConfigurationError(ValueError):
    """Configuration is unusable for the current environment."""


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    jwt_secret: str = DEFAULT_DEV_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiration_days: int = 7
    bcrypt_rounds: int = 12
    mongodb_uri: str = "mongodb://localhost:27017"
    database_name: str = "spiritsvault"
    store_timeout_seconds: float = 10.0
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_url: str = ""
    google_userinfo_url: str = GOOGLE_USERINFO_URL
    identity_timeout_seconds: float = 10.0
    cors_origins: str = "*"
    port: int = 8080

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in DEVELOPMENT_ENVIRONMENTS

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_DEV_SECRET

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            app_env=os.getenv("APP_ENV", "development"),
            jwt_secret=os.getenv("JWT_SECRET") or DEFAULT_DEV_SECRET,
            jwt_expiration_days=_int_env("JWT_EXPIRATION_DAYS", 7),
            bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 12),
            mongodb_uri=os.getenv("MONGODB_URI") or "mongodb://localhost:27017",
            database_name=os.getenv("DB_NAME") or "spiritsvault",
            store_timeout_seconds=_float_env("STORE_TIMEOUT_SECONDS", 10.0),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
            google_redirect_url=os.getenv("GOOGLE_REDIRECT_URL", ""),
            google_userinfo_url=os.getenv("GOOGLE_USERINFO_URL") or GOOGLE_USERINFO_URL,
            identity_timeout_seconds=_float_env("IDENTITY_TIMEOUT_SECONDS", 10.0),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            port=_int_env("PORT", 8080),
        )

    def validate(self) -> None:
        """Fail fast on configuration that must not reach production.

        Raises:
            ConfigurationError: default signing secret outside development,
                or out-of-range numeric settings
        """
        if self.uses_default_secret:
            if not self.is_development:
                raise ConfigurationError(
                    "JWT_SECRET environment variable is required when "
                    f"APP_ENV={self.app_env!r}. "
                    "Generate a secure key with: openssl rand -hex 32"
                )
            logger.warning(
                "Using the default development JWT secret. "
                "Set JWT_SECRET before deploying."
            )
        if self.jwt_expiration_days <= 0:
            raise ConfigurationError("JWT_EXPIRATION_DAYS must be positive")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigurationError("BCRYPT_ROUNDS must be between 4 and 31")
        if self.store_timeout_seconds <= 0:
            raise ConfigurationError("STORE_TIMEOUT_SECONDS must be positive")
        if not self.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID is not configured")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
