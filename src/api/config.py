"""Process-wide configuration, built once at startup."""

import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

VERSIONING_STRATEGIES = ("path", "header")


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration.

    Passed explicitly into ``create_app`` and from there into the auth layer.
    """

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    token_ttl: timedelta = timedelta(days=7)
    versioning: str = "path"
    default_version: str = "v1"
    vendor: str = "usersapi"
    bcrypt_rounds: int = 12
    mongo_url: str | None = None
    database_name: str = "usersapi"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.jwt_secret_key:
            raise ValueError(
                "JWT_SECRET_KEY environment variable is required. "
                "Generate a secure key with: openssl rand -hex 32"
            )
        if self.versioning not in VERSIONING_STRATEGIES:
            raise ValueError(
                f"API_VERSIONING must be one of {', '.join(VERSIONING_STRATEGIES)}, got {self.versioning!r}"
            )
        if self.token_ttl <= timedelta(0):
            raise ValueError("JWT_EXPIRATION_MINUTES must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load ``.env`` (if present) and read settings from the environment."""
        load_dotenv()

        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", ""),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_ttl=timedelta(minutes=int(os.getenv("JWT_EXPIRATION_MINUTES", str(7 * 24 * 60)))),
            versioning=os.getenv("API_VERSIONING", "path").lower(),
            default_version=os.getenv("API_DEFAULT_VERSION", "v1"),
            vendor=os.getenv("API_VENDOR", "usersapi"),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            mongo_url=os.getenv("MONGO_URL") or None,
            database_name=os.getenv("MONGODB_DATABASE", "usersapi"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
