import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Application settings, read from environment variables by ``from_env``."""

    project_name: str = "Event Management API"
    api_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str | None = None

    database_url: str = "sqlite:///./events.db"
    # Seconds a SQLite connection waits on a locked database.
    database_timeout: float = 15.0
    sql_echo: bool = False

    redis_url: str = "redis://localhost:6379/0"
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    cors_origins: tuple[str, ...] = ("*",)

    @property
    def debug(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            project_name=os.getenv("PROJECT_NAME", cls.project_name),
            api_version=os.getenv("API_VERSION", cls.api_version),
            environment=os.getenv("APP_ENV", cls.environment),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            log_file=os.getenv("LOG_FILE") or None,
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_timeout=float(os.getenv("DATABASE_TIMEOUT", str(cls.database_timeout))),
            sql_echo=_env_flag("SQL_ECHO", "false"),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", "true"),
            rate_limit_max_requests=int(
                os.getenv("RATE_LIMIT_MAX_REQUESTS", str(cls.rate_limit_max_requests))
            ),
            rate_limit_window_seconds=int(
                os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(cls.rate_limit_window_seconds))
            ),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )
