"""
Test settings loading.
"""
from event_registry.core.config import Settings


class TestSettings:
    """Test Settings.from_env."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is configured."""
        for name in (
            "APP_ENV",
            "DATABASE_URL",
            "RATE_LIMIT_ENABLED",
            "RATE_LIMIT_MAX_REQUESTS",
            "RATE_LIMIT_WINDOW_SECONDS",
            "CORS_ORIGINS",
            "LOG_FILE",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.environment == "development"
        assert settings.debug is True
        assert settings.database_url == "sqlite:///./events.db"
        assert settings.rate_limit_enabled is True
        assert settings.rate_limit_max_requests == 100
        assert settings.rate_limit_window_seconds == 900
        assert settings.cors_origins == ("*",)
        assert settings.log_file is None

    def test_environment_overrides(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://app@db/events")
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        settings = Settings.from_env()

        assert settings.debug is False
        assert settings.database_url == "postgresql+psycopg://app@db/events"
        assert settings.rate_limit_enabled is False
        assert settings.rate_limit_max_requests == 5
        assert settings.cors_origins == ("https://a.example", "https://b.example")
