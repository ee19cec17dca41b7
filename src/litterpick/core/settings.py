"""Application settings and configuration.

This module defines all configuration options for the LitterPick core service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the LitterPick core.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="LitterPick", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./litterpick.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Verification gate and consensus
    min_clears_to_verify: int = Field(default=5, alias="MIN_CLEARS_TO_VERIFY")
    min_verifications_needed: int = Field(default=3, alias="MIN_VERIFICATIONS_NEEDED")

    # Point table
    base_points_per_clear: int = Field(default=10, alias="BASE_POINTS_PER_CLEAR")
    streak_bonus_points: int = Field(default=5, alias="STREAK_BONUS_POINTS")
    first_in_area_bonus: int = Field(default=20, alias="FIRST_IN_AREA_BONUS")
    first_in_area_radius_km: float = Field(default=1.0, alias="FIRST_IN_AREA_RADIUS_KM")
    first_in_area_window_hours: int = Field(default=24, alias="FIRST_IN_AREA_WINDOW_HOURS")
    verification_bonus: int = Field(default=2, alias="VERIFICATION_BONUS")
    verified_report_bonus: int = Field(default=10, alias="VERIFIED_REPORT_BONUS")
    report_created_points: int = Field(default=0, alias="REPORT_CREATED_POINTS")

    # Claim expiry; only the maintenance sweep reads this, the core runs no timer.
    claim_timeout_minutes: int = Field(default=60 * 24, alias="CLAIM_TIMEOUT_MINUTES")

    # Leaderboards
    leaderboard_default_limit: int = Field(default=20, alias="LEADERBOARD_DEFAULT_LIMIT")
    leaderboard_max_limit: int = Field(default=100, alias="LEADERBOARD_MAX_LIMIT")
    weekly_window_days: int = Field(default=7, alias="WEEKLY_WINDOW_DAYS")
    monthly_window_days: int = Field(default=30, alias="MONTHLY_WINDOW_DAYS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.

        Returns:
            Database URL compatible with synchronous database drivers
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
