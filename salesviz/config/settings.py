"""
Sales Visualization Platform
Centralized Configuration Management

Pydantic settings with environment variable support, grouped by subsystem.
"""

from functools import lru_cache
from typing import Dict, List, Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PALETTE = ["#60a5fa", "#8b5cf6", "#10b981", "#f59e0b", "#ef4444", "#06b6d4"]

DEFAULT_SALESPERSON_COLORS = {
    "松澤": "#60a5fa",
    "坂口": "#10b981",
    "斉藤": "#f59e0b",
    "泉水": "#8b5cf6",
}


class DatabaseSettings(BaseSettings):
    """PostgreSQL Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="sales_dashboard", alias="POSTGRES_DB", description="Database name")
    user: str = Field(default="sales", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Full URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise asyncpg from host/port"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class KafkaSettings(BaseSettings):
    """Change Notification Stream Configuration"""

    model_config = SettingsConfigDict(env_prefix="KAFKA_")

    bootstrap_servers: str = Field(default="localhost:9092", description="Kafka bootstrap servers")
    auto_offset_reset: str = Field(default="latest", description="Auto offset reset policy")
    topics_changes: str = Field(default="sales_records_changes", description="Record change topic")
    reconnect_delay_seconds: float = Field(default=5.0, description="Delay before resubscribing")
    enabled: bool = Field(default=True, description="Subscribe to change notifications")


class MonitoringSettings(BaseSettings):
    """Monitoring and Observability Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class DashboardSettings(BaseSettings):
    """Dashboard View Configuration"""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    top_n: int = Field(default=5, ge=1, description="Size of top-N rankings")
    recent_limit: int = Field(default=10, ge=0, description="Number of recent transactions shown")
    palette: List[str] = Field(default=DEFAULT_PALETTE, min_length=1, description="Cyclic color palette")
    salesperson_colors: Dict[str, str] = Field(
        default=DEFAULT_SALESPERSON_COLORS,
        description="Fixed colors for known salespeople",
    )
    display_url: Optional[str] = Field(default=None, description="Public URL of the dashboard")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="sales-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
