"""
Configuration module for DiffAgent.

Loads environment variables and provides centralized settings.
Component-level configuration (pattern tables, risk tables) lives next to
the component and is derived from these settings at construction time.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Values may also come from a local .env file.
    """

    # Application
    ENVIRONMENT: str = Field(default="development")

    # Input limits
    MAX_DIFF_SIZE_BYTES: int = Field(
        default=1_048_576,  # 1MB
        gt=0,
    )

    # Classification
    ENABLE_LANGUAGE_STRATEGIES: bool = Field(default=True)

    # Risk assessment
    RISK_HIGH_THRESHOLD: float = Field(default=0.7, ge=0.0, le=1.0)
    RISK_MEDIUM_THRESHOLD: float = Field(default=0.4, ge=0.0, le=1.0)

    # Recommendations
    LARGE_DIFF_FILE_COUNT: int = Field(default=5, ge=1)

    # Observability
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")
    ENABLE_METRICS: bool = Field(default=True)
    ERROR_TRACKING_ENABLED: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check LOG_LEVEL against logging level names."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """LOG_FORMAT is either json or text."""
        if v.lower() not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v.lower()

    @model_validator(mode="after")
    def check_risk_thresholds(self) -> "Settings":
        """The medium band must start at or below the high band."""
        if self.RISK_MEDIUM_THRESHOLD > self.RISK_HIGH_THRESHOLD:
            raise ValueError(
                "RISK_MEDIUM_THRESHOLD must not exceed RISK_HIGH_THRESHOLD"
            )
        return self


# Global settings instance
settings = Settings()
