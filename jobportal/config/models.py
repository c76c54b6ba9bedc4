"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Skill matching weights and notification thresholds."""

    title_weight: float = Field(2.0, gt=0, description="Score for a skill found in the job title")
    requirements_weight: float = Field(
        1.0, gt=0, description="Score for a skill found in the requirements text"
    )
    description_weight: float = Field(
        0.5, gt=0, description="Score for a skill found in the job description"
    )
    notify_threshold: float = Field(
        25.0, ge=0, le=100, description="Minimum match percentage that creates a notification"
    )
    recency_window_days: int = Field(
        30, ge=1, le=365, description="Jobs younger than this are rescanned when skills change"
    )
    suggestions_page_size: int = Field(
        10, ge=1, le=100, description="Default page size for personalized suggestions"
    )


class RetentionConfig(BaseModel):
    """Retention horizons and sweep cadence."""

    notification_max_age: str = Field("90d", description="Notifications older than this are deleted")
    token_sweep_interval: str = Field("1h", description="How often expired reset tokens are swept")
    notification_sweep_interval: str = Field(
        "1d", description="How often aged notifications are swept"
    )
    notification_sweep_initial_delay: str = Field(
        "5s", description="Delay before the first notification sweep after startup"
    )

    @field_validator(
        "notification_max_age",
        "token_sweep_interval",
        "notification_sweep_interval",
        "notification_sweep_initial_delay",
    )
    @classmethod
    def validate_duration(cls, v: str) -> str:
        """Reject anything parse_duration cannot read."""
        try:
            parse_duration(v)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v.strip()

    @field_validator("token_sweep_interval", "notification_sweep_interval")
    @classmethod
    def validate_interval_range(cls, v: str) -> str:
        """Sweep intervals must be between one minute and one week."""
        try:
            validate_duration_range(
                parse_duration(v), min_seconds=60, max_seconds=7 * 86400, label="Sweep interval"
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @property
    def notification_max_age_seconds(self) -> int:
        return parse_duration(self.notification_max_age)

    @property
    def token_sweep_interval_seconds(self) -> int:
        return parse_duration(self.token_sweep_interval)

    @property
    def notification_sweep_interval_seconds(self) -> int:
        return parse_duration(self.notification_sweep_interval)

    @property
    def notification_sweep_initial_delay_seconds(self) -> int:
        return parse_duration(self.notification_sweep_initial_delay)


class WorkerConfig(BaseModel):
    """Background fan-out worker pool."""

    max_workers: int = Field(4, ge=1, le=64, description="Threads available for fan-out tasks")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the job portal core."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Set by the loader; not read from YAML
    source_path: Optional[str] = None

    @model_validator(mode="after")
    def validate_retention_against_sweep(self):
        """A horizon shorter than its sweep interval would never be honoured on time."""
        retention = self.retention
        if retention.notification_max_age_seconds < retention.notification_sweep_interval_seconds:
            raise ValueError(
                "retention.notification_max_age must be at least "
                "retention.notification_sweep_interval"
            )
        return self
