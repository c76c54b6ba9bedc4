"""Configuration management for the job portal core."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import (
    AppConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
    RetentionConfig,
    WorkerConfig,
)

__all__ = [
    "load_config",
    "load_environment_config",
    "AppConfig",
    "MatchingConfig",
    "RetentionConfig",
    "WorkerConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    "ConfigurationError",
]
