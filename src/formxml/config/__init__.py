"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .repository import (
    DEFAULT_ADMIN_PRINCIPAL,
    DEFAULT_PID_NAMESPACE,
    DEFAULT_TEST_PRINCIPAL,
    RepositoryConfig,
    get_repository_config,
)

__all__ = [
    "DEFAULT_ADMIN_PRINCIPAL",
    "DEFAULT_PID_NAMESPACE",
    "DEFAULT_TEST_PRINCIPAL",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "RepositoryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_repository_config",
    "optional_env_var",
    "require_env_vars",
]
