"""Fedora repository configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_ADMIN_PRINCIPAL = "fedoraAdmin"
DEFAULT_TEST_PRINCIPAL = "formxml-test"
DEFAULT_PID_NAMESPACE = "test"


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Connection settings for the Fedora REST API plus harness principals.

    ``admin_principal`` names the account whose objects must never be bulk
    deleted; ``test_principal`` owns the objects ingested by the test harness.
    """

    resilience: ResilienceConfig
    admin_principal: str = DEFAULT_ADMIN_PRINCIPAL
    test_principal: str = DEFAULT_TEST_PRINCIPAL
    pid_namespace: str = DEFAULT_PID_NAMESPACE


def get_repository_config() -> RepositoryConfig:
    values = require_env_vars(("FEDORA_BASE_URL", "FEDORA_USER", "FEDORA_PASSWORD"))
    user = values["FEDORA_USER"]

    resilience = ResilienceConfig(
        name="fedora",
        base_url=values["FEDORA_BASE_URL"].rstrip("/"),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        auth=(user, values["FEDORA_PASSWORD"]),
    )

    return RepositoryConfig(
        resilience=resilience,
        admin_principal=optional_env_var("FEDORA_ADMIN_PRINCIPAL", DEFAULT_ADMIN_PRINCIPAL),
        test_principal=optional_env_var("FORMXML_TEST_PRINCIPAL", DEFAULT_TEST_PRINCIPAL),
        pid_namespace=optional_env_var("FORMXML_PID_NAMESPACE", DEFAULT_PID_NAMESPACE),
    )
