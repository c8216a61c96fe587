"""Test harness for code that ingests objects into a live repository."""

from __future__ import annotations

from .harness import DEFAULT_OBJECT_LABEL, HarnessResult, RepositoryTestHarness
from .validators import (
    VALIDATORS,
    DatastreamValidator,
    ValidationOutcome,
    get_validator,
    register_validator,
)

__all__ = [
    "DEFAULT_OBJECT_LABEL",
    "VALIDATORS",
    "DatastreamValidator",
    "HarnessResult",
    "RepositoryTestHarness",
    "ValidationOutcome",
    "get_validator",
    "register_validator",
]
