"""Domain port definitions for adapters."""

from __future__ import annotations

from .repository import (
    ControlGroup,
    DatastreamDescriptor,
    DatastreamInfo,
    ObjectProperties,
    ObjectState,
    PurgeResult,
    RepositoryClient,
    RepositoryError,
)

__all__ = [
    "ControlGroup",
    "DatastreamDescriptor",
    "DatastreamInfo",
    "ObjectProperties",
    "ObjectState",
    "PurgeResult",
    "RepositoryClient",
    "RepositoryError",
]
