"""Public interface for the Fedora repository adapter."""

from __future__ import annotations

from .client import FedoraAPIError, FedoraClient
from .schema import (
    FedoraSchemaError,
    ObjectDatastreams,
    ObjectSearchPage,
    PidList,
    parse_object_datastreams,
    parse_pid_list,
    parse_search_page,
)

__all__ = [
    "FedoraAPIError",
    "FedoraClient",
    "FedoraSchemaError",
    "ObjectDatastreams",
    "ObjectSearchPage",
    "PidList",
    "parse_object_datastreams",
    "parse_pid_list",
    "parse_search_page",
]
