"""Ports for talking to a remote digital repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path


class RepositoryError(RuntimeError):
    """Raised by repository clients when a response cannot be used."""


class ObjectState(StrEnum):
    ACTIVE = "A"
    INACTIVE = "I"
    DELETED = "D"


class ControlGroup(StrEnum):
    """How the repository stores a datastream's content."""

    INLINE_XML = "X"
    MANAGED = "M"
    EXTERNAL = "E"
    REDIRECT = "R"


@dataclass(slots=True, kw_only=True)
class ObjectProperties:
    """Properties of a repository object to ingest."""

    pid: str
    label: str
    owner: str
    state: ObjectState = ObjectState.ACTIVE
    models: tuple[str, ...] = ()


@dataclass(slots=True, kw_only=True)
class DatastreamDescriptor:
    """A datastream to attach to an object.

    Managed and inline datastreams take ``content`` or read it from ``path``;
    external and redirect datastreams point at ``location`` instead.
    """

    dsid: str
    label: str
    mime_type: str = "text/plain"
    control_group: ControlGroup = ControlGroup.MANAGED
    content: bytes | None = None
    path: Path | None = None
    location: str | None = None
    versionable: bool = True

    def read_content(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is not None:
            return self.path.read_bytes()
        return b""


@dataclass(slots=True, kw_only=True, frozen=True)
class DatastreamInfo:
    """A datastream as listed by the repository."""

    dsid: str
    label: str = ""
    mime_type: str = ""


@dataclass(slots=True)
class PurgeResult:
    """Outcome of a best-effort bulk purge."""

    purged: list[str] = field(default_factory=list["str"])
    failed: dict[str, str] = field(default_factory=dict["str", "str"])


@runtime_checkable
class RepositoryClient(Protocol):
    """Object and datastream operations the test harness relies on."""

    def next_pid(self, namespace: str) -> str: ...

    def ingest_object(self, properties: ObjectProperties) -> str: ...

    def add_datastream(self, pid: str, datastream: DatastreamDescriptor) -> None: ...

    def list_datastreams(self, pid: str) -> list[DatastreamInfo]: ...

    def get_datastream_content(self, pid: str, dsid: str) -> bytes: ...

    def purge_object(self, pid: str) -> None: ...

    def find_objects_by_owner(self, owner: str) -> list[str]: ...


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
