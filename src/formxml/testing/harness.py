"""Helpers for integration tests that run against a live repository.

The harness records every check as a ``HarnessResult`` instead of raising, so a
test can run several checks and assert on ``harness.passed`` at the end.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, cast

import httpx

from formxml.domain.ports.repository import (
    ControlGroup,
    DatastreamDescriptor,
    ObjectProperties,
    ObjectState,
    PurgeResult,
    RepositoryError,
)

from .validators import get_validator

if TYPE_CHECKING:
    from formxml.config.repository import RepositoryConfig
    from formxml.domain.ports.repository import RepositoryClient

log = getLogger(__name__)

DEFAULT_OBJECT_LABEL = "Test object"
_OBJECT_PROPERTY_KEYS = frozenset({"pid", "namespace", "label", "owner", "state", "models"})
_DATASTREAM_KEYS = frozenset(
    {"dsid", "label", "mime_type", "control_group", "content", "path", "location", "versionable"}
)
_HARNESS_MODULES = frozenset({__name__, "formxml.testing.validators"})
_CLIENT_ERRORS = (httpx.HTTPError, RepositoryError)


@dataclass(slots=True, frozen=True)
class HarnessResult:
    passed: bool
    message: str
    caller: str


def _caller() -> str:
    """Describe the first stack frame outside the harness."""

    frame = inspect.currentframe()
    try:
        while frame is not None and frame.f_globals.get("__name__") in _HARNESS_MODULES:
            frame = frame.f_back
        if frame is None:
            return "<unknown>"
        filename = Path(frame.f_code.co_filename).name
        return f"{frame.f_code.co_name} ({filename}:{frame.f_lineno})"
    finally:
        del frame


class RepositoryTestHarness:
    """Ingest, inspect and clean up repository objects on behalf of a test."""

    def __init__(self, client: RepositoryClient, *, config: RepositoryConfig) -> None:
        self.client = client
        self.config = config
        self.results: list[HarnessResult] = []
        self._ingested: list[str] = []

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def failures(self) -> list[HarnessResult]:
        return [result for result in self.results if not result.passed]

    @property
    def ingested(self) -> tuple[str, ...]:
        return tuple(self._ingested)

    def record(self, passed: bool, message: str) -> bool:
        result = HarnessResult(passed=passed, message=message, caller=_caller())
        self.results.append(result)
        if not passed:
            log.info("Check failed in %s: %s", result.caller, message)
        return passed

    def pass_(self, message: str) -> bool:
        return self.record(True, message)

    def fail(self, message: str) -> bool:
        return self.record(False, message)

    def ingest_constructed_object(
        self,
        properties: Mapping[str, object] | None = None,
        datastreams: Sequence[Mapping[str, object]] = (),
    ) -> str:
        """Ingest a new object, filling in defaults for anything not given.

        ``properties`` accepts ``pid``, ``namespace``, ``label``, ``owner``,
        ``state`` and ``models``. Each datastream mapping requires ``dsid`` and
        accepts the remaining ``DatastreamDescriptor`` fields.
        """

        object_properties = self._object_properties(properties or {})
        descriptors = [_datastream_descriptor(datastream) for datastream in datastreams]

        pid = self.client.ingest_object(object_properties)
        self._ingested.append(pid)
        for descriptor in descriptors:
            self.client.add_datastream(pid, descriptor)

        self.pass_(f"Ingested object {pid} with {len(descriptors)} datastream(s)")
        return pid

    def assert_datastreams(self, pid: str, dsids: Iterable[str]) -> bool:
        return self._check_datastreams(pid, dsids, expected=True)

    def assert_no_datastreams(self, pid: str, dsids: Iterable[str]) -> bool:
        return self._check_datastreams(pid, dsids, expected=False)

    def validate_datastreams(self, pid: str, checks: Iterable[Sequence[object]]) -> bool:
        """Run content validators; each check is ``(dsid, kind, *params)``."""

        outcomes: list[bool] = []
        for check in checks:
            if len(check) < 2:
                outcomes.append(self.fail(f"Malformed datastream check: {check!r}"))
                continue
            dsid, kind, *params = check
            validator = get_validator(str(kind))
            if validator is None:
                outcomes.append(self.fail(f"No validator registered for kind {kind!r}"))
                continue
            try:
                content = self.client.get_datastream_content(pid, str(dsid))
            except _CLIENT_ERRORS as exc:
                outcomes.append(self.fail(f"Could not load {pid}/{dsid}: {exc}"))
                continue
            try:
                passed, message = validator(content, *params)
            except (ValueError, TypeError) as exc:
                outcomes.append(self.fail(f"{pid}/{dsid} ({kind}): invalid check: {exc}"))
                continue
            outcomes.append(self.record(passed, f"{pid}/{dsid} ({kind}): {message}"))
        return all(outcomes)

    def delete_user_objects(self, principal: str) -> bool:
        """Purge every object owned by ``principal``; never the administrative principal."""

        if principal == self.config.admin_principal:
            return self.fail(
                "Refusing to delete all objects owned by the administrative principal "
                f"{principal!r}"
            )
        try:
            pids = self.client.find_objects_by_owner(principal)
        except _CLIENT_ERRORS as exc:
            return self.fail(f"Could not list objects owned by {principal!r}: {exc}")

        result = self.purge_objects(pids)
        self._ingested = [pid for pid in self._ingested if pid not in result.purged]
        return self.record(
            not result.failed,
            f"Purged {len(result.purged)} of {len(pids)} object(s) owned by {principal!r}",
        )

    def purge_objects(self, pids: Iterable[str]) -> PurgeResult:
        result = PurgeResult()
        for pid in pids:
            try:
                self.client.purge_object(pid)
            except _CLIENT_ERRORS as exc:
                log.warning("Failed to purge %s: %s", pid, exc)
                result.failed[pid] = str(exc)
                continue
            result.purged.append(pid)
        return result

    def teardown(self) -> PurgeResult:
        """Purge the objects this harness ingested, newest first."""

        result = self.purge_objects(reversed(self._ingested))
        self._ingested = [pid for pid in self._ingested if pid in result.failed]
        return result

    def _check_datastreams(self, pid: str, dsids: Iterable[str], *, expected: bool) -> bool:
        wanted = list(dsids)
        try:
            listed = self.client.list_datastreams(pid)
        except _CLIENT_ERRORS as exc:
            reason = f"could not list datastreams of {pid}: {exc}"
            for dsid in wanted or ["<none>"]:
                self.fail(f"Datastream {dsid} unchecked, {reason}")
            return False
        present = {datastream.dsid for datastream in listed}
        outcomes = [
            self.record(
                (dsid in present) is expected,
                f"Datastream {dsid} {_presence(dsid in present)} {pid}",
            )
            for dsid in wanted
        ]
        return all(outcomes)

    def _object_properties(self, properties: Mapping[str, object]) -> ObjectProperties:
        _reject_unknown(properties, _OBJECT_PROPERTY_KEYS, kind="object property")
        pid = properties.get("pid")
        if not pid:
            namespace = str(properties.get("namespace") or self.config.pid_namespace)
            pid = self.client.next_pid(namespace)
        models = properties.get("models", ())
        if isinstance(models, str):
            models = (models,)
        return ObjectProperties(
            pid=str(pid),
            label=str(properties.get("label") or DEFAULT_OBJECT_LABEL),
            owner=str(properties.get("owner") or self.config.test_principal),
            state=ObjectState(str(properties.get("state", ObjectState.ACTIVE))),
            models=tuple(map(str, cast("Iterable[object]", models))),
        )


def _datastream_descriptor(datastream: Mapping[str, object]) -> DatastreamDescriptor:
    _reject_unknown(datastream, _DATASTREAM_KEYS, kind="datastream field")
    dsid = datastream.get("dsid")
    if not dsid:
        raise ValueError("Datastream descriptors require a dsid")
    content = datastream.get("content")
    if isinstance(content, str):
        content = content.encode("utf-8")
    path = datastream.get("path")
    location = datastream.get("location")
    return DatastreamDescriptor(
        dsid=str(dsid),
        label=str(datastream.get("label") or dsid),
        mime_type=str(datastream.get("mime_type") or "text/plain"),
        control_group=ControlGroup(str(datastream.get("control_group", ControlGroup.MANAGED))),
        content=cast("bytes | None", content),
        path=Path(str(path)) if path is not None else None,
        location=str(location) if location is not None else None,
        versionable=bool(datastream.get("versionable", True)),
    )


def _reject_unknown(values: Mapping[str, object], allowed: frozenset[str], *, kind: str) -> None:
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise ValueError(f"Unknown {kind}(s): {', '.join(unknown)}")


def _presence(present: bool) -> str:
    return "present in" if present else "missing from"
