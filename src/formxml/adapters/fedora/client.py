"""Fedora Commons 3 REST API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from formxml.adapters.http_resilience import ResilientClient
from formxml.domain.ports.repository import (
    ControlGroup,
    DatastreamDescriptor,
    DatastreamInfo,
    ObjectProperties,
    RepositoryError,
)

from .schema import (
    FedoraSchemaError,
    parse_object_datastreams,
    parse_pid_list,
    parse_search_page,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from formxml.config.http_resilience import ResilienceConfig
    from formxml.config.repository import RepositoryConfig

log = getLogger(__name__)

HAS_MODEL_PREDICATE = "info:fedora/fedora-system:def/model#hasModel"
DEFAULT_SEARCH_PAGE_SIZE = 100


class FedoraAPIError(RepositoryError):
    """Raised when the Fedora REST API returns an unexpected response."""


def _object_path(pid: str) -> str:
    return f"objects/{quote(pid, safe=':')}"


def _datastream_path(pid: str, dsid: str) -> str:
    return f"{_object_path(pid)}/datastreams/{quote(dsid, safe='')}"


class FedoraClient:
    """Synchronous facade over the Fedora REST API.

    Each call opens a client from ``client_factory`` for its own event loop run.
    """

    def __init__(
        self,
        *,
        config: RepositoryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        search_page_size: int = DEFAULT_SEARCH_PAGE_SIZE,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._search_page_size = search_page_size

    def next_pid(self, namespace: str) -> str:
        return asyncio.run(self._next_pid_async(namespace=namespace))

    def ingest_object(self, properties: ObjectProperties) -> str:
        return asyncio.run(self._ingest_object_async(properties=properties))

    def add_datastream(self, pid: str, datastream: DatastreamDescriptor) -> None:
        asyncio.run(self._add_datastream_async(pid=pid, datastream=datastream))

    def list_datastreams(self, pid: str) -> list[DatastreamInfo]:
        return asyncio.run(self._list_datastreams_async(pid=pid))

    def get_datastream_content(self, pid: str, dsid: str) -> bytes:
        return asyncio.run(self._get_datastream_content_async(pid=pid, dsid=dsid))

    def purge_object(self, pid: str) -> None:
        asyncio.run(self._purge_object_async(pid=pid))

    def find_objects_by_owner(self, owner: str) -> list[str]:
        return asyncio.run(self._find_objects_by_owner_async(owner=owner))

    async def _next_pid_async(self, *, namespace: str) -> str:
        params = {"numPIDs": "1", "namespace": namespace, "format": "xml"}
        async with self._client_factory(self._resilience) as client:
            response = self._checked(await client.post("objects/nextPID", params=params))
        try:
            pids = parse_pid_list(response.content).pids
        except FedoraSchemaError as exc:
            raise FedoraAPIError(str(exc)) from exc
        if not pids:
            raise FedoraAPIError(f"Fedora returned no PID for namespace {namespace}")
        return pids[0]

    async def _ingest_object_async(self, *, properties: ObjectProperties) -> str:
        params = {
            "label": properties.label,
            "ownerId": properties.owner,
            "state": str(properties.state),
        }
        async with self._client_factory(self._resilience) as client:
            response = self._checked(await client.post(_object_path(properties.pid), params=params))
            pid = response.text.strip() or properties.pid
            for model in properties.models:
                self._checked(
                    await client.post(
                        f"{_object_path(pid)}/relationships/new",
                        params={
                            "subject": f"info:fedora/{pid}",
                            "predicate": HAS_MODEL_PREDICATE,
                            "object": f"info:fedora/{model}",
                        },
                    )
                )
        log.debug("Ingested %s owned by %s", pid, properties.owner)
        return pid

    async def _add_datastream_async(self, *, pid: str, datastream: DatastreamDescriptor) -> None:
        params = {
            "controlGroup": str(datastream.control_group),
            "dsLabel": datastream.label,
            "mimeType": datastream.mime_type,
            "versionable": "true" if datastream.versionable else "false",
        }
        path = _datastream_path(pid, datastream.dsid)
        async with self._client_factory(self._resilience) as client:
            if datastream.control_group in (ControlGroup.EXTERNAL, ControlGroup.REDIRECT):
                if datastream.location is None:
                    raise ValueError(
                        f"Datastream {datastream.dsid} needs a location for control group "
                        f"{datastream.control_group}"
                    )
                params["dsLocation"] = datastream.location
                self._checked(await client.post(path, params=params))
                return
            self._checked(
                await client.post(
                    path,
                    params=params,
                    content=datastream.read_content(),
                    headers={"Content-Type": datastream.mime_type},
                )
            )

    async def _list_datastreams_async(self, *, pid: str) -> list[DatastreamInfo]:
        async with self._client_factory(self._resilience) as client:
            path = f"{_object_path(pid)}/datastreams"
            response = self._checked(await client.get(path, params={"format": "xml"}))
        try:
            listing = parse_object_datastreams(response.content)
        except FedoraSchemaError as exc:
            raise FedoraAPIError(str(exc)) from exc
        return [
            DatastreamInfo(dsid=item.dsid, label=item.label, mime_type=item.mime_type)
            for item in listing.datastreams
        ]

    async def _get_datastream_content_async(self, *, pid: str, dsid: str) -> bytes:
        async with self._client_factory(self._resilience) as client:
            response = self._checked(await client.get(f"{_datastream_path(pid, dsid)}/content"))
        return response.content

    async def _purge_object_async(self, *, pid: str) -> None:
        async with self._client_factory(self._resilience) as client:
            self._checked(await client.delete(_object_path(pid)))
        log.debug("Purged %s", pid)

    async def _find_objects_by_owner_async(self, *, owner: str) -> list[str]:
        pids: list[str] = []
        params = {
            "query": f"ownerId={owner}",
            "pid": "true",
            "resultFormat": "xml",
            "maxResults": str(self._search_page_size),
        }
        async with self._client_factory(self._resilience) as client:
            while True:
                response = self._checked(await client.get("objects", params=params))
                try:
                    page = parse_search_page(response.content)
                except FedoraSchemaError as exc:
                    raise FedoraAPIError(str(exc)) from exc
                pids.extend(pid for pid in page.pids if pid not in pids)
                if page.session_token is None:
                    break
                params = {**params, "sessionToken": page.session_token}
        return pids

    def _checked(self, response: httpx.Response) -> httpx.Response:
        if response.is_error:
            log.error(
                "Fedora %s %s failed with %s",
                response.request.method,
                response.request.url,
                response.status_code,
            )
        response.raise_for_status()
        return response
