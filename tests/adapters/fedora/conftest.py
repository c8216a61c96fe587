from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from formxml.adapters.fedora import FedoraClient
from formxml.adapters.http_resilience import ResilienceConfig, ResilientClient
from formxml.config import RepositoryConfig

BASE_URL = "http://fedora.test/fedora"

type Handler = Callable[[httpx.Request], httpx.Response]


def make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=BASE_URL,
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


@pytest.fixture
def fedora_client_for(
    repository_config: RepositoryConfig,
) -> Callable[[Handler], FedoraClient]:
    def build(handler: Handler) -> FedoraClient:
        return FedoraClient(
            config=repository_config,
            client_factory=make_client_factory(handler),
            search_page_size=2,
        )

    return build
