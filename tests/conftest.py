"""Shared fixtures: a path-routed fake OpenSea API and stub plugins."""

from typing import Any

import httpx
import pytest
import pytest_asyncio

from nftkit.nft.config import NftKitSettings
from nftkit.nft.opensea_client import OpenSeaClient
from nftkit.plugins.magic_eden import MagicEdenPlugin
from nftkit.plugins.registry import PluginRegistry
from nftkit.utils.resilience import RetryPolicy

CONTRACT = "0xabcdef0123456789abcdef0123456789abcdef01"
WALLET = "0x1111111111111111111111111111111111111111"


class FakeOpenSea:
    """MockTransport handler answering by URL path.

    Each route holds a queue of responses; the last one repeats once the
    queue is drained. Unknown paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        json: Any = None,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        response = httpx.Response(status, json=json if json is not None else {}, headers=headers)
        self.routes.setdefault(path, []).append(response)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"errors": ["not found"]})
        return queue.pop(0) if len(queue) > 1 else queue[0]


async def no_sleep(delay: float) -> None:
    return None


class StubPlugin(MagicEdenPlugin):
    """Conforming plugin with scripted order books."""

    id = "stub"

    def __init__(
        self,
        listings: list[dict[str, Any]] | None = None,
        offers: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.listings = listings or []
        self.offers = offers or []
        self.error = error
        self.calls: list[str] = []

    async def get_listings(self, params):
        self.calls.append("get_listings")
        if self.error is not None:
            raise self.error
        return self.listings

    async def get_offers(self, params):
        self.calls.append("get_offers")
        if self.error is not None:
            raise self.error
        return self.offers


@pytest.fixture
def fake_api() -> FakeOpenSea:
    return FakeOpenSea()


@pytest_asyncio.fixture
async def client(fake_api: FakeOpenSea):
    client = OpenSeaClient(
        api_key="test-key",
        transport=httpx.MockTransport(fake_api),
        retry_policy=RetryPolicy(randomize=False),
        sleep=no_sleep,
    )
    yield client
    await client.close()


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry()


@pytest.fixture
def settings() -> NftKitSettings:
    return NftKitSettings(_env_file=None, OPENSEA_API_KEY="test-key", ENABLE_OPENSEA_WRITE=False)


@pytest.fixture
def write_settings() -> NftKitSettings:
    return NftKitSettings(_env_file=None, OPENSEA_API_KEY="test-key", ENABLE_OPENSEA_WRITE=True)
