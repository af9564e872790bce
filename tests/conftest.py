"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from assetstore.models.config import AssetProviderConfig, AssetStoreConfig


class FakeApi:
    """Scripted stand-in for the provider APIs behind an httpx.MockTransport.

    Each path holds a queue of replies; the last one repeats. A reply is a
    JSON payload (served as 200), an int status code, an httpx.Response or
    an exception to raise.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, *replies: Any) -> None:
        self.routes[path] = list(replies)

    def calls(self, host: str | None = None, path: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (host is None or host in r.url.host) and (path is None or r.url.path == path)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, text="Not Found")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        if isinstance(reply, int):
            return httpx.Response(reply, text=f"error {reply}")
        return httpx.Response(200, json=reply)


def make_config(unsplash: bool = False, pexels: bool = False, enabled: bool = True) -> AssetStoreConfig:
    """Store config with the chosen providers switched on."""
    return AssetStoreConfig(
        enabled=enabled,
        providers={
            "unsplash": AssetProviderConfig(enabled=unsplash, api_key="test_unsplash_key" if unsplash else "", rate_limit=1000),
            "pexels": AssetProviderConfig(enabled=pexels, api_key="test_pexels_key" if pexels else "", rate_limit=1000),
        },
    )


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def http_client(fake_api: FakeApi) -> httpx.AsyncClient:
    """httpx client routed to the fake API."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))


@pytest.fixture
def sleep_mock():
    """Skip pacing and backoff delays; records requested durations."""
    with patch("assetstore.providers.base.asyncio.sleep", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def provider_config() -> AssetProviderConfig:
    return AssetProviderConfig(enabled=True, api_key="test_key", rate_limit=1000)


@pytest.fixture
def mock_unsplash_response() -> dict:
    """Sample Unsplash search response."""
    return {
        "total": 500,
        "total_pages": 25,
        "results": [
            {
                "id": "abc123xyz",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T12:00:00Z",
                "width": 4000,
                "height": 3000,
                "color": "#4A90D9",
                "blur_hash": "LKO2?U%2Tw=w]~RBVZRi};RPxuwH",
                "description": "Beautiful mountain landscape",
                "alt_description": "snow covered mountain under blue sky",
                "urls": {
                    "raw": "https://images.unsplash.com/photo-abc123?ixlib=rb-4.0.3",
                    "full": "https://images.unsplash.com/photo-abc123?q=85&w=2000",
                    "regular": "https://images.unsplash.com/photo-abc123?q=80&w=1080",
                    "small": "https://images.unsplash.com/photo-abc123?q=80&w=400",
                    "thumb": "https://images.unsplash.com/photo-abc123?q=80&w=200"
                },
                "links": {
                    "self": "https://api.unsplash.com/photos/abc123xyz",
                    "html": "https://unsplash.com/photos/abc123xyz",
                    "download": "https://unsplash.com/photos/abc123xyz/download"
                },
                "likes": 1234,
                "user": {
                    "id": "user123",
                    "username": "naturephotographer",
                    "name": "John Nature",
                    "links": {
                        "self": "https://api.unsplash.com/users/naturephotographer",
                        "html": "https://unsplash.com/@naturephotographer"
                    }
                },
                "tags": [
                    {"title": "mountain"},
                    {"title": "landscape"},
                    {"title": "nature"}
                ]
            }
        ]
    }


@pytest.fixture
def mock_unsplash_photo(mock_unsplash_response) -> dict:
    return mock_unsplash_response["results"][0]


@pytest.fixture
def mock_unsplash_list(mock_unsplash_photo) -> list:
    """Sample /photos listing (a bare array)."""
    second = copy.deepcopy(mock_unsplash_photo)
    second.update(id="def456uvw", width=2000, height=3000, description=None, tags=[])
    second["user"]["name"] = None
    return [mock_unsplash_photo, second]


@pytest.fixture
def mock_pexels_response() -> dict:
    """Sample Pexels search response."""
    return {
        "total_results": 1000,
        "page": 1,
        "per_page": 20,
        "photos": [
            {
                "id": 2014422,
                "width": 3024,
                "height": 4032,
                "url": "https://www.pexels.com/photo/2014422/",
                "photographer": "Joey Bautista",
                "photographer_url": "https://www.pexels.com/@joey-bautista",
                "photographer_id": 680914,
                "avg_color": "#978E82",
                "src": {
                    "original": "https://images.pexels.com/photos/original.jpeg",
                    "large2x": "https://images.pexels.com/photos/large2x.jpeg",
                    "large": "https://images.pexels.com/photos/large.jpeg",
                    "medium": "https://images.pexels.com/photos/medium.jpeg",
                    "small": "https://images.pexels.com/photos/small.jpeg",
                    "portrait": "https://images.pexels.com/photos/portrait.jpeg",
                    "landscape": "https://images.pexels.com/photos/landscape.jpeg",
                    "tiny": "https://images.pexels.com/photos/tiny.jpeg"
                },
                "liked": False,
                "alt": "Brown Rocks During Golden Hour"
            }
        ],
        "next_page": "https://api.pexels.com/v1/search/?page=2&per_page=20&query=nature"
    }


@pytest.fixture
def mock_pexels_curated(mock_pexels_response) -> dict:
    """Curated listing: same envelope without total_results or next_page."""
    return {
        "page": 1,
        "per_page": 20,
        "photos": mock_pexels_response["photos"],
    }


@pytest.fixture
def mock_pexels_video_response() -> dict:
    """Sample Pexels video search response."""
    return {
        "total_results": 300,
        "page": 1,
        "per_page": 20,
        "url": "https://www.pexels.com/search/videos/ocean/",
        "videos": [
            {
                "id": 1093662,
                "width": 1920,
                "height": 1080,
                "duration": 8,
                "url": "https://www.pexels.com/video/1093662/",
                "image": "https://images.pexels.com/videos/1093662/preview.jpeg",
                "user": {
                    "id": 417939,
                    "name": "Ruvim Miksanskiy",
                    "url": "https://www.pexels.com/@digitech"
                },
                "video_files": [
                    {
                        "id": 9229,
                        "quality": "sd",
                        "file_type": "video/mp4",
                        "width": 640,
                        "height": 360,
                        "link": "https://player.vimeo.com/external/sd.mp4"
                    },
                    {
                        "id": 9230,
                        "quality": "hd",
                        "file_type": "video/mp4",
                        "width": 1920,
                        "height": 1080,
                        "link": "https://player.vimeo.com/external/hd.mp4"
                    }
                ]
            }
        ],
        "next_page": "https://api.pexels.com/videos/search/?page=2&per_page=20&query=ocean"
    }


@pytest.fixture
def unsplash_provider(provider_config, http_client):
    """Create an Unsplash provider wired to the fake API."""
    from assetstore.providers.unsplash import UnsplashProvider

    return UnsplashProvider(provider_config, client=http_client)


@pytest.fixture
def pexels_provider(provider_config, http_client):
    """Create a Pexels provider wired to the fake API."""
    from assetstore.providers.pexels import PexelsProvider

    return PexelsProvider(provider_config, client=http_client)


@pytest.fixture
def api_payloads(fake_api, mock_unsplash_response, mock_unsplash_list, mock_pexels_response,
                 mock_pexels_curated, mock_pexels_video_response) -> FakeApi:
    """Fake API answering every endpoint successfully."""
    fake_api.add("/search/photos", mock_unsplash_response)
    fake_api.add("/photos", mock_unsplash_list)
    fake_api.add("/photos/random", mock_unsplash_response["results"][0])
    fake_api.add("/v1/search", mock_pexels_response)
    fake_api.add("/v1/curated", mock_pexels_curated)
    fake_api.add("/videos/search", mock_pexels_video_response)
    fake_api.add("/videos/popular", mock_pexels_video_response)
    return fake_api


@pytest.fixture
def asset_manager(http_client):
    """Manager with both providers enabled and the fake API behind them."""
    from assetstore.providers.manager import AssetManager

    return AssetManager(make_config(unsplash=True, pexels=True), client=http_client)


@pytest.fixture
def fastapi_app(asset_manager) -> FastAPI:
    """Create a FastAPI app with asset store routes for testing."""
    from assetstore.providers.routes import create_asset_store_router

    app = FastAPI()
    app.include_router(create_asset_store_router(prefix="/asset-store", manager=asset_manager))
    return app


@pytest.fixture
def api_client(fastapi_app: FastAPI) -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(fastapi_app)


# Markers for test categories
def pytest_configure(config):
    config.addinivalue_line("markers", "mock: tests using mocked API responses")
    config.addinivalue_line("markers", "integration: tests requiring real API keys")
    config.addinivalue_line("markers", "slow: slow running tests")
