"""Tests for FastAPI asset store routes."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from assetstore.models.asset import AssetType, Orientation, SortBy
from assetstore.providers.manager import AssetManager
from assetstore.providers.routes import (
    AssetStoreRequest,
    create_asset_store_router,
    parse_request,
)


@pytest.fixture
def disabled_manager(http_client, config_factory) -> AssetManager:
    return AssetManager(config_factory(), client=http_client)


@pytest.fixture
def disabled_client(disabled_manager) -> TestClient:
    app = FastAPI()
    app.include_router(create_asset_store_router(manager=disabled_manager))
    return TestClient(app)


@pytest.mark.mock
class TestSearchRoutes:
    """Tests for search and featured endpoints."""

    def test_search(self, api_payloads, api_client):
        response = api_client.get("/asset-store/search", params={"query": "mountain"})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["total"] == 1500
        assert data["page"] == 1
        assert data["perPage"] == 20
        assert data["hasMore"] is True
        assert "error" not in data

        photo = data["data"][0]
        assert photo["id"] == "unsplash_abc123xyz"
        assert photo["type"] == "photo"
        assert photo["metadata"]["photographerUrl"] == "https://unsplash.com/@naturephotographer"
        assert photo["metadata"]["orientation"] == "landscape"

    def test_search_post(self, api_payloads, api_client):
        response = api_client.post("/asset-store/search", json={"query": "rocks", "perPage": 5, "page": 2})
        assert response.status_code == 200

        data = response.json()
        assert data["page"] == 2
        assert data["perPage"] == 5

    def test_search_videos(self, api_payloads, api_client):
        response = api_client.get("/asset-store/search", params={"query": "ocean", "assetType": "video"})

        data = response.json()
        assert data["success"] is True
        assert data["data"][0]["metadata"]["videoUrl"] == "https://player.vimeo.com/external/hd.mp4"

    @pytest.mark.parametrize("params,field", [
        ({"page": "0"}, "page"),
        ({"page": "abc"}, "page"),
        ({"perPage": "101"}, "perPage"),
        ({"perPage": "0"}, "perPage"),
        ({"assetType": "gif"}, "assetType"),
    ])
    def test_search_rejects_bad_params(self, api_payloads, api_client, params, field):
        response = api_client.get("/asset-store/search", params=params)

        assert response.status_code == 400
        assert response.json()["detail"].startswith(f"Invalid {field}: ")
        assert api_payloads.requests == []

    def test_search_post_rejects_out_of_range_per_page(self, api_payloads, api_client):
        response = api_client.post("/asset-store/search", json={"query": "x", "perPage": 500})

        assert response.status_code == 400
        assert "less than or equal to 100" in response.json()["detail"]
        assert api_payloads.requests == []

    def test_empty_values_use_defaults(self, api_payloads, api_client):
        response = api_client.get("/asset-store/search", params={"query": "ocean", "page": "", "perPage": ""})

        assert response.status_code == 200
        assert response.json()["page"] == 1
        assert response.json()["perPage"] == 20

    def test_search_post_rejects_non_object(self, api_client):
        response = api_client.post("/asset-store/search", json=["query"])

        assert response.status_code == 400
        assert response.json()["detail"] == "Request body must be a JSON object"

    def test_search_post_rejects_invalid_json(self, api_client):
        response = api_client.post(
            "/asset-store/search", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_store_disabled(self, disabled_client):
        response = disabled_client.get("/asset-store/search", params={"query": "x"})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Asset store is disabled"
        assert data["data"] == []

    def test_cookie_keys_apply_to_request(self, api_payloads, disabled_client, disabled_manager):
        disabled_client.cookies.set("pexels_api_key", "cookie_key")

        response = disabled_client.get("/asset-store/search", params={"query": "rocks"})

        data = response.json()
        assert data["success"] is True
        assert [a["provider"] for a in data["data"]] == ["pexels"]
        assert api_payloads.requests[0].headers["Authorization"] == "cookie_key"
        assert disabled_manager.enabled_providers() == []

    def test_featured(self, api_payloads, api_client):
        response = api_client.get("/asset-store/featured", params={"query": "ignored"})
        assert response.status_code == 200

        assert len(response.json()["data"]) == 3
        assert all("query" not in r.url.params for r in api_payloads.requests)

    def test_featured_post(self, api_payloads, api_client):
        response = api_client.post("/asset-store/featured", json={"perPage": 10})

        assert response.status_code == 200
        assert response.json()["perPage"] == 10

    def test_internal_error(self, api_client, asset_manager, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(asset_manager, "search_assets", broken)

        response = api_client.get("/asset-store/search", params={"query": "x"})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == "Internal server error"


@pytest.mark.mock
class TestCategoryRoutes:

    def test_categories(self, api_client):
        response = api_client.get("/asset-store/categories")
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["assetType"] == "photo"
        assert data["categories"] == sorted(data["categories"])

    def test_local_categories(self, api_client):
        response = api_client.get("/asset-store/categories", params={"assetType": "icon"})

        assert response.json()["categories"] == ["business", "navigation", "social", "ui"]

    def test_invalid_asset_type(self, api_client):
        response = api_client.get("/asset-store/categories", params={"assetType": "gif"})

        assert response.status_code == 400


@pytest.mark.mock
class TestValidateRoutes:

    def test_validate_all(self, api_payloads, api_client):
        response = api_client.get("/asset-store/validate")
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["results"] == {"unsplash": True, "pexels": True}

    def test_validate_one(self, api_payloads, api_client):
        api_payloads.add("/v1/curated", 401)

        response = api_client.get("/asset-store/validate", params={"provider": "pexels"})

        data = response.json()
        assert data["provider"] == "pexels"
        assert data["valid"] is False
        assert data["message"] == "API key is invalid or not configured"

    def test_validate_supplied_key(self, api_payloads, disabled_client):
        response = disabled_client.post(
            "/asset-store/validate", json={"provider": "unsplash", "apiKey": "candidate"}
        )

        data = response.json()
        assert data["valid"] is True
        assert data["message"] == "API key is valid"
        assert api_payloads.requests[0].headers["Authorization"] == "Client-ID candidate"

    def test_validate_nothing_enabled(self, disabled_client):
        response = disabled_client.get("/asset-store/validate")

        assert response.json()["results"] == {}


class TestAssetStoreRequest:

    def test_defaults(self):
        request = parse_request({})
        assert request.page == 1
        assert request.per_page == 20
        assert request.query is None
        assert request.asset_type == AssetType.PHOTO

    def test_unknown_filters_are_dropped(self):
        params = parse_request({"orientation": "diagonal", "sortBy": "random", "query": "x"}).search_params()
        assert params.orientation is None
        assert params.sort_by == SortBy.RELEVANT

    def test_known_filters_are_kept(self):
        params = parse_request({"orientation": "portrait", "sortBy": "latest"}).search_params()
        assert params.orientation == Orientation.PORTRAIT
        assert params.sort_by == SortBy.LATEST

    def test_featured_ignores_query(self):
        assert parse_request({"query": "x"}).search_params(with_query=False).query is None

    def test_json_numbers(self):
        request = AssetStoreRequest.model_validate({"page": 3, "perPage": 50, "assetType": "video"})
        assert request.page == 3
        assert request.per_page == 50
        assert request.asset_type == AssetType.VIDEO

    @pytest.mark.parametrize("raw", [{"page": True}, {"perPage": 101}, {"page": 0}, {"assetType": "gif"}])
    def test_bad_values_are_a_bad_request(self, raw):
        with pytest.raises(HTTPException) as exc_info:
            parse_request(raw)
        assert exc_info.value.status_code == 400
