"""FastAPI routes for the asset store.

Provides search, featured, category and key validation endpoints backed by
an :class:`AssetManager`. API keys sent as cookies (``unsplash_api_key``,
``pexels_api_key``) apply to that request only.

Usage:
    from fastapi import FastAPI
    from assetstore.providers.routes import create_asset_store_router

    app = FastAPI()
    app.include_router(create_asset_store_router(prefix="/asset-store"))
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import Field, ValidationError, field_validator

from assetstore.models.asset import (
    AssetApiResponse,
    AssetSearchParams,
    AssetType,
    CamelModel,
    Orientation,
    SortBy,
)
from assetstore.models.config import AssetStoreConfig
from assetstore.providers.manager import AssetManager
from assetstore.settings import cookie_credentials, env_credentials

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100


# Global manager dependency - must be at module level for FastAPI annotation resolution
_manager: AssetManager | None = None


def get_asset_manager() -> AssetManager:
    """Get or create the process-wide asset manager."""
    global _manager
    if _manager is None:
        _manager = AssetManager(credentials=env_credentials)
    return _manager


def get_request_manager(
    request: Request,
    manager: Annotated[AssetManager, Depends(get_asset_manager)],
) -> AssetManager:
    """Manager with this request's cookie keys applied."""
    return manager.with_credentials(cookie_credentials(request.cookies))


RequestManager = Annotated[AssetManager, Depends(get_request_manager)]


class AssetStoreRequest(CamelModel):
    """Search and featured parameters from a query string or JSON body.

    Unknown orientations are dropped and unknown sort orders fall back to
    ``relevant``. Out of range paging and unknown asset types are rejected.
    """

    query: str | None = None
    category: str | None = None
    color: str | None = None
    orientation: Orientation | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=MAX_PER_PAGE)
    sort_by: SortBy = SortBy.RELEVANT
    asset_type: AssetType = AssetType.PHOTO

    @field_validator("page", "per_page", mode="before")
    @classmethod
    def _not_a_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Input should be a valid integer")
        return value

    @field_validator("orientation", mode="before")
    @classmethod
    def _known_orientation(cls, value: Any) -> Any:
        return value if value in [o.value for o in Orientation] else None

    @field_validator("sort_by", mode="before")
    @classmethod
    def _known_sort(cls, value: Any) -> Any:
        return value if value in [s.value for s in SortBy] else SortBy.RELEVANT

    def search_params(self, *, with_query: bool = True) -> AssetSearchParams:
        return AssetSearchParams(
            query=self.query if with_query else None,
            category=self.category,
            color=self.color,
            orientation=self.orientation,
            page=self.page,
            per_page=self.per_page,
            sort_by=self.sort_by,
        )


def parse_request(raw: Mapping[str, Any]) -> AssetStoreRequest:
    """Validate raw parameters, raising a 400 :class:`HTTPException` on bad input.

    Empty values count as absent.
    """
    present = {key: value for key, value in raw.items() if value not in ("", None)}
    try:
        return AssetStoreRequest.model_validate(present)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "request"
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {error['msg']}") from None


def _server_error(route: str) -> JSONResponse:
    logger.exception(f"Asset store {route} error")
    body = AssetApiResponse.failure("Internal server error").to_json_dict()
    return JSONResponse(status_code=500, content=body)


async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def create_asset_store_router(
    prefix: str = "/asset-store",
    tags: list[str] | None = None,
    manager: AssetManager | None = None,
) -> APIRouter:
    """Create FastAPI router for the asset store.

    Args:
        prefix: URL prefix for routes (default: /asset-store)
        tags: OpenAPI tags
        manager: Manager to serve; defaults to one reading keys from the environment

    Returns:
        APIRouter to include in FastAPI app
    """
    global _manager
    if manager is not None:
        _manager = manager

    if tags is None:
        tags = ["asset-store"]

    router = APIRouter(prefix=prefix, tags=tags)

    # --- Search ---

    async def run_search(raw: Mapping[str, Any], manager: AssetManager) -> JSONResponse:
        params = parse_request(raw)
        try:
            result = await manager.search_assets(params.search_params(), params.asset_type)
        except Exception:
            return _server_error("search")
        return JSONResponse(content=result.to_json_dict())

    @router.get("/search")
    async def search_get(request: Request, manager: RequestManager) -> JSONResponse:
        """Search all enabled providers."""
        return await run_search(request.query_params, manager)

    @router.post("/search")
    async def search_post(request: Request, manager: RequestManager) -> JSONResponse:
        """Search all enabled providers (JSON body)."""
        return await run_search(await _json_body(request), manager)

    # --- Featured ---

    async def run_featured(raw: Mapping[str, Any], manager: AssetManager) -> JSONResponse:
        params = parse_request(raw)
        try:
            result = await manager.get_featured_assets(params.search_params(with_query=False), params.asset_type)
        except Exception:
            return _server_error("featured")
        return JSONResponse(content=result.to_json_dict())

    @router.get("/featured")
    async def featured_get(request: Request, manager: RequestManager) -> JSONResponse:
        """Featured/curated assets from all enabled providers."""
        return await run_featured(request.query_params, manager)

    @router.post("/featured")
    async def featured_post(request: Request, manager: RequestManager) -> JSONResponse:
        return await run_featured(await _json_body(request), manager)

    # --- Categories ---

    @router.get("/categories")
    async def categories(request: Request, manager: RequestManager) -> JSONResponse:
        """Categories for an asset type."""
        asset_type = parse_request(request.query_params).asset_type
        try:
            names = await manager.get_categories(asset_type)
        except Exception:
            logger.exception("Asset store categories error")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "categories": [],
                    "assetType": AssetType.PHOTO.value,
                },
            )
        return JSONResponse(
            content={"success": True, "categories": names, "assetType": asset_type.value}
        )

    # --- Key validation ---

    async def run_validate(provider: str | None, manager: AssetManager) -> JSONResponse:
        try:
            results = await manager.validate_api_keys()
        except Exception:
            logger.exception("Asset store validation error")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "results": {},
                    "message": "Validation failed",
                },
            )
        if provider:
            valid = results.get(provider, False)
            return JSONResponse(
                content={
                    "success": True,
                    "provider": provider,
                    "valid": valid,
                    "message": "API key is valid" if valid else "API key is invalid or not configured",
                }
            )
        return JSONResponse(
            content={
                "success": True,
                "results": results,
                "message": "API key validation completed",
            }
        )

    @router.get("/validate")
    async def validate_get(request: Request, manager: RequestManager) -> JSONResponse:
        """Validate keys of enabled providers, or of ``?provider=``."""
        return await run_validate(request.query_params.get("provider"), manager)

    @router.post("/validate")
    async def validate_post(request: Request, manager: RequestManager) -> JSONResponse:
        """Validate keys; ``{provider, apiKey}`` checks that key alone."""
        try:
            body = await _json_body(request)
        except HTTPException:
            body = {}
        provider = body.get("provider") if isinstance(body.get("provider"), str) else None
        api_key = body.get("apiKey")

        if provider and isinstance(api_key, str) and api_key:
            defaults = AssetStoreConfig()
            if provider in defaults.providers:
                manager = manager.derive(
                    defaults.merged({"providers": {provider: {"enabled": True, "apiKey": api_key}}})
                )

        return await run_validate(provider, manager)

    return router
