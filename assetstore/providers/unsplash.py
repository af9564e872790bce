"""Unsplash API provider.

API Documentation: https://unsplash.com/documentation

Rate Limits:
- Demo mode: 50 requests per hour
- Production mode: 5,000 requests per hour (after approval)

Authentication: Client-ID header (Authorization: Client-ID ACCESS_KEY)

Attribution Required:
- Must credit photographer and Unsplash
- Hotlinking is required (use returned URLs directly)
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from assetstore.models.asset import (
    AssetApiResponse,
    AssetSearchParams,
    Orientation,
    PhotoAsset,
    PhotoMetadata,
    SortBy,
)
from assetstore.providers.base import AssetProvider


# Unsplash color filters
UNSPLASH_COLORS = [
    "black_and_white", "black", "white", "yellow", "orange",
    "red", "purple", "magenta", "green", "teal", "blue",
]

# Our orientation -> Unsplash orientation
UNSPLASH_ORIENTATIONS = {
    Orientation.LANDSCAPE: "landscape",
    Orientation.PORTRAIT: "portrait",
    Orientation.SQUARE: "squarish",
}

UNSPLASH_CATEGORIES = [
    "nature", "business", "people", "technology", "architecture",
    "food", "travel", "animals", "abstract", "minimal",
]

# Tag title -> category
TAG_CATEGORIES = {
    "nature": "nature",
    "landscape": "nature",
    "forest": "nature",
    "mountain": "nature",
    "ocean": "nature",
    "sky": "nature",
    "business": "business",
    "office": "business",
    "meeting": "business",
    "work": "business",
    "people": "people",
    "portrait": "people",
    "person": "people",
    "technology": "technology",
    "computer": "technology",
    "laptop": "technology",
    "phone": "technology",
    "architecture": "architecture",
    "building": "architecture",
    "city": "architecture",
    "food": "food",
    "travel": "travel",
    "animals": "animals",
    "abstract": "abstract",
    "minimal": "minimal",
}


# --- Wire schema ---

class UnsplashUrls(BaseModel):
    raw: str | None = None
    full: str | None = None
    regular: str
    small: str | None = None
    thumb: str


class UnsplashLinks(BaseModel):
    html: str | None = None
    download: str | None = None
    download_location: str | None = None


class UnsplashUserLinks(BaseModel):
    html: str | None = None


class UnsplashUser(BaseModel):
    id: str | None = None
    username: str
    name: str | None = None
    links: UnsplashUserLinks = Field(default_factory=UnsplashUserLinks)


class UnsplashTag(BaseModel):
    type: str | None = None
    title: str


class UnsplashPhoto(BaseModel):
    id: str
    width: int
    height: int
    color: str | None = None
    description: str | None = None
    alt_description: str | None = None
    urls: UnsplashUrls
    links: UnsplashLinks = Field(default_factory=UnsplashLinks)
    user: UnsplashUser
    tags: list[UnsplashTag] = Field(default_factory=list)


class UnsplashSearchResponse(BaseModel):
    total: int
    total_pages: int
    results: list[UnsplashPhoto]


UnsplashPhotoList = TypeAdapter(list[UnsplashPhoto])


class UnsplashProvider(AssetProvider):
    """Unsplash API provider implementation (photos only)."""

    name = "unsplash"
    display_name = "Unsplash"
    base_url = "https://api.unsplash.com"
    max_per_page = 30

    def get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Client-ID {self.config.api_key}"}

    async def search_assets(self, params: AssetSearchParams) -> AssetApiResponse:
        """Search for photos on Unsplash.

        ``sort_by == latest`` maps to ``order_by=latest``; anything else is
        ``relevant``. Orientation ``square`` is sent as ``squarish`` and colors
        outside Unsplash's filter vocabulary are dropped.
        """
        per_page = self.clamp_per_page(params.per_page)
        query: dict[str, Any] = {
            "query": self.query_or_default(params.query),
            "page": params.page,
            "per_page": per_page,
            "order_by": "latest" if params.sort_by == SortBy.LATEST else "relevant",
        }

        if params.orientation is not None:
            query["orientation"] = UNSPLASH_ORIENTATIONS[params.orientation]

        if params.color and params.color in UNSPLASH_COLORS:
            query["color"] = params.color

        async def run() -> AssetApiResponse:
            data = await self.make_request("/search/photos", query)
            page = UnsplashSearchResponse.model_validate(data)
            return self.transform_search(page, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def get_featured_assets(self, params: AssetSearchParams | None = None) -> AssetApiResponse:
        """Popular photos. The endpoint returns a bare list without totals."""
        params = (params or AssetSearchParams()).without_query()
        per_page = self.clamp_per_page(params.per_page)
        query = {"page": params.page, "per_page": per_page, "order_by": "popular"}

        async def run() -> AssetApiResponse:
            data = await self.make_request("/photos", query)
            photos = UnsplashPhotoList.validate_python(data)
            return self.transform_listing(photos, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def get_categories(self) -> list[str]:
        # Unsplash has no categories endpoint
        return list(UNSPLASH_CATEGORIES)

    async def validate_api_key(self) -> bool:
        return await self.check_endpoint("/photos/random")

    def transform_asset(self, item: UnsplashPhoto) -> PhotoAsset:
        author = item.user.name or item.user.username
        return PhotoAsset(
            id=f"unsplash_{item.id}",
            name=item.description or item.alt_description or "Unsplash Photo",
            category=self.category_for(item.tags),
            url=item.urls.regular,
            thumbnail=item.urls.thumb,
            tags=[tag.title for tag in item.tags],
            provider="unsplash",
            metadata=PhotoMetadata(
                width=item.width,
                height=item.height,
                format="jpg",
                attribution=f"Photo by {author} on Unsplash",
                license="Unsplash License",
                photographer=author,
                photographer_url=item.user.links.html,
                download_url=item.links.download or item.urls.full,
                color=item.color,
                orientation=Orientation.from_dimensions(item.width, item.height),
            ),
        )

    def transform_search(
        self, response: UnsplashSearchResponse, page: int, per_page: int
    ) -> AssetApiResponse:
        return AssetApiResponse(
            success=True,
            data=[self.transform_asset(photo) for photo in response.results],
            total=response.total,
            page=page,
            per_page=per_page,
            has_more=page < response.total_pages,
        )

    def transform_listing(
        self, photos: list[UnsplashPhoto], page: int, per_page: int
    ) -> AssetApiResponse:
        total_pages = math.ceil(len(photos) / per_page)
        return AssetApiResponse(
            success=True,
            data=[self.transform_asset(photo) for photo in photos],
            total=len(photos),
            page=page,
            per_page=per_page,
            has_more=page < total_pages,
        )

    @staticmethod
    def category_for(tags: list[UnsplashTag]) -> str:
        """First tag that maps onto a known category, else ``general``."""
        for tag in tags:
            category = TAG_CATEGORIES.get(tag.title.lower())
            if category:
                return category
        return "general"
