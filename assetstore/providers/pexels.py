"""Pexels API provider.

API Documentation: https://www.pexels.com/api/documentation/

Rate Limits:
- 200 requests per hour (default)
- 20,000 requests per month

Authentication: API key in Authorization header

Attribution Required:
- Must show "Photos provided by Pexels" with link
- Credit photographers when possible
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field

from assetstore.models.asset import (
    AssetApiResponse,
    AssetSearchParams,
    Orientation,
    PhotoAsset,
    PhotoMetadata,
    VideoAsset,
    VideoMetadata,
)
from assetstore.providers.base import AssetProvider


PEXELS_CATEGORIES = [
    "nature", "business", "people", "technology", "architecture",
    "food", "travel", "animals", "abstract", "minimal",
    "sports", "music", "art", "fashion", "health",
]

# Checked in order against the alt text; first hit wins
ALT_CATEGORIES: list[tuple[str, tuple[str, ...]]] = [
    ("nature", ("nature", "landscape", "forest")),
    ("business", ("business", "office", "meeting")),
    ("people", ("people", "person", "portrait")),
    ("technology", ("technology", "computer", "laptop")),
    ("architecture", ("architecture", "building", "city")),
    ("food", ("food", "restaurant", "cooking")),
    ("travel", ("travel", "vacation", "trip")),
    ("animals", ("animal", "pet", "wildlife")),
    ("abstract", ("abstract", "art")),
    ("minimal", ("minimal", "simple")),
]

# Minimum size filter Pexels applies for an orientation
ORIENTATION_SIZES = {
    Orientation.LANDSCAPE: "large",
    Orientation.PORTRAIT: "medium",
}

_WORD_SPLIT = re.compile(r"[\s,.-]+")


# --- Wire schema ---

class PexelsPhotoSource(BaseModel):
    original: str
    large2x: str | None = None
    large: str
    medium: str
    small: str | None = None
    portrait: str | None = None
    landscape: str | None = None
    tiny: str | None = None


class PexelsPhoto(BaseModel):
    id: int
    width: int
    height: int
    url: str
    photographer: str
    photographer_url: str | None = None
    photographer_id: int | None = None
    avg_color: str | None = None
    src: PexelsPhotoSource
    liked: bool = False
    alt: str | None = None


class PexelsVideoUser(BaseModel):
    id: int | None = None
    name: str
    url: str | None = None


class PexelsVideoFile(BaseModel):
    id: int | None = None
    quality: str | None = None
    file_type: str | None = None
    width: int | None = None
    height: int | None = None
    link: str


class PexelsVideo(BaseModel):
    id: int
    width: int
    height: int
    duration: int
    url: str
    image: str
    user: PexelsVideoUser
    video_files: list[PexelsVideoFile] = Field(default_factory=list)


class PexelsPhotoPage(BaseModel):
    """Search and curated envelope; curated omits ``total_results``."""
    total_results: int | None = None
    page: int | None = None
    per_page: int | None = None
    photos: list[PexelsPhoto]
    next_page: str | None = None


class PexelsVideoPage(BaseModel):
    total_results: int | None = None
    page: int | None = None
    per_page: int | None = None
    videos: list[PexelsVideo]
    next_page: str | None = None


class PexelsProvider(AssetProvider):
    """Pexels API provider implementation (photos and videos)."""

    name = "pexels"
    display_name = "Pexels"
    base_url = "https://api.pexels.com"
    max_per_page = 80
    supports_videos = True

    def get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": self.config.api_key}

    def _search_query(self, params: AssetSearchParams, per_page: int) -> dict[str, Any]:
        query: dict[str, Any] = {
            "query": self.query_or_default(params.query),
            "page": params.page,
            "per_page": per_page,
        }
        if params.orientation is not None:
            query["orientation"] = params.orientation.value
            query["size"] = ORIENTATION_SIZES.get(params.orientation)
        return query

    async def search_assets(self, params: AssetSearchParams) -> AssetApiResponse:
        """Search for photos on Pexels.

        Color is passed through as given (hex or color name).
        """
        per_page = self.clamp_per_page(params.per_page)
        query = self._search_query(params, per_page)
        if params.color:
            query["color"] = params.color

        async def run() -> AssetApiResponse:
            data = await self.make_request("/v1/search", query)
            page = PexelsPhotoPage.model_validate(data)
            return self.transform_photo_page(page, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def search_videos(self, params: AssetSearchParams) -> AssetApiResponse:
        """Search for videos on Pexels."""
        per_page = self.clamp_per_page(params.per_page)
        query = self._search_query(params, per_page)

        async def run() -> AssetApiResponse:
            data = await self.make_request("/videos/search", query)
            page = PexelsVideoPage.model_validate(data)
            return self.transform_video_page(page, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def get_featured_assets(self, params: AssetSearchParams | None = None) -> AssetApiResponse:
        """Curated photos (editor's picks)."""
        params = (params or AssetSearchParams()).without_query()
        per_page = self.clamp_per_page(params.per_page)
        query = {"page": params.page, "per_page": per_page}

        async def run() -> AssetApiResponse:
            data = await self.make_request("/v1/curated", query)
            page = PexelsPhotoPage.model_validate(data)
            return self.transform_photo_page(page, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def get_featured_videos(self, params: AssetSearchParams | None = None) -> AssetApiResponse:
        """Popular videos."""
        params = (params or AssetSearchParams()).without_query()
        per_page = self.clamp_per_page(params.per_page)
        query = {"page": params.page, "per_page": per_page}

        async def run() -> AssetApiResponse:
            data = await self.make_request("/videos/popular", query)
            page = PexelsVideoPage.model_validate(data)
            return self.transform_video_page(page, params.page, per_page)

        return await self.guarded(params.page, per_page, run)

    async def get_categories(self) -> list[str]:
        return list(PEXELS_CATEGORIES)

    async def validate_api_key(self) -> bool:
        return await self.check_endpoint("/v1/curated", {"page": 1, "per_page": 1})

    def transform_asset(self, item: PexelsPhoto) -> PhotoAsset:
        alt = item.alt or ""
        return PhotoAsset(
            id=f"pexels_{item.id}",
            name=alt or "Pexels Photo",
            category=self.category_for(alt),
            url=item.src.large,
            thumbnail=item.src.medium,
            tags=self.tags_for(alt),
            provider="pexels",
            metadata=PhotoMetadata(
                width=item.width,
                height=item.height,
                format="jpg",
                attribution=f"Photo by {item.photographer} on Pexels",
                license="Pexels License",
                photographer=item.photographer,
                photographer_url=item.photographer_url,
                download_url=item.src.original,
                color=item.avg_color,
                orientation=Orientation.from_dimensions(item.width, item.height),
            ),
        )

    def transform_video(self, item: PexelsVideo) -> VideoAsset:
        rendition = self.pick_rendition(item.video_files)
        video_url = rendition.link if rendition else item.url
        file_type = rendition.file_type if rendition and rendition.file_type else "video/mp4"
        return VideoAsset(
            id=f"pexels_video_{item.id}",
            name=f"Pexels Video {item.id}",
            category="video",
            url=video_url,
            thumbnail=item.image,
            tags=["video"],
            provider="pexels",
            metadata=VideoMetadata(
                width=item.width,
                height=item.height,
                format=file_type.split("/")[-1],
                attribution=f"Video by {item.user.name} on Pexels",
                license="Pexels License",
                photographer=item.user.name,
                photographer_url=item.user.url,
                orientation=Orientation.from_dimensions(item.width, item.height),
                duration=item.duration,
                video_url=video_url,
            ),
        )

    def transform_photo_page(self, page: PexelsPhotoPage, current: int, per_page: int) -> AssetApiResponse:
        total = page.total_results if page.total_results is not None else len(page.photos)
        return AssetApiResponse(
            success=True,
            data=[self.transform_asset(photo) for photo in page.photos],
            total=total,
            page=current,
            per_page=per_page,
            has_more=bool(page.next_page),
        )

    def transform_video_page(self, page: PexelsVideoPage, current: int, per_page: int) -> AssetApiResponse:
        total = page.total_results if page.total_results is not None else len(page.videos)
        return AssetApiResponse(
            success=True,
            data=[self.transform_video(video) for video in page.videos],
            total=total,
            page=current,
            per_page=per_page,
            has_more=bool(page.next_page),
        )

    @staticmethod
    def pick_rendition(files: list[PexelsVideoFile]) -> PexelsVideoFile | None:
        """HD rendition if offered, otherwise the first one."""
        for video_file in files:
            if video_file.quality == "hd":
                return video_file
        return files[0] if files else None

    @staticmethod
    def category_for(alt: str) -> str:
        alt = alt.lower()
        for category, keywords in ALT_CATEGORIES:
            if any(keyword in alt for keyword in keywords):
                return category
        return "general"

    @staticmethod
    def tags_for(alt: str) -> list[str]:
        """Words longer than two characters from the alt text."""
        return [word for word in _WORD_SPLIT.split(alt.lower()) if len(word) > 2]
