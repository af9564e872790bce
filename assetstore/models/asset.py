"""Normalized asset models shared by every provider.

Provider adapters translate their native payloads into these models before
anything else sees them. The JSON form uses camelCase keys so responses can
be handed to a browser client unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump for the wire (camelCase, no unset optionals)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AssetType(str, Enum):
    """Kind of asset a caller asks for."""
    PHOTO = "photo"
    VIDEO = "video"
    SHAPE = "shape"
    FRAME = "frame"
    ICON = "icon"
    UPLOAD = "upload"

    @property
    def is_remote(self) -> bool:
        """Served by network providers."""
        return self in (AssetType.PHOTO, AssetType.VIDEO)

    @property
    def is_local(self) -> bool:
        """Served by the bundled local source."""
        return self in (AssetType.SHAPE, AssetType.FRAME, AssetType.ICON)


class ProviderName(str, Enum):
    """Known asset sources."""
    UNSPLASH = "unsplash"
    PEXELS = "pexels"
    LOCAL = "local"


class Orientation(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"

    @classmethod
    def from_dimensions(cls, width: int, height: int) -> "Orientation":
        """Derive orientation from pixel dimensions."""
        if width > height:
            return cls.LANDSCAPE
        if height > width:
            return cls.PORTRAIT
        return cls.SQUARE


class SortBy(str, Enum):
    RELEVANT = "relevant"
    LATEST = "latest"
    POPULAR = "popular"


class AssetMetadata(CamelModel):
    """Fields every asset carries in its metadata block."""
    width: int
    height: int
    format: str
    size: int | None = None
    attribution: str | None = None
    license: str | None = None


class PhotoMetadata(AssetMetadata):
    photographer: str | None = None
    photographer_url: str | None = None
    download_url: str | None = None
    color: str | None = None
    orientation: Orientation


class VideoMetadata(AssetMetadata):
    photographer: str | None = None
    photographer_url: str | None = None
    color: str | None = None
    orientation: Orientation
    duration: int = Field(..., ge=0, description="Length in seconds")
    video_url: str = Field(..., description="Resolved playable rendition")


class LocalMetadata(AssetMetadata):
    svg_content: str | None = None
    customizable: bool = False
    style: str | None = None


class BaseAsset(CamelModel):
    """Fields shared by all asset kinds."""
    id: str = Field(..., description="Provider-prefixed unique id")
    name: str
    category: str
    url: str = Field(..., description="Display resolution URL")
    thumbnail: str
    tags: list[str] = Field(default_factory=list)


class PhotoAsset(BaseAsset):
    type: Literal["photo"] = "photo"
    provider: Literal["unsplash", "pexels"]
    metadata: PhotoMetadata


class VideoAsset(BaseAsset):
    type: Literal["video"] = "video"
    provider: Literal["pexels"]
    metadata: VideoMetadata


class ShapeAsset(BaseAsset):
    type: Literal["shape"] = "shape"
    provider: Literal["local"] = "local"
    metadata: LocalMetadata


class FrameAsset(BaseAsset):
    type: Literal["frame"] = "frame"
    provider: Literal["local"] = "local"
    metadata: LocalMetadata


class IconAsset(BaseAsset):
    type: Literal["icon"] = "icon"
    provider: Literal["local"] = "local"
    metadata: LocalMetadata


Asset = Annotated[
    Union[PhotoAsset, VideoAsset, ShapeAsset, FrameAsset, IconAsset],
    Field(discriminator="type"),
]


class AssetSearchParams(CamelModel):
    """Search and filter parameters accepted by every provider."""
    query: str | None = None
    category: str | None = None
    color: str | None = None
    orientation: Orientation | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1)
    sort_by: SortBy = SortBy.RELEVANT

    def without_query(self) -> "AssetSearchParams":
        """Copy suitable for featured/curated listings."""
        return self.model_copy(update={"query": None})


class AssetApiResponse(CamelModel):
    """Normalized response returned by adapters and the manager."""
    success: bool
    data: list[Asset] = Field(default_factory=list)
    total: int = Field(default=0, description="Advisory count, may differ from len(data)")
    page: int = 1
    per_page: int = 20
    has_more: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, error: str, page: int = 1, per_page: int = 20) -> "AssetApiResponse":
        """Empty unsuccessful response carrying an error message."""
        return cls(
            success=False,
            data=[],
            total=0,
            page=page,
            per_page=per_page,
            has_more=False,
            error=error,
        )
