"""Data models for the asset store."""

from assetstore.models.asset import (
    Asset,
    AssetApiResponse,
    AssetSearchParams,
    AssetType,
    FrameAsset,
    IconAsset,
    Orientation,
    PhotoAsset,
    PhotoMetadata,
    ProviderName,
    ShapeAsset,
    SortBy,
    VideoAsset,
    VideoMetadata,
)
from assetstore.models.config import (
    AssetProviderConfig,
    AssetStoreConfig,
    CacheConfig,
    UiConfig,
)

__all__ = [
    # Asset models
    "Asset",
    "PhotoAsset",
    "VideoAsset",
    "ShapeAsset",
    "FrameAsset",
    "IconAsset",
    "PhotoMetadata",
    "VideoMetadata",
    # Enums
    "AssetType",
    "Orientation",
    "ProviderName",
    "SortBy",
    # Request / response
    "AssetSearchParams",
    "AssetApiResponse",
    # Config
    "AssetProviderConfig",
    "AssetStoreConfig",
    "UiConfig",
    "CacheConfig",
]
