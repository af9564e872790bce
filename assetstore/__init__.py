"""Asset store - unified search over stock photo and video providers."""

from assetstore.models.asset import AssetApiResponse, AssetSearchParams, AssetType
from assetstore.models.config import AssetProviderConfig, AssetStoreConfig
from assetstore.providers.manager import AssetManager

__version__ = "0.1.0"
__all__ = [
    "AssetManager",
    "AssetApiResponse",
    "AssetSearchParams",
    "AssetType",
    "AssetProviderConfig",
    "AssetStoreConfig",
]
