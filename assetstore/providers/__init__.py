"""Stock media providers for the asset store.

Providers are used in two ways:
1. Python (through :class:`AssetManager`, or an adapter directly)
2. FastAPI routes (proxied through the backend, see ``create_asset_store_router``)

Each adapter translates one provider's API into the shared asset models;
the manager fans requests out to every enabled provider and merges results.
"""

from assetstore.providers.base import AssetProvider, ProviderOutcome
from assetstore.providers.errors import (
    ProviderAuthError,
    ProviderDisabledError,
    ProviderError,
    ProviderHTTPError,
    ProviderMaintenanceError,
    ProviderNetworkError,
    ProviderOutageError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from assetstore.providers.local import LocalAssetSource
from assetstore.providers.manager import AssetManager
from assetstore.providers.pexels import PexelsProvider
from assetstore.providers.unsplash import UnsplashProvider

__all__ = [
    # Base classes
    "AssetProvider",
    "ProviderOutcome",
    # Errors
    "ProviderError",
    "ProviderDisabledError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "ProviderOutageError",
    "ProviderMaintenanceError",
    "ProviderHTTPError",
    "ProviderNetworkError",
    "ProviderResponseError",
    # Providers
    "UnsplashProvider",
    "PexelsProvider",
    "LocalAssetSource",
    # Aggregator
    "AssetManager",
]
