"""Asset manager: one search interface over every enabled provider.

The manager owns the configuration, decides which providers may be called,
fans a request out to them concurrently and merges whatever comes back into
a single :class:`AssetApiResponse`. A provider failing never prevents the
others' results from being returned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

import httpx

from assetstore.models.asset import Asset, AssetApiResponse, AssetSearchParams, AssetType
from assetstore.models.config import AssetStoreConfig
from assetstore.providers.base import (
    REQUEST_TIMEOUT,
    USER_AGENT,
    AssetProvider,
    ProviderOutcome,
)
from assetstore.providers.local import LocalAssetSource
from assetstore.providers.pexels import PexelsProvider
from assetstore.providers.unsplash import UnsplashProvider
from assetstore.settings import (
    ConfigStore,
    CredentialResolver,
    load_asset_store_config,
    overlay_credentials,
    save_asset_store_config,
)

logger = logging.getLogger(__name__)

STORE_DISABLED = "Asset store is disabled"


@dataclass(frozen=True)
class _Snapshot:
    """Config and the adapters built from it, swapped as one reference."""
    base: AssetStoreConfig
    config: AssetStoreConfig
    providers: dict[str, AssetProvider]


class AssetManager:
    """Aggregates stock media providers behind one interface.

    Args:
        config: Initial configuration. Loaded from ``store`` when omitted.
        store: Settings collaborator; ``update_config`` writes through to it.
        credentials: Resolver for keys that override the persisted ones.
        local_source: Source for shape/frame/icon assets.
        client: Shared HTTP client for all adapters.
    """

    # Built-in providers
    PROVIDER_CLASSES: dict[str, type[AssetProvider]] = {
        "unsplash": UnsplashProvider,
        "pexels": PexelsProvider,
    }

    def __init__(
        self,
        config: AssetStoreConfig | None = None,
        *,
        store: ConfigStore | None = None,
        credentials: CredentialResolver | None = None,
        local_source: LocalAssetSource | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self.local = local_source or LocalAssetSource()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT,
            headers={"User-Agent": USER_AGENT},
        )
        if config is None:
            config = load_asset_store_config(store)
        self._state = self._build(config)

    def _build(self, base: AssetStoreConfig) -> _Snapshot:
        """Apply external credentials and construct fresh adapters."""
        config = base
        if self._credentials is not None:
            keys = {name: self._credentials(name) for name in base.providers}
            config = overlay_credentials(base, keys)

        providers: dict[str, AssetProvider] = {}
        for name, provider_config in config.providers.items():
            provider_class = self.PROVIDER_CLASSES.get(name)
            if provider_class is None:
                logger.warning(f"Ignoring unknown asset provider in config: {name}")
                continue
            providers[name] = provider_class(provider_config, client=self._client)
        return _Snapshot(base=base, config=config, providers=providers)

    # --- Configuration ---

    def get_config(self) -> AssetStoreConfig:
        """Copy of the persisted configuration, without externally supplied keys."""
        return self._state.base.model_copy(deep=True)

    def effective_config(self) -> AssetStoreConfig:
        """Copy of the configuration the adapters run with (resolver keys applied)."""
        return self._state.config.model_copy(deep=True)

    def update_config(self, new_config: AssetStoreConfig | Mapping[str, Any]) -> AssetStoreConfig:
        """Replace or partially update the configuration.

        A full :class:`AssetStoreConfig` replaces the current one; a mapping is
        deep-merged over it. Adapters are rebuilt and swapped in atomically and
        the result is written through to the settings store.
        """
        current = self._state
        if isinstance(new_config, AssetStoreConfig):
            base = self._without_resolved_keys(new_config, current)
        else:
            base = current.base.merged(dict(new_config))

        self._state = self._build(base)
        if self._store is not None:
            save_asset_store_config(self._store, base)
        return self.get_config()

    def _without_resolved_keys(self, config: AssetStoreConfig, current: _Snapshot) -> AssetStoreConfig:
        """Put persisted keys back where ``config`` carries a resolver-supplied one."""
        restored: dict[str, dict[str, Any]] = {}
        for name, provider in config.providers.items():
            effective = current.config.providers.get(name)
            if effective is None or not provider.api_key:
                continue
            persisted = current.base.provider(name).api_key
            if provider.api_key == effective.api_key and effective.api_key != persisted:
                restored[name] = {"apiKey": persisted}
        if not restored:
            return config.model_copy(deep=True)
        return config.merged({"providers": restored})

    def with_credentials(self, keys: Mapping[str, str]) -> "AssetManager":
        """Request-scoped manager using ``keys`` over the current config.

        Providers receiving a key are switched on. Nothing is persisted and
        this manager is left untouched.
        """
        if not keys:
            return self
        return self.derive(overlay_credentials(self._state.config, keys, enable=True))

    def derive(self, config: AssetStoreConfig) -> "AssetManager":
        """Unpersisted manager for ``config`` sharing this one's HTTP client."""
        return AssetManager(config, local_source=self.local, client=self._client)

    def is_enabled(self) -> bool:
        return self._state.config.enabled

    def get_provider(self, name: str) -> AssetProvider | None:
        return self._state.providers.get(name)

    def enabled_providers(self) -> list[str]:
        """Names of providers that would be called, in enumeration order."""
        return [name for name, p in self._state.providers.items() if p.is_enabled()]

    # --- Fan-out ---

    @staticmethod
    async def _invoke(
        provider: AssetProvider,
        call: Callable[[], Awaitable[AssetApiResponse]],
    ) -> ProviderOutcome:
        """Run one provider call, converting any failure into an outcome."""
        try:
            response = await call()
        except Exception as e:
            message = AssetProvider.error_message(e)
            logger.warning(f"{provider.display_name} request failed: {message}", exc_info=True)
            return ProviderOutcome(provider.name, error=message)
        if not response.success:
            logger.warning(f"{provider.display_name} returned an error: {response.error}")
        return ProviderOutcome(provider.name, response=response)

    def _eligible(self, state: _Snapshot, asset_type: AssetType) -> list[AssetProvider]:
        eligible = []
        for provider in state.providers.values():
            if not provider.is_enabled():
                continue
            if asset_type == AssetType.VIDEO and not provider.supports_videos:
                continue
            eligible.append(provider)
        return eligible

    async def _fan_out(
        self,
        params: AssetSearchParams,
        asset_type: AssetType,
        featured: bool,
    ) -> AssetApiResponse:
        state = self._state
        if not state.config.enabled:
            return AssetApiResponse.failure(STORE_DISABLED, params.page, params.per_page)

        outcomes: list[ProviderOutcome] = []
        local_assets: list[Asset] = []

        if asset_type.is_remote:
            providers = self._eligible(state, asset_type)
            if not providers:
                if any(p.is_enabled() for p in state.providers.values()):
                    error = f"No enabled provider supports {asset_type.value} assets"
                else:
                    error = STORE_DISABLED
                return AssetApiResponse.failure(error, params.page, params.per_page)

            outcomes = list(await asyncio.gather(*(
                self._invoke(provider, self._operation(provider, params, asset_type, featured))
                for provider in providers
            )))
        elif asset_type.is_local:
            local_assets = self.local.get_assets(asset_type, params)

        return self.merge(outcomes, local_assets, params)

    @staticmethod
    def _operation(
        provider: AssetProvider,
        params: AssetSearchParams,
        asset_type: AssetType,
        featured: bool,
    ) -> Callable[[], Awaitable[AssetApiResponse]]:
        if asset_type == AssetType.VIDEO:
            if featured:
                return lambda: provider.get_featured_videos(params.without_query())
            return lambda: provider.search_videos(params)
        if featured:
            return lambda: provider.get_featured_assets(params.without_query())
        return lambda: provider.search_assets(params)

    @staticmethod
    def merge(
        outcomes: list[ProviderOutcome],
        local_assets: list[Asset],
        params: AssetSearchParams,
    ) -> AssetApiResponse:
        """Concatenate provider results in order.

        ``total`` is the sum of each contributor's own count and is advisory.
        ``success`` holds when anything was returned or nothing failed;
        ``error`` carries the last failure even when other providers succeeded.
        """
        data: list[Asset] = []
        total = 0
        has_more = False
        last_error: str | None = None

        for outcome in outcomes:
            if outcome.succeeded:
                data.extend(outcome.response.data)
                total += outcome.response.total
                has_more = has_more or outcome.response.has_more
            else:
                last_error = outcome.failure_message

        data.extend(local_assets)
        total += len(local_assets)

        return AssetApiResponse(
            success=bool(data) or last_error is None,
            data=data,
            total=total,
            page=params.page,
            per_page=params.per_page,
            has_more=has_more,
            error=last_error,
        )

    # --- Public operations ---

    async def search_assets(
        self,
        params: AssetSearchParams | None = None,
        asset_type: AssetType | str = AssetType.PHOTO,
    ) -> AssetApiResponse:
        """Search every enabled provider for ``asset_type``."""
        return await self._fan_out(params or AssetSearchParams(), AssetType(asset_type), featured=False)

    search = search_assets

    async def get_featured_assets(
        self,
        params: AssetSearchParams | None = None,
        asset_type: AssetType | str = AssetType.PHOTO,
    ) -> AssetApiResponse:
        """Featured/curated listing from every enabled provider."""
        params = (params or AssetSearchParams()).without_query()
        return await self._fan_out(params, AssetType(asset_type), featured=True)

    async def get_categories(self, asset_type: AssetType | str = AssetType.PHOTO) -> list[str]:
        """Sorted union of category names for ``asset_type``."""
        asset_type = AssetType(asset_type)
        state = self._state
        categories: set[str] = set()

        if asset_type.is_remote:
            for provider in state.providers.values():
                if not provider.is_enabled():
                    continue
                try:
                    categories.update(await provider.get_categories())
                except Exception as e:
                    logger.warning(f"Failed to get {provider.display_name} categories: {e}")

        if asset_type.is_local:
            categories.update(self.local.get_categories(asset_type))

        return sorted(categories)

    async def validate_api_keys(self) -> dict[str, bool]:
        """Validate the key of every enabled provider."""
        state = self._state
        providers = [p for p in state.providers.values() if p.is_enabled()]

        async def check(provider: AssetProvider) -> bool:
            try:
                return await provider.validate_api_key()
            except Exception as e:
                logger.warning(f"{provider.display_name} API key validation failed: {e}")
                return False

        results = await asyncio.gather(*(check(p) for p in providers))
        return {p.name: bool(valid) for p, valid in zip(providers, results)}

    async def aclose(self) -> None:
        """Close the shared HTTP client if the manager created it."""
        if self._owns_client:
            await self._client.aclose()
