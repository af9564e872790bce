"""Asset store configuration models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic.alias_generators import to_camel

from assetstore.models.asset import CamelModel


class AssetProviderConfig(CamelModel):
    """Per-provider enablement, credential and pacing settings."""

    enabled: bool = Field(default=False)
    api_key: str = Field(default="", description="Provider credential, may be empty")
    rate_limit: int = Field(default=50, gt=0, description="Requests per hour, used for pacing only")
    base_url: str | None = Field(default=None, description="Override the provider's API root")

    @property
    def is_usable(self) -> bool:
        """Enabled and holding a non-empty credential."""
        return self.enabled and bool(self.api_key)


class UiConfig(CamelModel):
    """Display preferences, stored but not interpreted here."""

    default_view: Literal["grid", "list"] = "grid"
    items_per_page: int = 20
    show_attribution: bool = True


class CacheConfig(CamelModel):
    """Client cache preferences, stored but not interpreted here."""

    enabled: bool = True
    max_items: int = 1000
    ttl: int = Field(default=60, description="Time to live in minutes")


def _default_providers() -> dict[str, AssetProviderConfig]:
    return {
        "unsplash": AssetProviderConfig(enabled=False, api_key="", rate_limit=50),
        "pexels": AssetProviderConfig(enabled=False, api_key="", rate_limit=200),
    }


class AssetStoreConfig(CamelModel):
    """Top-level asset store configuration.

    Provider order in ``providers`` is the order results are concatenated in.
    """

    enabled: bool = True
    providers: dict[str, AssetProviderConfig] = Field(default_factory=_default_providers)
    ui: UiConfig = Field(default_factory=UiConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def provider(self, name: str) -> AssetProviderConfig:
        """Config for a provider, or a disabled placeholder."""
        return self.providers.get(name) or AssetProviderConfig()

    def merged(self, partial: dict[str, Any]) -> "AssetStoreConfig":
        """Return a new config with ``partial`` deep-merged over this one.

        Keys may be given in snake_case or camelCase. Provider entries are
        merged field by field so a partial provider block keeps the rest.
        """
        base = self.model_dump(by_alias=True)
        incoming = AssetStoreConfig._camelize(partial)
        for key, value in incoming.items():
            if key == "providers" and isinstance(value, dict):
                providers = dict(base.get("providers", {}))
                for name, entry in value.items():
                    if isinstance(entry, AssetProviderConfig):
                        entry = entry.model_dump(by_alias=True)
                    current = dict(providers.get(name, {}))
                    current.update(AssetStoreConfig._camelize(entry))
                    providers[name] = current
                base["providers"] = providers
            elif key in ("ui", "cache") and isinstance(value, dict):
                section = dict(base.get(key, {}))
                section.update(AssetStoreConfig._camelize(value))
                base[key] = section
            else:
                base[key] = value
        return AssetStoreConfig.model_validate(base)

    @staticmethod
    def _camelize(data: Any) -> dict[str, Any]:
        if isinstance(data, CamelModel):
            return data.model_dump(by_alias=True)
        return {to_camel(k): v for k, v in dict(data).items()}
