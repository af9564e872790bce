"""Settings store and credential sources for the asset store.

The manager never decides where configuration lives. It is handed a
:class:`ConfigStore` with get/set semantics keyed by a settings name, and
optionally a credential resolver that can supply API keys from another
channel (environment, request cookies) which take precedence over the
persisted ones.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

import yaml
from pydantic import ValidationError

from assetstore.models.config import AssetStoreConfig

logger = logging.getLogger(__name__)

SETTINGS_NAME = "assetStore"

# Cookie names carrying per-request API keys
COOKIE_NAMES = {
    "unsplash": "unsplash_api_key",
    "pexels": "pexels_api_key",
}

CredentialResolver = Callable[[str], "str | None"]


class ConfigStore(Protocol):
    """Key/value settings collaborator."""

    def get(self, name: str, default: Any = None) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...


class MemoryConfigStore:
    """In-process settings store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._data[name] = value


class YamlConfigStore:
    """Settings persisted as a YAML mapping of name -> payload."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} must contain a mapping")
        return data

    def get(self, name: str, default: Any = None) -> Any:
        return self._read().get(name, default)

    def set(self, name: str, value: Any) -> None:
        data = self._read()
        data[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False)


def load_asset_store_config(store: ConfigStore | None) -> AssetStoreConfig:
    """Read the asset store config, falling back to defaults.

    Saved values are merged over the defaults so older files missing newer
    fields still load.
    """
    defaults = AssetStoreConfig()
    if store is None:
        return defaults
    try:
        saved = store.get(SETTINGS_NAME)
        if saved is None:
            return defaults
        return defaults.merged(saved)
    except (ValidationError, yaml.YAMLError, ValueError, TypeError) as e:
        logger.warning(f"Failed to load asset store config, using defaults: {e}")
        return defaults


def save_asset_store_config(store: ConfigStore, config: AssetStoreConfig) -> None:
    store.set(SETTINGS_NAME, config.model_dump(mode="json", by_alias=True))


def env_credentials(name: str) -> str | None:
    """Resolve ``<PROVIDER>_API_KEY`` from the environment."""
    return os.environ.get(f"{name.upper()}_API_KEY") or None


def cookie_credentials(cookies: Mapping[str, str]) -> dict[str, str]:
    """Extract provider API keys present in request cookies."""
    keys = {}
    for provider, cookie_name in COOKIE_NAMES.items():
        value = cookies.get(cookie_name)
        if value:
            keys[provider] = value
    return keys


def overlay_credentials(
    config: AssetStoreConfig,
    keys: Mapping[str, str | None],
    *,
    enable: bool = False,
) -> AssetStoreConfig:
    """Return a copy of ``config`` with externally supplied keys applied.

    A supplied key wins over the persisted one. With ``enable`` a provider
    receiving a key is also switched on, which is how request cookies behave.
    """
    providers: dict[str, dict[str, Any]] = {}
    for name in config.providers:
        key = keys.get(name)
        if not key:
            continue
        entry: dict[str, Any] = {"apiKey": key}
        if enable:
            entry["enabled"] = True
        providers[name] = entry
    return config.merged({"providers": providers})
