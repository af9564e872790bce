"""Bundled (non-network) assets: shapes, frames and icons."""

from __future__ import annotations

from assetstore.models.asset import Asset, AssetSearchParams, AssetType

LOCAL_CATEGORIES: dict[AssetType, list[str]] = {
    AssetType.SHAPE: ["basic", "arrows", "symbols", "decorative"],
    AssetType.FRAME: ["modern", "vintage", "minimalist", "ornate"],
    AssetType.ICON: ["ui", "social", "business", "navigation"],
}


class LocalAssetSource:
    """Serves assets that ship with the application.

    The catalog starts empty; callers register assets with :meth:`add`.
    """

    def __init__(self, assets: list[Asset] | None = None) -> None:
        self._assets: list[Asset] = list(assets or [])

    def add(self, asset: Asset) -> None:
        self._assets.append(asset)

    def get_assets(self, asset_type: AssetType, params: AssetSearchParams) -> list[Asset]:
        """Assets of ``asset_type`` matching the query and category filters."""
        if not asset_type.is_local:
            return []
        query_lower = (params.query or "").lower().strip()
        matches = []
        for asset in self._assets:
            if asset.type != asset_type.value:
                continue
            if params.category and asset.category != params.category:
                continue
            if query_lower:
                name = asset.name.lower()
                if query_lower not in name and not any(query_lower in t.lower() for t in asset.tags):
                    continue
            matches.append(asset)
        return matches

    def get_categories(self, asset_type: AssetType) -> list[str]:
        return list(LOCAL_CATEGORIES.get(asset_type, []))
