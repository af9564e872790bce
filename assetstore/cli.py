"""CLI commands for the asset store."""

from __future__ import annotations

import asyncio
import json
from contextlib import nullcontext
from typing import Awaitable, Callable, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from assetstore.models.asset import AssetApiResponse, AssetSearchParams, AssetType, Orientation, SortBy
from assetstore.providers.manager import AssetManager
from assetstore.models.config import AssetStoreConfig
from assetstore.settings import (
    YamlConfigStore,
    env_credentials,
    load_asset_store_config,
    overlay_credentials,
    save_asset_store_config,
)

console = Console()

T = TypeVar("T")

ASSET_TYPES = [t.value for t in AssetType if t != AssetType.UPLOAD]


def get_manager(settings: str, use_env: bool) -> AssetManager:
    return AssetManager(
        store=YamlConfigStore(settings),
        credentials=env_credentials if use_env else None,
    )


def _manager(ctx: click.Context) -> AssetManager:
    return get_manager(ctx.obj["settings"], ctx.obj["env_keys"])


def _update_settings(ctx: click.Context, partial: dict) -> AssetStoreConfig:
    """Merge ``partial`` into the settings file without building a manager."""
    store = YamlConfigStore(ctx.obj["settings"])
    updated = load_asset_store_config(store).merged(partial)
    save_asset_store_config(store, updated)
    return updated


def _run(manager: AssetManager, operation: Callable[[], Awaitable[T]]) -> T:
    async def run() -> T:
        try:
            return await operation()
        finally:
            await manager.aclose()

    return asyncio.run(run())


def _status(message: str, quiet: bool):
    # Keep --json output machine readable
    return nullcontext() if quiet else console.status(message)


def _mask(key: str) -> str:
    if not key:
        return "-"
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}…{key[-4:]}"


def _print_response(response: AssetApiResponse, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(response.to_json_dict(), indent=2))
        return

    table = Table(title=f"Assets (page {response.page})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Provider", style="magenta")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("Orientation")
    table.add_column("Name", overflow="fold")

    for asset in response.data:
        orientation = getattr(asset.metadata, "orientation", None)
        table.add_row(
            asset.id,
            asset.provider,
            asset.type,
            asset.category,
            orientation.value if orientation else "-",
            asset.name[:60],
        )

    console.print(table)
    more = " (more available)" if response.has_more else ""
    console.print(f"[dim]Showing {len(response.data)} of ~{response.total} results{more}[/dim]")
    if response.error:
        style = "yellow" if response.success else "red"
        console.print(f"[{style}]{escape(response.error)}[/{style}]")


@click.group()
@click.option("--settings", default="./assetstore.yaml", help="Settings file")
@click.option("--env-keys/--no-env-keys", default=True,
              help="Let UNSPLASH_API_KEY / PEXELS_API_KEY override saved keys")
@click.pass_context
def main(ctx: click.Context, settings: str, env_keys: bool) -> None:
    """Asset store - search stock photos and videos across providers."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["env_keys"] = env_keys


@main.command()
@click.argument("query")
@click.option("--type", "-t", "asset_type", type=click.Choice(ASSET_TYPES), default="photo")
@click.option("--page", "-p", default=1, type=click.IntRange(min=1), help="Page number")
@click.option("--per-page", "-n", default=20, type=click.IntRange(1, 100), help="Results per page")
@click.option("--orientation", "-o", type=click.Choice([o.value for o in Orientation]), default=None)
@click.option("--color", "-c", default=None, help="Color filter")
@click.option("--sort", "sort_by", type=click.Choice([s.value for s in SortBy]), default="relevant")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    asset_type: str,
    page: int,
    per_page: int,
    orientation: str | None,
    color: str | None,
    sort_by: str,
    as_json: bool,
) -> None:
    """Search all enabled providers."""
    manager = _manager(ctx)
    params = AssetSearchParams(
        query=query,
        page=page,
        per_page=per_page,
        orientation=orientation,
        color=color,
        sort_by=sort_by,
    )

    with _status(f"Searching for '{query}'...", as_json):
        response = _run(manager, lambda: manager.search_assets(params, asset_type))

    _print_response(response, as_json)
    if not response.success:
        ctx.exit(1)


@main.command()
@click.option("--type", "-t", "asset_type", type=click.Choice(ASSET_TYPES), default="photo")
@click.option("--page", "-p", default=1, type=click.IntRange(min=1), help="Page number")
@click.option("--per-page", "-n", default=20, type=click.IntRange(1, 100), help="Results per page")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def featured(ctx: click.Context, asset_type: str, page: int, per_page: int, as_json: bool) -> None:
    """List featured/curated assets."""
    manager = _manager(ctx)
    params = AssetSearchParams(page=page, per_page=per_page)

    with _status("Loading featured assets...", as_json):
        response = _run(manager, lambda: manager.get_featured_assets(params, asset_type))

    _print_response(response, as_json)
    if not response.success:
        ctx.exit(1)


@main.command()
@click.option("--type", "-t", "asset_type", type=click.Choice(ASSET_TYPES), default="photo")
@click.pass_context
def categories(ctx: click.Context, asset_type: str) -> None:
    """List categories for an asset type."""
    manager = _manager(ctx)
    names = _run(manager, lambda: manager.get_categories(asset_type))
    if not names:
        console.print("[yellow]No categories (enable a provider first)[/yellow]")
        return
    for name in names:
        click.echo(name)


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate API keys of enabled providers."""
    manager = _manager(ctx)

    with console.status("Validating API keys..."):
        results = _run(manager, manager.validate_api_keys)

    if not results:
        console.print("[yellow]No providers enabled[/yellow]")
        return

    table = Table(title="API Key Validation")
    table.add_column("Provider", style="cyan")
    table.add_column("Valid")
    for name, valid in results.items():
        table.add_row(name, "[green]yes[/green]" if valid else "[red]no[/red]")
    console.print(table)

    if not all(results.values()):
        ctx.exit(1)


@main.group()
def config() -> None:
    """Show or change provider settings."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration (keys masked)."""
    current = load_asset_store_config(YamlConfigStore(ctx.obj["settings"]))
    if ctx.obj["env_keys"]:
        current = overlay_credentials(current, {name: env_credentials(name) for name in current.providers})

    console.print(f"Asset store: {'[green]enabled[/green]' if current.enabled else '[red]disabled[/red]'}")

    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Enabled")
    table.add_column("API Key")
    table.add_column("Rate Limit", justify="right")
    for name, provider in current.providers.items():
        table.add_row(
            name,
            "yes" if provider.enabled else "no",
            _mask(provider.api_key),
            f"{provider.rate_limit}/h",
        )
    console.print(table)


def _provider_choice() -> click.Choice:
    return click.Choice(list(AssetManager.PROVIDER_CLASSES))


@config.command("set-key")
@click.argument("provider", type=_provider_choice())
@click.argument("api_key")
@click.option("--enable/--no-enable", default=True, help="Also enable the provider")
@click.pass_context
def config_set_key(ctx: click.Context, provider: str, api_key: str, enable: bool) -> None:
    """Save an API key for PROVIDER."""
    entry: dict[str, object] = {"apiKey": api_key}
    if enable:
        entry["enabled"] = True
    _update_settings(ctx, {"providers": {provider: entry}})
    console.print(f"[green]Saved API key for {provider}[/green]")


@config.command("enable")
@click.argument("provider", type=_provider_choice())
@click.pass_context
def config_enable(ctx: click.Context, provider: str) -> None:
    """Enable PROVIDER."""
    _update_settings(ctx, {"providers": {provider: {"enabled": True}}})
    console.print(f"[green]Enabled {provider}[/green]")


@config.command("disable")
@click.argument("provider", type=_provider_choice())
@click.pass_context
def config_disable(ctx: click.Context, provider: str) -> None:
    """Disable PROVIDER."""
    _update_settings(ctx, {"providers": {provider: {"enabled": False}}})
    console.print(f"[yellow]Disabled {provider}[/yellow]")


if __name__ == "__main__":
    main()
