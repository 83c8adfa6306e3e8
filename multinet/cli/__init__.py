"""
multinet - Command Line Interface

Inspect how table prefixes and community user-meta keys resolve for a
given network. Built with Typer, output rendered with Rich.

Usage:
    $ multinet --help
    $ multinet prefix wp_ --network-id 2 --root-site-id 2
    $ multinet meta-key last_activity --network-id 5 --root-site-id 5
    $ multinet keys --network-id 3 --root-site-id 7
    $ multinet config
"""

from __future__ import annotations

from typing import Optional
import logging

import typer
from rich.console import Console
from rich.table import Table

from multinet import __version__
from multinet.config.settings import settings
from multinet.namespace.context import NetworkContext, SharedStorage
from multinet.namespace.rewriter import USER_META_KEYS, NamespaceRewriter

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="multinet",
    help="multinet - per-network community data namespacing",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"multinet version {__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    """Set verbose mode."""
    if value:
        logging.basicConfig(level=logging.DEBUG)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        help="Enable verbose output.",
    ),
) -> None:
    """
    multinet - per-network community data namespacing

    Use --help on any subcommand for detailed information.
    """
    # no-op when --verbose already configured logging
    logging.basicConfig(level=settings.LOG_LEVEL)


NetworkOption = typer.Option(
    ..., "--network-id", "-n", help="ID of the network serving the request."
)
RootSiteOption = typer.Option(
    ..., "--root-site-id", "-r", help="Root site ID of that network."
)
BasePrefixOption = typer.Option(
    None, "--base-prefix", "-b", help="Shared base table prefix."
)
PrimaryOption = typer.Option(
    None, "--primary-network-id", "-p", help="ID of the main network."
)


def _build_context(
    network_id: int,
    root_site_id: int,
    base_prefix: Optional[str],
    primary_network_id: Optional[int],
) -> NetworkContext:
    try:
        return NetworkContext(
            network_id=network_id,
            root_site_id=root_site_id,
            storage=SharedStorage(base_prefix or settings.DB_BASE_PREFIX),
            primary_network_id=(
                primary_network_id
                if primary_network_id is not None
                else settings.PRIMARY_NETWORK_ID
            ),
        )
    except ValueError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)


@app.command()
def prefix(
    candidate: str = typer.Argument(..., help="Candidate table prefix."),
    network_id: int = NetworkOption,
    root_site_id: int = RootSiteOption,
    base_prefix: Optional[str] = BasePrefixOption,
    primary_network_id: Optional[int] = PrimaryOption,
) -> None:
    """Resolve a table prefix for a network."""
    ctx = _build_context(network_id, root_site_id, base_prefix, primary_network_id)
    console.print(NamespaceRewriter(ctx).resolve_prefix(candidate), highlight=False)


@app.command("meta-key")
def meta_key(
    key: str = typer.Argument(..., help="Candidate user-meta key."),
    network_id: int = NetworkOption,
    root_site_id: int = RootSiteOption,
    base_prefix: Optional[str] = BasePrefixOption,
    primary_network_id: Optional[int] = PrimaryOption,
) -> None:
    """Resolve a user-meta key for a network."""
    ctx = _build_context(network_id, root_site_id, base_prefix, primary_network_id)
    console.print(NamespaceRewriter(ctx).resolve_meta_key(key), highlight=False)


@app.command()
def keys(
    network_id: int = typer.Option(
        1, "--network-id", "-n", help="ID of the network serving the request."
    ),
    root_site_id: int = typer.Option(
        1, "--root-site-id", "-r", help="Root site ID of that network."
    ),
    base_prefix: Optional[str] = BasePrefixOption,
    primary_network_id: Optional[int] = PrimaryOption,
) -> None:
    """List the per-network user-meta keys and how they resolve."""
    ctx = _build_context(network_id, root_site_id, base_prefix, primary_network_id)
    rewriter = NamespaceRewriter(ctx)

    table = Table(title=f"User-meta keys for network {network_id}")
    table.add_column("Key", style="cyan")
    table.add_column("Resolved", style="green")
    for key in USER_META_KEYS:
        table.add_row(key, rewriter.resolve_meta_key(key))
    console.print(table)


@app.command()
def config() -> None:
    """Show the active settings."""
    table = Table(title="multinet settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("PRIMARY_NETWORK_ID", str(settings.PRIMARY_NETWORK_ID))
    table.add_row("DB_BASE_PREFIX", settings.DB_BASE_PREFIX)
    table.add_row("LOG_LEVEL", settings.LOG_LEVEL)
    console.print(table)


if __name__ == "__main__":
    app()
