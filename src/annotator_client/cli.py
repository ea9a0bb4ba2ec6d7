"""Annotator client CLI - Main entry point."""

import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="annotator",
    help="Inspect the annotator client's session and publisher token caches",
    no_args_is_help=True,
)
console = Console()

# Sub-command groups
session_app = typer.Typer(help="Session commands")
token_app = typer.Typer(help="Publisher access token commands")

app.add_typer(session_app, name="session")
app.add_typer(token_app, name="token")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Annotator client tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ============================================================================
# Session Commands
# ============================================================================


@session_app.command("load")
def session_load(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Load the current session from the service."""
    from . import build_session_cache
    from .errors import AnnotatorClientError

    async def _load():
        cache = build_session_cache()
        try:
            return await cache.load()
        finally:
            await cache.close()

    try:
        model = asyncio.run(_load())
    except AnnotatorClientError as e:
        console.print(f"[red]Session load failed: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(model.to_dict(), default=str))
        return

    table = Table(title="Session")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("User", model.userid or "[dim]Not logged in[/dim]")
    table.add_row("CSRF token", "Set" if model.csrf else "[red]Not set[/red]")
    table.add_row("Groups", ", ".join(g.name or g.id for g in model.groups) or "[dim]None[/dim]")
    enabled = [name for name, on in model.features.items() if on]
    table.add_row("Features", ", ".join(enabled) or "[dim]None[/dim]")

    console.print(table)


@session_app.command("status")
def session_status():
    """Show how the session would be loaded with the current settings."""
    from .config import settings

    table = Table(title="Session Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Service URL", settings.service_url)
    table.add_row("API URL", settings.api_url)
    if settings.authority:
        table.add_row("Source", f"profile (authority {settings.authority})")
    else:
        table.add_row("Source", f"session endpoint ({settings.session_url})")
    table.add_row("Cache TTL", f"{settings.session_cache_ttl:.0f}s")
    table.add_row("Publisher account", "Configured" if settings.grant_token else "[dim]None[/dim]")

    console.print(table)


# ============================================================================
# Token Commands
# ============================================================================


@token_app.command("get")
def token_get():
    """Exchange the configured grant token for an access token."""
    from .auth import TokenManager
    from .errors import TokenExchangeError

    manager = TokenManager()

    try:
        token = asyncio.run(manager.get_token())
    except TokenExchangeError as e:
        console.print(f"[red]Token exchange failed: {e}[/red]")
        raise typer.Exit(1)

    if token is None:
        console.print(
            Panel(
                "[yellow]No publisher account configured.[/yellow]\n\n"
                "Set ANNOTATOR_SERVICES, for example:\n"
                '  ANNOTATOR_SERVICES=[{"authority": "publisher.org", "grantToken": "..."}]',
                title="Access Token",
            )
        )
        return

    status = manager.get_status()
    masked = f"{token[:4]}…" if len(token) > 4 else "****"
    console.print(
        Panel(
            f"[bold green]Access token obtained[/bold green]\n\n"
            f"Token: {masked}\n"
            f"Expires in: {status['expires_in_seconds']:.0f}s",
            title="Access Token",
        )
    )


@app.command()
def version():
    """Show version information."""
    from . import __version__

    console.print(f"annotator-client v{__version__}")


if __name__ == "__main__":
    app()
