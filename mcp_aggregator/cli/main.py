"""Main CLI interface for MCP Aggregator."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print as rich_print
from rich.console import Console
from rich.table import Table

from ..config.manager import ConfigManager
from ..core.manager import MCPAggregator
from ..protocol import Envelope

DEFAULT_CONFIG = "mcp-aggregator.yaml"

app = typer.Typer(help="MCP Aggregator - one endpoint in front of many MCP servers")
console = Console()

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help=f"Configuration file path (default: {DEFAULT_CONFIG} if present, "
    "otherwise built-in backends from environment)",
)


def resolve_config_path(config: Optional[str]) -> Optional[str]:
    if config:
        return config
    if Path(DEFAULT_CONFIG).exists():
        return DEFAULT_CONFIG
    return None


@app.command()
def serve(
    config: Optional[str] = CONFIG_OPTION,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Listen port"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
):
    """Serve the aggregated MCP endpoint over HTTP."""
    setup_logging(verbose)
    try:
        aggregator = MCPAggregator(resolve_config_path(config))
        rich_print(
            f"[blue]Starting {aggregator.config.manager.name} "
            f"with {len(aggregator.router.backends)} backends[/blue]"
        )
        asyncio.run(aggregator.start(host, port))
    except KeyboardInterrupt:
        rich_print("\n[yellow]Shutting down MCP aggregator...[/yellow]")
    except Exception as e:
        rich_print(f"[red]Error starting MCP aggregator: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def status(config: Optional[str] = CONFIG_OPTION):
    """Show configured backends and how tools are routed to them."""
    try:
        config_obj = ConfigManager(resolve_config_path(config)).load_config()
    except Exception as e:
        rich_print(f"[red]Error getting status: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="MCP Backends")
    table.add_column("Backend", style="cyan")
    table.add_column("URL", style="magenta")
    table.add_column("Prefixes", style="yellow")
    table.add_column("Default", style="green")
    table.add_column("Enabled", style="blue")

    for name, backend in config_obj.backends.items():
        table.add_row(
            name,
            backend.url,
            ", ".join(backend.prefixes) or "-",
            "✓" if backend.default else "",
            "✓" if backend.enabled else "✗",
        )

    console.print(table)
    rich_print(f"Fallback chain: {' -> '.join(config_obj.fallback_chain())}")


@app.command()
def tools(config: Optional[str] = CONFIG_OPTION):
    """List the merged tool catalog from all live backends."""
    try:
        asyncio.run(show_tools(resolve_config_path(config)))
    except Exception as e:
        rich_print(f"[red]Error listing tools: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name"),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as JSON"),
    config: Optional[str] = CONFIG_OPTION,
):
    """Call one tool through the router and print the raw response."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        rich_print(f"[red]Invalid --args JSON: {e}[/red]")
        raise typer.Exit(1)

    try:
        response = asyncio.run(call_tool(resolve_config_path(config), name, arguments))
    except Exception as e:
        rich_print(f"[red]Error calling tool: {e}[/red]")
        raise typer.Exit(1)

    console.print_json(data=response.encode())
    if response.is_error:
        raise typer.Exit(1)


# Configuration management commands
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")


@config_app.command("validate")
def validate_config(config: Optional[str] = CONFIG_OPTION):
    """Validate configuration file."""
    issues = ConfigManager(resolve_config_path(config)).validate_config()

    if not issues:
        rich_print("[green]Configuration is valid![/green]")
        return

    rich_print("[red]Configuration validation failed:[/red]")
    for issue in issues:
        rich_print(f"  [red]•[/red] {issue}")
    raise typer.Exit(1)


@config_app.command("show")
def show_config(config: Optional[str] = CONFIG_OPTION):
    """Show current configuration."""
    try:
        config_obj = ConfigManager(resolve_config_path(config)).load_config()
    except Exception as e:
        rich_print(f"[red]Error showing configuration: {e}[/red]")
        raise typer.Exit(1)

    rich_print("[bold]MCP Aggregator Configuration[/bold]")
    rich_print(f"Server: {config_obj.manager.name} v{config_obj.manager.version}")
    rich_print(f"Listen: {config_obj.manager.host}:{config_obj.manager.port}")

    rich_print(f"\n[bold]Backends ({len(config_obj.backends)}):[/bold]")
    for name, backend in config_obj.backends.items():
        state = "[green]enabled[/green]" if backend.enabled else "[red]disabled[/red]"
        default = " [bold](default)[/bold]" if backend.default else ""
        rich_print(f"  • {name}: {backend.url} ({state}){default}")

    rich_print("\n[bold]Routing:[/bold]")
    rich_print(f"  • duplicate tools: {config_obj.routing.duplicate_tools}")
    rich_print(f"  • fallback chain: {' -> '.join(config_obj.fallback_chain())}")
    rich_print(f"  • request timeout: {config_obj.runtime.request_timeout}s")


# Implementation functions
async def show_tools(config_path: Optional[str]):
    """Fetch and print the merged catalog."""
    aggregator = MCPAggregator(config_path)
    try:
        response = await aggregator.handle(Envelope.request("tools/list", request_id=1))
    finally:
        await aggregator.stop()

    catalog = response.result.get("tools", []) if isinstance(response.result, dict) else []
    if not catalog:
        rich_print("[yellow]No tools available[/yellow]")
        return

    table = Table(title=f"Aggregated Tools ({len(catalog)})")
    table.add_column("Tool", style="cyan")
    table.add_column("Routed to", style="magenta")
    table.add_column("Description", style="white")

    for tool in catalog:
        tool_name = str(tool.get("name", ""))
        table.add_row(
            tool_name,
            aggregator.router.classifier.classify(tool_name),
            str(tool.get("description", "")),
        )

    console.print(table)


async def call_tool(config_path: Optional[str], name: str, arguments: dict) -> Envelope:
    """Send one tools/call through the router."""
    aggregator = MCPAggregator(config_path)
    try:
        return await aggregator.handle(
            Envelope.request(
                "tools/call", {"name": name, "arguments": arguments}, request_id=1
            )
        )
    finally:
        await aggregator.stop()


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def main():
    """Main entry point for CLI."""
    app()
