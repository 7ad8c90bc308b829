"""
Status, catalog and configure commands for the Demo Deployer CLI
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from deployer_api.models.state import ConfigUpdate, TokenRefreshStatus
from deployer_api.services.deploy.errors import DeployError

from ..console import (
    build_orchestrator,
    console,
    format_status,
    show_error_message,
    show_success_message,
    show_warning_message,
)


def _parse_secrets(pairs: List[str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` pairs; an empty value deletes the secret."""
    secrets: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{pair}'")
        secrets[key.strip()] = value
    return secrets


def show_catalog() -> None:
    """Print the component catalog and the offers."""
    orchestrator = build_orchestrator()
    catalog = orchestrator.catalog

    table = Table(title="Components", show_header=True, header_style="bold blue")
    table.add_column("Order", justify="right")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Namespace")
    table.add_column("Steps", justify="right")

    for component in catalog.schedule():
        table.add_row(
            str(component.order),
            component.id,
            component.name,
            component.category,
            component.target_namespace,
            str(len(component.steps)),
        )
    console.print(table)

    for offer in catalog.offers:
        console.print(
            Panel(
                f"{offer.description}\n\n[dim]Components:[/dim] "
                + ", ".join(offer.component_ids),
                title=f"[bold]{offer.name}[/bold] ({offer.id})",
                border_style="blue",
            )
        )


def show_status(refresh: bool = False) -> None:
    """Print the persisted component states, optionally re-read from the cluster."""
    orchestrator = build_orchestrator()

    if refresh:
        try:
            asyncio.run(orchestrator.refresh_status())
        except DeployError as e:
            show_error_message(str(e))
            raise typer.Exit(1)
        orchestrator.store.flush()

    config = orchestrator.store.get_config()
    configured = "✅" if config["ocp_api_url"] and config["ocp_token"] else "❌"
    console.print(
        Panel(
            f"API: {config['ocp_api_url'] or '-'}\n"
            f"Namespace: {config['namespace'] or '-'}\n"
            f"Configured: {configured}",
            title="[bold blue]Cluster[/bold blue]",
            border_style="blue",
        )
    )

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Component")
    table.add_column("Status", justify="center")
    table.add_column("Route")
    table.add_column("Finished", style="dim")

    states = orchestrator.store.list_components()
    for component in orchestrator.catalog.schedule():
        state = states[component.id]
        table.add_row(
            component.id,
            format_status(state.status),
            state.route or "-",
            state.finished_at.strftime("%Y-%m-%d %H:%M:%S") if state.finished_at else "-",
        )
    console.print(table)


def configure(
    api_url: Optional[str] = None,
    token: Optional[str] = None,
    namespace: Optional[str] = None,
    git_repo_url: Optional[str] = None,
    secrets: Optional[List[str]] = None,
) -> None:
    """Update the persisted cluster configuration."""
    orchestrator = build_orchestrator()
    update = ConfigUpdate(
        ocp_api_url=api_url,
        ocp_token=token,
        namespace=namespace,
        git_repo_url=git_repo_url,
        secrets=_parse_secrets(secrets) if secrets else None,
    )
    masked = orchestrator.store.update_config(update)
    orchestrator.store.flush()

    table = Table(show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in masked.items():
        if key == "secrets":
            value = ", ".join(f"{k}={v}" for k, v in value.items()) or "-"
        table.add_row(key, str(value) or "-")
    console.print(table)
    show_success_message("Configuration saved")


_REFRESH_STYLES = {
    TokenRefreshStatus.UPDATED: "[green]updated[/green]",
    TokenRefreshStatus.SKIPPED: "[dim]skipped[/dim]",
    TokenRefreshStatus.FAILED: "[red]failed[/red]",
}


def refresh_tokens() -> None:
    """Push the current cluster token into deployed workloads that read it."""
    orchestrator = build_orchestrator()
    try:
        result = asyncio.run(orchestrator.refresh_tokens())
    except DeployError as e:
        show_error_message(str(e))
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Component")
    table.add_column("Namespace", style="dim")
    table.add_column("Result", justify="center")
    table.add_column("Reason", style="dim")
    for entry in result.results:
        table.add_row(
            entry.component_id,
            entry.namespace or "-",
            _REFRESH_STYLES[entry.status],
            entry.reason or "",
        )
    console.print(table)

    if not result.results:
        show_warning_message("No component reads the cluster token")
    elif not result.success:
        show_error_message("Some workloads could not be updated")
        raise typer.Exit(1)
    else:
        show_success_message("Tokens refreshed")
