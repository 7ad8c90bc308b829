"""Shared Rich console helpers for CLI commands."""

from __future__ import annotations

from rich.console import Console

from deployer_api.config import get_settings
from deployer_api.models.events import DeployEvent, EventType
from deployer_api.models.state import ComponentStatus
from deployer_api.services.deploy.orchestrator import DeployOrchestrator

console = Console()

STATUS_STYLES = {
    ComponentStatus.NOT_DEPLOYED: "dim",
    ComponentStatus.DEPLOYING: "yellow",
    ComponentStatus.DEPLOYED: "green",
    ComponentStatus.FAILED: "red",
}


def show_error_message(message: str) -> None:
    console.print(f"❌ [bold red]{message}[/bold red]")


def show_success_message(message: str) -> None:
    console.print(f"✅ [bold green]{message}[/bold green]")


def show_warning_message(message: str) -> None:
    console.print(f"⚠️  [yellow]{message}[/yellow]")


def format_status(status: ComponentStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def build_orchestrator() -> DeployOrchestrator:
    """Build an orchestrator restored from the configured data directory."""
    return DeployOrchestrator.from_settings(get_settings())


def print_event(event: DeployEvent) -> None:
    """Render one broadcast event as live terminal output."""
    payload = event.payload
    if event.type in (EventType.JOB_OUTPUT, EventType.CLEANUP_OUTPUT):
        console.print(payload.get("data", ""), end="", markup=False, highlight=False)
    elif event.type is EventType.JOB_START:
        console.rule(f"[bold blue]{payload.get('component_id')}[/bold blue]")
    elif event.type is EventType.JOB_COMPLETE:
        if payload.get("success"):
            show_success_message(f"{payload.get('component_id')} deployed")
        else:
            show_error_message(f"{payload.get('component_id')} failed")
    elif event.type is EventType.JOB_ERROR:
        show_error_message(f"{payload.get('component_id')}: {payload.get('error')}")
    elif event.type is EventType.BATCH_STOPPED:
        show_warning_message(f"Batch stopped: {payload.get('reason')}")
