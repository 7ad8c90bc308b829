"""
Deploy and cleanup commands for the Demo Deployer CLI

Runs pipelines in-process and streams their output to the terminal.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.table import Table

from deployer_api.models.state import JobStatus
from deployer_api.services.deploy.batch import BatchEntry
from deployer_api.services.deploy.errors import DeployError

from ..console import (
    build_orchestrator,
    console,
    print_event,
    show_error_message,
    show_success_message,
    show_warning_message,
)


def _show_batch_summary(results: List[BatchEntry], scheduled: int) -> None:
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Component")
    table.add_column("Job", style="dim")
    table.add_column("Result", justify="center")

    for entry in results:
        result = (
            "[green]completed[/green]"
            if entry.status is JobStatus.COMPLETED
            else f"[red]failed[/red] {entry.error or ''}"
        )
        table.add_row(entry.component_id, entry.job_id or "-", result)

    console.print(table)
    if len(results) < scheduled:
        show_warning_message(f"{scheduled - len(results)} component(s) not attempted")


async def _deploy(component_id: str) -> bool:
    orchestrator = build_orchestrator()
    orchestrator.subscribe(print_event)
    try:
        started = orchestrator.start_deploy(component_id)
        await orchestrator.wait_idle()
        job = orchestrator.get_job(started.job_id)
        return job is not None and job.status is JobStatus.COMPLETED
    finally:
        orchestrator.unsubscribe(print_event)
        orchestrator.store.flush()


async def _deploy_batch(offer_id: Optional[str]) -> List[BatchEntry]:
    orchestrator = build_orchestrator()
    orchestrator.subscribe(print_event)
    try:
        if offer_id is None:
            scheduled = len(orchestrator.catalog.components)
            results = await orchestrator.deploy_all()
        else:
            offer = orchestrator.catalog.get_offer(offer_id)
            scheduled = len(offer.component_ids) if offer else 0
            results = await orchestrator.deploy_offer(offer_id)
    finally:
        orchestrator.unsubscribe(print_event)
        orchestrator.store.flush()
    _show_batch_summary(results, scheduled)
    return results


async def _cleanup(target: Optional[str], offer: bool):
    orchestrator = build_orchestrator()
    orchestrator.subscribe(print_event)
    try:
        if target is None:
            return await orchestrator.cleanup_all()
        if offer:
            return await orchestrator.cleanup_offer(target)
        return await orchestrator.cleanup_component(target)
    finally:
        orchestrator.unsubscribe(print_event)
        orchestrator.store.flush()


def run_deploy(component_id: str) -> None:
    """Deploy one component and exit non-zero if its pipeline fails."""
    try:
        success = asyncio.run(_deploy(component_id))
    except DeployError as e:
        show_error_message(str(e))
        raise typer.Exit(1)

    if not success:
        raise typer.Exit(1)


def run_deploy_batch(offer_id: Optional[str] = None) -> None:
    """Deploy every component (or one offer) sequentially."""
    try:
        results = asyncio.run(_deploy_batch(offer_id))
    except DeployError as e:
        show_error_message(str(e))
        raise typer.Exit(1)

    if any(entry.status is JobStatus.FAILED for entry in results):
        raise typer.Exit(1)
    show_success_message("Batch complete")


def run_cleanup(target: Optional[str] = None, offer: bool = False) -> None:
    """Delete namespaces and reset component state."""
    try:
        result = asyncio.run(_cleanup(target, offer))
    except DeployError as e:
        show_error_message(str(e))
        raise typer.Exit(1)

    if not result.success:
        raise typer.Exit(1)
