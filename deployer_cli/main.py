#!/usr/bin/env python3
"""
Demo Deployer CLI

Rich-based CLI for the demo deployer. Wraps the deploy orchestrator with
live terminal output, and starts the API server.
"""

from __future__ import annotations

from typing import List, Optional

import typer

from .commands.deploy import run_cleanup, run_deploy, run_deploy_batch
from .commands.status import configure, refresh_tokens, show_catalog, show_status
from .console import console

# Main app
app = typer.Typer(
    name="deployer",
    help="Demo Deployer CLI - deploy demo components to OpenShift",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=True,
)


# Add version callback
def version_callback(value: bool):
    if value:
        from deployer_api import __version__
        console.print(f"Demo Deployer v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information"
    ),
):
    """
    [bold blue]Demo Deployer CLI[/bold blue]

    Deploy catalog components to an OpenShift cluster through Ansible
    playbooks and follow their output live.

    [dim]Examples:[/dim]
        deployer configure --api-url https://api.cluster:6443 --token sha256~...
        deployer deploy agent-ai            # Deploy one component
        deployer deploy-offer demo-governo  # Deploy a whole offer
    """
    pass


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """🚀 Start the deployer API server."""
    import uvicorn

    from deployer_api.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "deployer_api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@app.command("catalog")
def catalog():
    """📚 List catalog components and offers."""
    show_catalog()


@app.command("status")
def status(
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Re-read component status from the cluster"
    ),
):
    """🔍 Show component status."""
    show_status(refresh=refresh)


@app.command("refresh-tokens")
def refresh_tokens_cmd():
    """🔑 Push the current cluster token into deployed workloads."""
    refresh_tokens()


@app.command("configure")
def configure_cmd(
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Cluster API endpoint"),
    token: Optional[str] = typer.Option(None, "--token", help="Cluster access token"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Default namespace"),
    git_repo_url: Optional[str] = typer.Option(None, "--git-repo", help="Source repository URL"),
    secret: Optional[List[str]] = typer.Option(
        None, "--secret", "-s", help="Secret as KEY=VALUE (repeatable, empty value deletes)"
    ),
):
    """⚙️ Set the cluster endpoint, token and secrets."""
    configure(
        api_url=api_url,
        token=token,
        namespace=namespace,
        git_repo_url=git_repo_url,
        secrets=secret,
    )


@app.command("deploy")
def deploy(
    component_id: str = typer.Argument(..., help="Component to deploy"),
):
    """🎯 Deploy one component and stream its output."""
    run_deploy(component_id)


@app.command("deploy-all")
def deploy_all():
    """📦 Deploy every component in catalog order."""
    run_deploy_batch()


@app.command("deploy-offer")
def deploy_offer(
    offer_id: str = typer.Argument(..., help="Offer to deploy"),
):
    """📦 Deploy the components of one offer in order."""
    run_deploy_batch(offer_id)


@app.command("cleanup")
def cleanup(
    target: Optional[str] = typer.Argument(
        None, help="Component (or offer with --offer) to clean up; all when omitted"
    ),
    offer: bool = typer.Option(False, "--offer", help="Treat TARGET as an offer ID"),
):
    """🧹 Delete component namespaces and reset their state."""
    if offer and target is None:
        raise typer.BadParameter("--offer requires an offer ID")
    run_cleanup(target, offer=offer)


if __name__ == "__main__":
    app()
