"""
Demo Deployer CLI Package

A Rich-based CLI over the deploy orchestrator: inspect the catalog, set the
cluster configuration and run deploys and cleanups from the terminal.
"""

from deployer_api import __version__

from .main import app

__all__ = ["app", "__version__"]
