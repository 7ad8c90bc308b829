"""
Demo Deployer API - FastAPI backend for the demo deployer.

Provides REST and WebSocket endpoints for:
- Cluster connection configuration
- Single-component, deploy-all and offer deployments
- Live job output and component state updates
- Namespace cleanup and cluster status refresh
"""

__version__ = "0.1.0"
