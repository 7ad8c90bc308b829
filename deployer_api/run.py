"""
Server entry point for the demo deployer.

Windows needs the Proactor event loop for asyncio subprocesses (every step
runs ansible-playbook), and the policy has to be installed before uvicorn
creates its loop.

Usage:
    python -m deployer_api.run [--host HOST] [--port PORT] [--reload] [--log-level LEVEL]
"""

import argparse
import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

import uvicorn

from .config import get_settings


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Demo deployer API server")
    parser.add_argument("--host", default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument(
        "--reload", action="store_true", default=settings.debug, help="Reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Uvicorn log level",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Run the API server."""
    args = parse_args(argv)
    uvicorn.run(
        "deployer_api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
