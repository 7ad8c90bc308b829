"""API configuration settings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeployerSettings(BaseSettings):
    """Configuration for the deployer API server and orchestration core."""

    model_config = SettingsConfigDict(env_prefix="DEPLOYER_", env_file=".env")

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Storage
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "data")

    # Provisioning backend
    ansible_dir: Path = Field(default_factory=lambda: Path.cwd() / "ansible")
    catalog_path: Optional[Path] = None

    # CORS (for the UI dev server)
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Orchestration
    batch_poll_interval_seconds: float = 1.0

    # WebSocket
    event_queue_size: int = 1000
    websocket_heartbeat_seconds: float = 30.0

    # Defaults for a fresh cluster configuration
    default_namespace: str = "bbdw-demo"
    default_git_repo_url: str = "https://github.com/LucianoRed/bbdw-2025.git"

    @property
    def state_file(self) -> Path:
        """Path of the durable state snapshot."""
        return self.data_dir / "state.json"


# Global settings instance
settings = DeployerSettings()


def get_settings() -> DeployerSettings:
    """Get the global settings instance."""
    return settings
