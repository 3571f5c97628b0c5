"""Cirrus engine configuration — loads from environment and .env files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


def _find_repo_root() -> Path:
    """Walk up from this file to find the repo root (where pyproject.toml lives)."""
    p = Path(__file__).resolve().parent
    while p != p.parent:
        if (p / "pyproject.toml").exists():
            return p
        p = p.parent
    return Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings — populated from env vars or .env file."""

    # App
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Identity
    tenant_id: str = ""
    client_id: str = ""
    authority_host: Optional[str] = None

    # Key store: "memory", "environment" or "keyvault"
    key_store: str = "environment"
    key_store_env_prefix: str = "CIRRUS_SP_"
    key_vault_url: Optional[str] = None

    # Management plane
    subscription_id: str = ""

    # Paths
    repo_root: Path = _find_repo_root()

    model_config = {"env_prefix": "CIRRUS_", "env_file": ".env"}

    @property
    def local_dir(self) -> Path:
        return self.repo_root / "local"

    @property
    def log_dir(self) -> Path:
        return self.local_dir / "logs"


settings = Settings()
