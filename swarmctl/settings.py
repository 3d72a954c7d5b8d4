from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Swarm
    default_network: str = os.getenv("SWARMCTL_DEFAULT_NETWORK", "plancks-net")
    network_driver: str = os.getenv("SWARMCTL_NETWORK_DRIVER", "overlay")
    docker_timeout_s: int = _env_int("SWARMCTL_DOCKER_TIMEOUT_S", 60)

    # When true, a failed network ensure aborts service creation instead of
    # being logged and skipped.
    strict_networking: bool = _env_bool("SWARMCTL_STRICT_NETWORKING", False)

    # Event log
    db_path: str = os.getenv("SWARMCTL_DB_PATH", "swarmctl.db")

    # CLI
    api_url: str = os.getenv("SWARMCTL_API_URL", "http://localhost:8000")


settings = Settings()
