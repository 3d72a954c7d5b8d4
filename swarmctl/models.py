from __future__ import annotations

import re
from dataclasses import dataclass

MB = 1024 * 1024

SERVICE_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.\-]{0,62}$")

NODE_STATE_DOWN = "down"
TASK_STATE_RUNNING = "running"
TASK_STATE_SHUTDOWN = "shutdown"


def validate_service_name(name: str) -> None:
    if not SERVICE_NAME_RE.match(name or ""):
        raise ValueError(
            "Invalid service name. Use letters/numbers and -._, starting with a letter or number (max 63 chars)."
        )


def validate_image(image: str) -> None:
    if not image or not image.strip():
        raise ValueError("image is required.")


@dataclass(frozen=True)
class Service:
    """What a caller asks for. The swarm is the system of record."""

    name: str
    image: str
    replicas: int = 1
    memory_limit: int = 0  # MB, 0 = unlimited
    network: str | None = None

    @property
    def desired_replicas(self) -> int:
        return self.replicas or 1

    def validate(self) -> None:
        validate_service_name(self.name)
        validate_image(self.image)
        if self.replicas < 0:
            raise ValueError("replicas must not be negative.")
        if self.memory_limit < 0:
            raise ValueError("memory_limit must not be negative.")


@dataclass(frozen=True)
class ServiceState:
    """Declared vs. observed summary of one replicated service."""

    id: str
    name: str
    image: str
    replicas_required: int
    replicas_running: int = 0
    memory_limit: int = 0  # MB, rounded up from the limit in bytes


@dataclass(frozen=True)
class ServiceSpec:
    name: str
    image: str
    replicas: int
    memory_bytes: int
    networks: tuple[str, ...] = ()


# Records read from the platform. Only the fields the core consumes.


@dataclass(frozen=True)
class NetworkRecord:
    id: str
    name: str


@dataclass(frozen=True)
class ServiceRecord:
    id: str
    name: str
    image: str
    replicas: int | None = None  # None unless replicated mode
    memory_bytes: int | None = None


@dataclass(frozen=True)
class TaskRecord:
    service_id: str
    node_id: str
    desired_state: str
    state: str


@dataclass(frozen=True)
class NodeRecord:
    id: str
    state: str
