from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator

import docker
import requests
from docker.errors import APIError, DockerException, NotFound
from docker.types import ContainerSpec, NetworkAttachmentConfig, Resources, ServiceMode, TaskTemplate

from .db import log_event
from .errors import PlatformError, PlatformUnavailable, ResourceConflict, ResourceNotFound
from .models import NetworkRecord, NodeRecord, ServiceRecord, ServiceSpec, TaskRecord
from .settings import settings


@contextmanager
def platform_call(what: str) -> Iterator[None]:
    """Translate docker-py failures into swarmctl platform errors."""
    try:
        yield
    except NotFound as e:
        raise ResourceNotFound(f"{what}: {e.explanation or e}") from e
    except APIError as e:
        detail = str(e.explanation or e)
        if e.status_code == 409 or "already exists" in detail.lower():
            raise ResourceConflict(f"{what}: {detail}") from e
        raise PlatformError(f"{what}: {detail}") from e
    except requests.exceptions.ConnectionError as e:
        raise PlatformUnavailable(f"{what}: docker daemon unreachable ({e})") from e
    except requests.exceptions.Timeout as e:
        raise PlatformError(f"{what}: timed out ({e})") from e
    except DockerException as e:
        raise PlatformUnavailable(f"{what}: {e}") from e


def network_record(raw: dict[str, Any]) -> NetworkRecord:
    return NetworkRecord(id=raw.get("Id", ""), name=raw.get("Name", ""))


def service_record(raw: dict[str, Any]) -> ServiceRecord:
    spec = raw.get("Spec") or {}
    template = spec.get("TaskTemplate") or {}
    mode = spec.get("Mode") or {}

    replicated = mode.get("Replicated")
    replicas = replicated.get("Replicas") if isinstance(replicated, dict) else None

    limits = (template.get("Resources") or {}).get("Limits") or {}
    memory_bytes = limits.get("MemoryBytes")

    return ServiceRecord(
        id=raw.get("ID", ""),
        name=spec.get("Name", ""),
        image=(template.get("ContainerSpec") or {}).get("Image", ""),
        replicas=int(replicas) if replicas is not None else None,
        memory_bytes=int(memory_bytes) if memory_bytes is not None else None,
    )


def task_record(raw: dict[str, Any]) -> TaskRecord:
    return TaskRecord(
        service_id=raw.get("ServiceID", ""),
        # Pending tasks have not been assigned a node yet.
        node_id=raw.get("NodeID", ""),
        desired_state=raw.get("DesiredState", ""),
        state=(raw.get("Status") or {}).get("State", ""),
    )


def node_record(raw: dict[str, Any]) -> NodeRecord:
    return NodeRecord(id=raw.get("ID", ""), state=(raw.get("Status") or {}).get("State", ""))


def task_template(spec: ServiceSpec) -> TaskTemplate:
    resources = Resources(mem_limit=spec.memory_bytes) if spec.memory_bytes > 0 else None
    return TaskTemplate(
        container_spec=ContainerSpec(image=spec.image),
        resources=resources,
        networks=[NetworkAttachmentConfig(target=n) for n in spec.networks],
    )


class DockerPlatform:
    """Platform client backed by the docker engine API of a swarm manager.

    The client is created on first use so that constructing the platform never
    fails; a daemon that cannot be reached surfaces as PlatformUnavailable on
    the first call.
    """

    def __init__(self, timeout: float | None = None, client: docker.DockerClient | None = None):
        self.timeout = timeout if timeout is not None else settings.docker_timeout_s
        self._client = client

    def with_timeout(self, timeout: float) -> DockerPlatform:
        """A platform whose calls time out after `timeout` seconds.

        The docker client applies one timeout to every request it sends, so a
        different deadline needs its own client.
        """
        return DockerPlatform(timeout=timeout)

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env(timeout=self.timeout)
            except DockerException as e:
                raise PlatformUnavailable(f"Error getting docker client environment: {e}") from e
        return self._client

    @property
    def api(self) -> docker.APIClient:
        return self.client.api

    def ping(self) -> bool:
        try:
            with platform_call("ping"):
                return bool(self.api.ping())
        except PlatformError:
            return False

    # Networks

    def list_networks(self) -> list[NetworkRecord]:
        with platform_call("list networks"):
            return [network_record(n) for n in self.api.networks()]

    def create_network(self, name: str, driver: str = "overlay", attachable: bool = True) -> NetworkRecord:
        with platform_call(f"create network {name}"):
            res = self.api.create_network(name, driver=driver, attachable=attachable, check_duplicate=True)
        if res.get("Warning"):
            log_event("WARN", f"Network '{name}' created with warning: {res['Warning']}")
        return NetworkRecord(id=res.get("Id", ""), name=name)

    def remove_network(self, network_id: str) -> None:
        with platform_call(f"remove network {network_id}"):
            self.api.remove_network(network_id)

    # Services

    def list_services(self, service_ids: Iterable[str] | None = None) -> list[ServiceRecord]:
        filters = {"id": list(service_ids)} if service_ids is not None else None
        with platform_call("list services"):
            return [service_record(s) for s in self.api.services(filters=filters)]

    def create_service(self, spec: ServiceSpec) -> str:
        with platform_call(f"create service {spec.name}"):
            res = self.api.create_service(
                task_template(spec),
                name=spec.name,
                mode=ServiceMode("replicated", replicas=spec.replicas),
            )
        return res.get("ID", "")

    def remove_service(self, service_id: str) -> None:
        with platform_call(f"remove service {service_id}"):
            self.api.remove_service(service_id)

    # Tasks / nodes

    def list_tasks(self, service_ids: Iterable[str]) -> list[TaskRecord]:
        with platform_call("list tasks"):
            return [task_record(t) for t in self.api.tasks(filters={"service": list(service_ids)})]

    def list_nodes(self) -> list[NodeRecord]:
        with platform_call("list nodes"):
            return [node_record(n) for n in self.api.nodes()]
