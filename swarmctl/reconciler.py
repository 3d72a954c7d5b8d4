from __future__ import annotations

from typing import Any, Iterable

from . import aggregate, directory
from .db import log_event
from .errors import (
    NetworkProvisionFailed,
    NodeListFailed,
    PlatformError,
    PlatformUnavailable,
    ResourceNotFound,
    ServiceCreateFailed,
    ServiceListFailed,
    ServiceRemoveFailed,
    TaskListFailed,
)
from .models import MB, Service, ServiceSpec, ServiceState
from .network import NetworkProvisioner
from .settings import settings


class ServiceReconciler:
    """Creates, lists and deletes swarm services against a fresh platform snapshot.

    Nothing is cached between calls: every list re-reads services, tasks and
    nodes, and every delete re-resolves names to ids.
    """

    def __init__(
        self,
        platform: Any,
        networks: NetworkProvisioner | None = None,
        default_network: str | None = None,
        strict_networking: bool | None = None,
    ):
        self.platform = platform
        self.networks = networks or NetworkProvisioner(platform)
        self.default_network = default_network or settings.default_network
        self.strict_networking = settings.strict_networking if strict_networking is None else strict_networking

    def with_timeout(self, timeout: float | None) -> ServiceReconciler:
        """Same reconciler, with every platform call bounded by `timeout` seconds."""
        if timeout is None:
            return self
        platform = self.platform.with_timeout(timeout)
        return ServiceReconciler(
            platform,
            networks=NetworkProvisioner(platform, driver=self.networks.driver),
            default_network=self.default_network,
            strict_networking=self.strict_networking,
        )

    # Create

    def resolve_network(self, service: Service) -> str:
        return service.network or self.default_network

    def build_spec(self, service: Service, network: str) -> ServiceSpec:
        return ServiceSpec(
            name=service.name,
            image=service.image,
            replicas=service.desired_replicas,
            memory_bytes=service.memory_limit * MB,
            networks=(network,),
        )

    def create(self, service: Service) -> str:
        """Submit a replicated service and return its id."""
        service.validate()

        network = self.resolve_network(service)
        try:
            self.networks.ensure(network)
        except NetworkProvisionFailed as e:
            log_event("WARN", f"Error occurred while creating the network {network}: {e}", service_name=service.name)
            if self.strict_networking:
                raise

        spec = self.build_spec(service, network)
        try:
            service_id = self.platform.create_service(spec)
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            log_event("ERROR", f"Error creating docker service: {e}", service_name=service.name)
            raise ServiceCreateFailed(service.name, str(e)) from e

        log_event(
            "INFO",
            f"Submitted service {service.name} ({spec.replicas} x {spec.image}) on network {network}",
            service_name=service.name,
        )
        return service_id

    # List

    def list_states(self) -> list[ServiceState]:
        try:
            services = self.platform.list_services()
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            raise ServiceListFailed(f"Error listing services: {e}") from e

        # An empty swarm needs no task or node queries.
        if not services:
            return []

        try:
            tasks = self.platform.list_tasks([s.id for s in services])
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            raise TaskListFailed(f"Error getting tasks: {e}") from e

        try:
            nodes = self.platform.list_nodes()
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            raise NodeListFailed(f"Error getting nodes: {e}") from e

        return aggregate.sort_states(aggregate.compute(services, tasks, nodes).values())

    def list(self) -> list[Service]:
        return [directory.to_service(st) for st in self.list_states()]

    # Delete

    def delete(self, services: Iterable[ServiceState | Service]) -> list[str]:
        """Remove live services whose names match the given ones.

        Ids from the caller are ignored; names are resolved against a fresh
        listing. Stops at the first failed removal and raises
        ServiceRemoveFailed for it; services removed before that stay removed.
        Returns the names that were removed.
        """
        return self.delete_by_name(s.name for s in services)

    def delete_by_name(self, names: Iterable[str]) -> list[str]:
        names = list(names)
        if not names:
            return []

        removed: list[str] = []
        for st in directory.match_by_name(names, self.list_states()):
            log_event("INFO", f"Removing service: {st.name}", service_name=st.name)
            try:
                self.platform.remove_service(st.id)
            except ResourceNotFound:
                # Gone between listing and removal.
                continue
            except PlatformUnavailable:
                raise
            except PlatformError as e:
                log_event("ERROR", f"Error deleting service {st.name}: {e}", service_name=st.name)
                raise ServiceRemoveFailed(st.name, str(e)) from e
            removed.append(st.name)
        return removed
