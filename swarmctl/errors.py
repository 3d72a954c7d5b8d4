from __future__ import annotations


class SwarmctlError(Exception):
    pass


class PlatformError(SwarmctlError):
    """A call against the swarm API failed."""


class PlatformUnavailable(PlatformError):
    """The docker client could not be set up or the daemon is unreachable."""


class ResourceConflict(PlatformError):
    """The platform already has a resource with that name."""


class ResourceNotFound(PlatformError):
    pass


class NetworkProvisionFailed(SwarmctlError):
    def __init__(self, network: str, stage: str, reason: str = ""):
        self.network = network
        self.stage = stage  # lookup|create|remove
        msg = f"Network '{network}' {stage} failed"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class ServiceCreateFailed(SwarmctlError):
    def __init__(self, service_name: str, reason: str = ""):
        self.service_name = service_name
        msg = f"Could not create service '{service_name}'"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class ServiceListFailed(SwarmctlError):
    pass


class TaskListFailed(SwarmctlError):
    pass


class NodeListFailed(SwarmctlError):
    pass


class ServiceRemoveFailed(SwarmctlError):
    def __init__(self, service_name: str, reason: str = ""):
        self.service_name = service_name
        msg = f"Could not remove service '{service_name}'"
        super().__init__(f"{msg}: {reason}" if reason else msg)
