from __future__ import annotations

from typing import Any

from .db import log_event
from .errors import NetworkProvisionFailed, PlatformError, PlatformUnavailable, ResourceConflict, ResourceNotFound
from .models import NetworkRecord
from .settings import settings


class NetworkProvisioner:
    """Makes sure named overlay networks exist, without creating duplicates."""

    def __init__(self, platform: Any, driver: str | None = None):
        self.platform = platform
        self.driver = driver or settings.network_driver

    def find(self, name: str) -> NetworkRecord | None:
        try:
            networks = self.platform.list_networks()
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            raise NetworkProvisionFailed(name, "lookup", str(e)) from e
        for n in networks:
            if n.name == name:
                return n
        return None

    def ensure(self, name: str) -> bool:
        """Create the network if it is missing.

        Returns True if this call created it, False if it was already there.
        """
        if self.find(name) is not None:
            return False
        try:
            created = self.platform.create_network(name, driver=self.driver, attachable=True)
        except ResourceConflict:
            # Someone else created it between lookup and create.
            return False
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            log_event("ERROR", f"Could not create network '{name}': {e}")
            raise NetworkProvisionFailed(name, "create", str(e)) from e
        log_event("INFO", f"Created {self.driver} network '{name}' ({created.id}).")
        return True

    def remove(self, name: str) -> bool:
        """Remove the network by name. Returns False if there was nothing to remove."""
        found = self.find(name)
        if found is None:
            return False
        try:
            self.platform.remove_network(found.id)
        except ResourceNotFound:
            return False
        except PlatformUnavailable:
            raise
        except PlatformError as e:
            raise NetworkProvisionFailed(name, "remove", str(e)) from e
        log_event("INFO", f"Removed network '{name}'.")
        return True
