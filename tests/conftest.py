import os
import sys

import pytest

# Ensure project root is importable (so `import main` / `import cli` work without installing)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from swarmctl import db  # noqa: E402
from swarmctl.models import NetworkRecord, NodeRecord, ServiceRecord, TaskRecord  # noqa: E402
from swarmctl.settings import Settings  # noqa: E402


@pytest.fixture(autouse=True)
def event_db(tmp_path, monkeypatch):
    """Point the event log at an isolated sqlite file."""
    monkeypatch.setattr(db, "settings", Settings(db_path=str(tmp_path / "events.db")))
    db.init_db()
    return db


class FakePlatform:
    """In-memory stand-in for the docker-backed platform client.

    `fail` maps an operation name to the exception it should raise; a list
    value is consumed one call at a time (None = succeed).
    """

    def __init__(self, services=None, tasks=None, nodes=None, networks=None):
        self.services = list(services or [])
        self.tasks = list(tasks or [])
        self.nodes = list(nodes or [])
        self.networks = list(networks or [])
        self.calls = []
        self.created_specs = []
        self.removed_ids = []
        self.fail = {}
        self.timeouts = []

    def _maybe_fail(self, op, *args):
        self.calls.append((op,) + args)
        exc = self.fail.get(op)
        if isinstance(exc, list):
            exc = exc.pop(0) if exc else None
        if exc is not None:
            raise exc

    def ping(self):
        return True

    def with_timeout(self, timeout):
        self.timeouts.append(timeout)
        return self

    def list_networks(self):
        self._maybe_fail("list_networks")
        return list(self.networks)

    def create_network(self, name, driver="overlay", attachable=True):
        self._maybe_fail("create_network", name, driver, attachable)
        rec = NetworkRecord(id=f"net-{len(self.networks) + 1}", name=name)
        self.networks.append(rec)
        return rec

    def remove_network(self, network_id):
        self._maybe_fail("remove_network", network_id)
        self.networks = [n for n in self.networks if n.id != network_id]

    def list_services(self, service_ids=None):
        self._maybe_fail("list_services")
        return list(self.services)

    def create_service(self, spec):
        self._maybe_fail("create_service", spec)
        self.created_specs.append(spec)
        service_id = f"svc-{len(self.created_specs)}"
        self.services.append(
            ServiceRecord(
                id=service_id,
                name=spec.name,
                image=spec.image,
                replicas=spec.replicas,
                memory_bytes=spec.memory_bytes,
            )
        )
        return service_id

    def remove_service(self, service_id):
        self._maybe_fail("remove_service", service_id)
        self.removed_ids.append(service_id)
        self.services = [s for s in self.services if s.id != service_id]

    def list_tasks(self, service_ids):
        self._maybe_fail("list_tasks", tuple(service_ids))
        return [t for t in self.tasks if t.service_id in set(service_ids)]

    def list_nodes(self):
        self._maybe_fail("list_nodes")
        return list(self.nodes)

    def ops(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def web_swarm():
    """Three-replica 'web' service with one task on a live node and one on a dead one."""
    return FakePlatform(
        services=[ServiceRecord(id="s1", name="web", image="nginx:1", replicas=3)],
        tasks=[
            TaskRecord(service_id="s1", node_id="n1", desired_state="running", state="running"),
            TaskRecord(service_id="s1", node_id="n2", desired_state="running", state="running"),
        ],
        nodes=[NodeRecord(id="n1", state="ready"), NodeRecord(id="n2", state="down")],
    )
