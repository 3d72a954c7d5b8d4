import pytest

from swarmctl import db
from swarmctl.errors import NetworkProvisionFailed, PlatformError, PlatformUnavailable, ResourceConflict, ResourceNotFound
from swarmctl.models import NetworkRecord
from swarmctl.network import NetworkProvisioner


def test_ensure_creates_missing_overlay_network(platform):
    net = NetworkProvisioner(platform)

    assert net.ensure("plancks-net") is True

    assert platform.calls[-1] == ("create_network", "plancks-net", "overlay", True)
    assert [n.name for n in platform.networks] == ["plancks-net"]
    assert any("Created overlay network 'plancks-net'" in e.message for e in db.list_events())


def test_ensure_twice_creates_once(platform):
    net = NetworkProvisioner(platform)

    assert net.ensure("backend") is True
    assert net.ensure("backend") is False

    assert platform.ops().count("create_network") == 1


def test_ensure_matches_exact_name_only(platform):
    platform.networks = [NetworkRecord(id="n0", name="backend-old")]

    assert NetworkProvisioner(platform).ensure("backend") is True


def test_ensure_treats_name_conflict_as_success(platform):
    platform.fail["create_network"] = ResourceConflict("network with name backend already exists")

    assert NetworkProvisioner(platform).ensure("backend") is False


def test_ensure_lookup_failure_is_reported_as_lookup(platform):
    platform.fail["list_networks"] = PlatformError("daemon said no")

    with pytest.raises(NetworkProvisionFailed) as ei:
        NetworkProvisioner(platform).ensure("backend")

    assert ei.value.stage == "lookup"
    assert ei.value.network == "backend"
    assert "create_network" not in platform.ops()


def test_ensure_create_failure_is_reported_as_create(platform):
    platform.fail["create_network"] = PlatformError("no swarm")

    with pytest.raises(NetworkProvisionFailed) as ei:
        NetworkProvisioner(platform).ensure("backend")

    assert ei.value.stage == "create"


def test_unavailable_platform_propagates_unchanged(platform):
    platform.fail["list_networks"] = PlatformUnavailable("socket missing")

    with pytest.raises(PlatformUnavailable):
        NetworkProvisioner(platform).ensure("backend")


def test_remove_missing_network_is_noop(platform):
    assert NetworkProvisioner(platform).remove("backend") is False
    assert "remove_network" not in platform.ops()


def test_remove_resolves_name_to_id(platform):
    platform.networks = [NetworkRecord(id="abc123", name="backend")]

    assert NetworkProvisioner(platform).remove("backend") is True
    assert ("remove_network", "abc123") in platform.calls
    assert platform.networks == []


def test_remove_race_with_another_remover(platform):
    platform.networks = [NetworkRecord(id="abc123", name="backend")]
    platform.fail["remove_network"] = ResourceNotFound("gone")

    assert NetworkProvisioner(platform).remove("backend") is False


def test_remove_failure(platform):
    platform.networks = [NetworkRecord(id="abc123", name="backend")]
    platform.fail["remove_network"] = PlatformError("network has active endpoints")

    with pytest.raises(NetworkProvisionFailed) as ei:
        NetworkProvisioner(platform).remove("backend")

    assert ei.value.stage == "remove"
