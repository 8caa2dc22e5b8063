import pytest

from clusterboot.errors import ConfigError
from clusterboot.render.identity import SENTINEL_MAC, resolve, sentinel_node

from conftest import ETCD_MAC, MASTER_MAC


def test_resolve_registered_node(topology, assets):
    ctx = resolve(topology, MASTER_MAC, assets)
    assert ctx.registered
    assert ctx.mac == MASTER_MAC
    assert ctx.node.hostname == "master-1"
    assert ctx.node.kube_master and ctx.node.etcd_member
    assert ctx.topology is topology
    assert ctx.assets is assets


@pytest.mark.parametrize("spelling", ["AA:BB:CC:DD:EE:02", "aa:bb:cc:dd:ee:02", "Aa-Bb-Cc-Dd-Ee-02"])
def test_resolve_is_case_insensitive(topology, assets, spelling):
    upper = resolve(topology, spelling, assets)
    lower = resolve(topology, ETCD_MAC, assets)
    assert upper == lower
    assert upper.node.hostname == "etcd-2"


@pytest.mark.parametrize("requested", ["ff:ff:ff:ff:ff:ff", "not-a-mac", ""])
def test_unregistered_resolves_to_sentinel(topology, assets, requested):
    ctx = resolve(topology, requested, assets)
    assert not ctx.registered
    assert ctx.mac == SENTINEL_MAC
    assert ctx.node.roles == []
    assert ctx.node.hostname == "00-00-00-00-00-00"


def test_custom_sentinel(topology, assets):
    ctx = resolve(topology, "ff:ff:ff:ff:ff:fe", assets, sentinel_mac="DE:AD:BE:EF:00:00")
    assert ctx.mac == "de:ad:be:ef:00:00"
    assert not ctx.registered


def test_sentinel_node_has_no_roles():
    node = sentinel_node()
    assert node.mac == SENTINEL_MAC
    assert not (node.kube_master or node.etcd_member or node.ingress_label)


def test_invalid_sentinel_is_config_error(topology, assets):
    with pytest.raises(ConfigError, match="bogus"):
        resolve(topology, "ff:ff:ff:ff:ff:fe", assets, sentinel_mac="bogus")
