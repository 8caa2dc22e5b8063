# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/topology/validator.py

from __future__ import annotations

import logging
from typing import Set

from clusterboot.errors import (
    DuplicateIdentityError,
    MissingTrustMaterialError,
    ReservedIdentityError,
    TopologyIncompleteError,
    UnsupportedBackendError,
)
from .models import SENTINEL_MAC, ClusterTopology, sentinel_identity

log = logging.getLogger("clusterboot")

SUPPORTED_BACKENDS = ("host-gw", "udp", "vxlan")


def validate_topology(topology: ClusterTopology, *, sentinel_mac: str = SENTINEL_MAC) -> None:
    """
    Check the policy invariants a cluster needs to reach quorum and stay
    reachable. Checks run in a fixed order and stop at the first failure:

    1. flannel backend is supported
    2. at least one kube master and one etcd member
    3. at least one ssh authorized key
    4. no MAC address is declared twice
    5. no node claims the sentinel MAC, which unregistered nodes render as
    """
    if topology.flannel_backend not in SUPPORTED_BACKENDS:
        raise UnsupportedBackendError(topology.flannel_backend, SUPPORTED_BACKENDS)

    masters = len(topology.kube_masters())
    etcd_members = len(topology.etcd_members())
    if masters == 0 or etcd_members == 0:
        raise TopologyIncompleteError(masters, etcd_members)

    if not topology.ssh_authorized_keys:
        raise MissingTrustMaterialError()

    seen: Set[str] = set()
    for node in topology.nodes:
        if node.mac in seen:
            raise DuplicateIdentityError(node.mac)
        seen.add(node.mac)

    reserved = sentinel_identity(sentinel_mac)
    if reserved in seen:
        raise ReservedIdentityError(reserved)

    log.debug(
        "Topology ok: %d nodes (%d masters, %d etcd), backend=%s",
        len(topology.nodes), masters, etcd_members, topology.flannel_backend,
    )
