# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/render/identity.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from clusterboot.topology.models import SENTINEL_MAC, ClusterTopology, NodeSpec, sentinel_identity

log = logging.getLogger("clusterboot")

ROOT_TEMPLATE = "cc-template"


@dataclass(frozen=True)
class RenderAssets:
    """
    Where templates and CA material are read from.
    """
    template_dir: Path
    ca_key_path: Path
    ca_crt_path: Path
    root_template: str = ROOT_TEMPLATE


@dataclass(frozen=True)
class RenderContext:
    topology: ClusterTopology
    node: NodeSpec
    mac: str
    registered: bool
    assets: RenderAssets


def sentinel_node(mac: str = SENTINEL_MAC) -> NodeSpec:
    """Role-less node standing in for an unregistered machine."""
    return NodeSpec(mac=mac)


def resolve(
    topology: ClusterTopology,
    requested: str,
    assets: RenderAssets,
    *,
    sentinel_mac: str = SENTINEL_MAC,
) -> RenderContext:
    """
    Map a requested MAC onto its node. Unknown or malformed identities
    resolve to the sentinel node instead of failing. An invalid
    ``sentinel_mac`` is a ConfigError.
    """
    sentinel_mac = sentinel_identity(sentinel_mac)
    node = topology.find_node(requested)
    if node is not None:
        return RenderContext(topology=topology, node=node, mac=node.mac, registered=True, assets=assets)

    log.debug("MAC %r not in cluster descriptor, using sentinel %s", requested, sentinel_mac)
    sentinel = sentinel_node(sentinel_mac)
    return RenderContext(topology=topology, node=sentinel, mac=sentinel.mac, registered=False, assets=assets)
