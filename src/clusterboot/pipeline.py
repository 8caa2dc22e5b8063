# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/pipeline.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from clusterboot.errors import TemplateLoadError
from clusterboot.render.document import validate_rendered
from clusterboot.render.identity import ROOT_TEMPLATE, SENTINEL_MAC, RenderAssets, resolve
from clusterboot.render.renderer import render
from clusterboot.topology.loader import load_topology_file, parse_topology
from clusterboot.topology.models import ClusterTopology, sentinel_identity
from clusterboot.topology.validator import validate_topology

log = logging.getLogger("clusterboot")


def load_topology(raw: Union[bytes, str], *, sentinel_mac: str = SENTINEL_MAC) -> ClusterTopology:
    """Parse and validate a descriptor; nothing renders from an invalid one."""
    topology = parse_topology(raw)
    validate_topology(topology, sentinel_mac=sentinel_mac)
    return topology


def render_node(
    topology: ClusterTopology,
    mac: str,
    assets: RenderAssets,
    *,
    sentinel_mac: str = SENTINEL_MAC,
) -> bytes:
    """Resolve, render and check the cloud-config for one MAC."""
    context = resolve(topology, mac, assets, sentinel_mac=sentinel_mac)
    body = render(context)
    validate_rendered(body, mac=context.mac)
    return body


def check_renders(
    topology: ClusterTopology,
    assets: RenderAssets,
    *,
    sentinel_mac: str = SENTINEL_MAC,
) -> List[str]:
    """Render the sentinel and then every node, stopping at the first failure."""
    macs = [sentinel_identity(sentinel_mac)] + [n.mac for n in topology.nodes]
    for mac in macs:
        render_node(topology, mac, assets, sentinel_mac=sentinel_mac)
        log.debug("cloud-config for %s ok", mac)

    log.info("Validated cloud-config for %d identities", len(macs))
    return macs


def validate_all(
    descriptor_path: Union[str, Path],
    template_dir: Union[str, Path],
    ca_key_path: Union[str, Path],
    ca_crt_path: Union[str, Path],
    *,
    root_template: str = ROOT_TEMPLATE,
    sentinel_mac: str = SENTINEL_MAC,
) -> List[str]:
    """
    Offline self-check of a descriptor and template set.

    Validates the topology once, then renders the sentinel identity followed
    by every declared node in descriptor order. The first failure is raised
    with the offending MAC attached. Returns the MACs that were checked.
    """
    template_dir = Path(template_dir)
    if not template_dir.is_dir():
        raise TemplateLoadError(f"template directory {template_dir} does not exist", template=root_template)

    log.info("Checking %s ...", descriptor_path)
    topology = load_topology_file(descriptor_path)
    validate_topology(topology, sentinel_mac=sentinel_mac)

    assets = RenderAssets(
        template_dir=template_dir,
        ca_key_path=Path(ca_key_path),
        ca_crt_path=Path(ca_crt_path),
        root_template=root_template,
    )
    return check_renders(topology, assets, sentinel_mac=sentinel_mac)
