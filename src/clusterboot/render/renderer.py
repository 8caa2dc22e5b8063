# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/render/renderer.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from clusterboot.errors import CAMaterialError, RenderError, TemplateLoadError
from .identity import RenderContext

log = logging.getLogger("clusterboot")


def _environment(template_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _read_ca(path: Path, what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CAMaterialError(f"cannot read CA {what} {path}: {e}") from e


def template_vars(context: RenderContext, *, ca_key: str, ca_crt: str) -> Dict[str, Any]:
    """
    Everything a cloud-config template can reference.

    Node lists keep descriptor order so the output is reproducible.
    """
    topology = context.topology
    masters = topology.kube_masters()
    etcd = topology.etcd_members()
    return {
        "cluster": topology,
        "node": context.node,
        "mac": context.mac,
        "registered": context.registered,
        # per-node overrides win over cluster-wide variables
        "vars": {**topology.variables, **context.node.overrides},
        "kube_masters": masters,
        "etcd_members": etcd,
        "etcd_endpoints": ",".join(f"http://{n.hostname}:2379" for n in etcd),
        "etcd_initial_cluster": ",".join(f"{n.hostname}=http://{n.hostname}:2380" for n in etcd),
        "api_servers": ",".join(f"https://{n.hostname}:443" for n in masters),
        "ca_key": ca_key,
        "ca_crt": ca_crt,
    }


def render(context: RenderContext) -> bytes:
    """
    Render the root template of ``context.assets`` for one node.

    Missing templates raise TemplateLoadError; any evaluation problem in the
    template itself raises RenderError tagged with the node's MAC.
    """
    assets = context.assets
    template_dir = Path(assets.template_dir)
    root = assets.root_template

    if not template_dir.is_dir():
        raise TemplateLoadError(
            f"template directory {template_dir} does not exist",
            template=root,
            mac=context.mac,
        )

    env = _environment(template_dir)
    try:
        tmpl = env.get_template(root)
    except TemplateNotFound as e:
        raise TemplateLoadError(
            f"Missing template: {e.name} (in {template_dir})", template=e.name, mac=context.mac
        ) from e
    except TemplateError as e:
        raise RenderError(f"template {root} failed to compile: {e}", mac=context.mac) from e

    variables = template_vars(
        context,
        ca_key=_read_ca(assets.ca_key_path, "key"),
        ca_crt=_read_ca(assets.ca_crt_path, "certificate"),
    )

    try:
        text = tmpl.render(**variables)
    except TemplateNotFound as e:
        raise TemplateLoadError(
            f"Missing template: {e.name} (included from {root})", template=e.name, mac=context.mac
        ) from e
    except (TemplateError, TypeError, ValueError) as e:
        raise RenderError(f"rendering {root} failed: {e}", mac=context.mac) from e

    log.debug("Rendered %s for %s (%d bytes)", root, context.mac, len(text))
    return text.encode("utf-8")
