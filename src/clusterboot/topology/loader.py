# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/topology/loader.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from clusterboot.errors import FormatError
from clusterboot.utils.yaml_strict import safe_load_unique
from .models import ClusterTopology

log = logging.getLogger("clusterboot")


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_topology(raw: Union[bytes, str]) -> ClusterTopology:
    """
    Decode a cluster descriptor into a ClusterTopology.

    Purely structural: policy checks live in validator.validate_topology.
    """
    try:
        data = safe_load_unique(raw)
    except yaml.YAMLError as e:
        raise FormatError(f"cluster descriptor is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise FormatError(
            f"cluster descriptor must be a mapping, got {type(data).__name__}"
        )

    try:
        return ClusterTopology.model_validate(data)
    except ValidationError as e:
        raise FormatError(f"cluster descriptor format failed: {_describe(e)}") from e


def load_topology_file(path: Union[str, Path]) -> ClusterTopology:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FormatError(f"cannot read cluster descriptor {path}: {e}") from e
    log.debug("Parsing cluster descriptor %s", path)
    return parse_topology(raw)
