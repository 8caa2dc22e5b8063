# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/render/document.py

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import yaml

from clusterboot.errors import OutputFormatError
from clusterboot.utils.yaml_strict import safe_load_unique


def validate_rendered(data: Union[bytes, str], *, mac: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse rendered cloud-config the way a node's YAML loader would and
    return the decoded mapping. An empty document decodes to {}.
    """
    try:
        doc = safe_load_unique(data)
    except yaml.YAMLError as e:
        raise OutputFormatError(f"generated cloud-config is not valid YAML: {e}", mac=mac) from e

    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise OutputFormatError(
            f"generated cloud-config must be a mapping, got {type(doc).__name__}", mac=mac
        )
    return doc
