# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/errors.py
from __future__ import annotations

from typing import Optional


class ClusterbootError(RuntimeError):
    """Base class for cloud-config generation failures."""


class FormatError(ClusterbootError):
    """Raised when a cluster descriptor cannot be decoded into the schema."""


class TopologyValidationError(ClusterbootError):
    """Base class for cluster policy violations."""


class UnsupportedBackendError(TopologyValidationError):
    def __init__(self, backend: str, supported):
        self.backend = backend
        super().__init__(
            f"Unsupported flannel backend {backend!r}; "
            f"expected one of: {', '.join(supported)}"
        )


class TopologyIncompleteError(TopologyValidationError):
    def __init__(self, masters: int, etcd_members: int):
        self.masters = masters
        self.etcd_members = etcd_members
        super().__init__(
            "cluster must have at least one control-plane node and one coordination node "
            f"(found {masters} kube_master, {etcd_members} etcd_member)"
        )


class MissingTrustMaterialError(TopologyValidationError):
    def __init__(self):
        super().__init__("cluster must include at least one ssh authorized key")


class DuplicateIdentityError(TopologyValidationError):
    def __init__(self, mac: str):
        self.mac = mac
        super().__init__(f"MAC address {mac} is declared by more than one node")


class ReservedIdentityError(TopologyValidationError):
    def __init__(self, mac: str):
        self.mac = mac
        super().__init__(
            f"MAC address {mac} is reserved for unregistered nodes and cannot be declared"
        )


class NodeRenderError(ClusterbootError):
    """Base class for failures tied to one node identity."""

    def __init__(self, message: str, *, mac: Optional[str] = None):
        self.mac = mac
        if mac:
            message = f"[{mac}] {message}"
        super().__init__(message)


class TemplateLoadError(NodeRenderError):
    def __init__(self, message: str, *, template: Optional[str] = None, mac: Optional[str] = None):
        self.template = template
        super().__init__(message, mac=mac)


class RenderError(NodeRenderError):
    """Template evaluation failed (undefined variable, syntax error)."""


class OutputFormatError(NodeRenderError):
    """Rendered output is not a well-formed cloud-config document."""


class CAMaterialError(ClusterbootError):
    """CA key or certificate is missing or unreadable."""


class CacheError(ClusterbootError):
    """Remote resource could not be fetched and no local copy exists."""


class ConfigError(ClusterbootError):
    """Server/CLI settings are missing or invalid."""
