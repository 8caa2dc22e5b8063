# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/topology/models.py

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clusterboot.errors import ConfigError

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = {1}

# Identity rendered for nodes that are not declared in the descriptor.
SENTINEL_MAC = "00:00:00:00:00:00"

_MAC_RE = re.compile(r"^([0-9a-f]{2}:){5}[0-9a-f]{2}$")
_HOSTNAME_RE = re.compile(r"^[a-z0-9]([a-z0-9.-]{0,251}[a-z0-9])?$")

# (flag attribute, role name exposed to templates), in display order
ROLE_FLAGS = (
    ("kube_master", "master"),
    ("etcd_member", "etcd"),
    ("ingress_label", "ingress"),
)


def normalize_mac(value: str) -> str:
    """aa-BB-cc-dd-ee-ff -> aa:bb:cc:dd:ee:ff"""
    return value.strip().lower().replace("-", ":")


def is_valid_mac(value: str) -> bool:
    return bool(_MAC_RE.match(value))


def sentinel_identity(value: str = SENTINEL_MAC) -> str:
    """Normalized sentinel MAC; ConfigError if it is not a MAC at all."""
    mac = normalize_mac(value)
    if not is_valid_mac(mac):
        raise ConfigError(f"invalid sentinel MAC {value!r}")
    return mac


class NodeSpec(BaseModel):
    """
    One cluster member, keyed by the MAC address of its primary NIC.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mac: str
    hostname: str                      # defaults to the MAC with '-' separators
    kube_master: bool = False
    etcd_member: bool = False
    ingress_label: bool = False
    overrides: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_hostname(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("hostname") and isinstance(data.get("mac"), str):
            data = {**data, "hostname": normalize_mac(data["mac"]).replace(":", "-")}
        return data

    @field_validator("mac")
    @classmethod
    def _check_mac(cls, value: str) -> str:
        mac = normalize_mac(value)
        if not is_valid_mac(mac):
            raise ValueError(f"invalid MAC address {value!r}")
        return mac

    @field_validator("hostname")
    @classmethod
    def _check_hostname(cls, value: str) -> str:
        name = value.strip().lower()
        if not _HOSTNAME_RE.match(name):
            raise ValueError(f"invalid hostname {value!r}")
        return name

    @property
    def roles(self) -> List[str]:
        return [role for flag, role in ROLE_FLAGS if getattr(self, flag)]


class ClusterTopology(BaseModel):
    """
    Parsed cluster descriptor. Unknown keys are rejected everywhere except
    inside ``variables`` and per-node ``overrides``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: int = SCHEMA_VERSION
    flannel_backend: str = ""           # empty is rejected by the validator
    nodes: List[NodeSpec] = Field(default_factory=list)
    ssh_authorized_keys: List[str] = Field(default_factory=list)
    variables: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value not in SUPPORTED_SCHEMA_VERSIONS:
            raise ValueError(
                f"unsupported descriptor version {value}; "
                f"supported: {', '.join(str(v) for v in sorted(SUPPORTED_SCHEMA_VERSIONS))}"
            )
        return value

    @field_validator("ssh_authorized_keys")
    @classmethod
    def _check_keys(cls, value: List[str]) -> List[str]:
        keys = [k.strip() for k in value]
        if any(not k for k in keys):
            raise ValueError("ssh authorized keys must not be blank")
        return keys

    def kube_masters(self) -> List[NodeSpec]:
        return [n for n in self.nodes if n.kube_master]

    def etcd_members(self) -> List[NodeSpec]:
        return [n for n in self.nodes if n.etcd_member]

    def find_node(self, mac: str) -> Optional[NodeSpec]:
        """First node whose MAC matches, compared case-insensitively."""
        wanted = normalize_mac(mac)
        for node in self.nodes:
            if node.mac == wanted:
                return node
        return None
