# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/config/models.py

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from clusterboot.render.identity import ROOT_TEMPLATE, SENTINEL_MAC
from clusterboot.topology.models import is_valid_mac, normalize_mac

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates" / "cloud-config"


class ServerConfig(BaseModel):
    """Settings shared by ``serve``, ``validate`` and ``render``."""

    model_config = ConfigDict(extra="forbid")

    cluster_desc: str = "./cluster-desc.yml"      # path or http(s) URL
    template_dir: Path = DEFAULT_TEMPLATE_DIR
    root_template: str = ROOT_TEMPLATE
    ca_key: Optional[Path] = None
    ca_crt: Optional[Path] = None
    ca_dir: Path = Path(".")                      # where a generated CA is written
    addr: str = ":8080"
    static_dir: Path = Path("./static/")
    sentinel_mac: str = SENTINEL_MAC
    cache_file: Optional[Path] = None
    cache_refresh_seconds: int = 60

    @field_validator("sentinel_mac")
    @classmethod
    def _check_sentinel(cls, value: str) -> str:
        mac = normalize_mac(value)
        if not is_valid_mac(mac):
            raise ValueError(f"invalid sentinel MAC {value!r}")
        return mac

    @field_validator("addr")
    @classmethod
    def _check_addr(cls, value: str) -> str:
        _, sep, port = value.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"listen address must look like host:port, got {value!r}")
        return value

    def bind(self) -> Tuple[str, int]:
        """':8080' -> ('0.0.0.0', 8080)"""
        host, _, port = self.addr.rpartition(":")
        return host.strip("[]") or "0.0.0.0", int(port)
