# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/cli/app.py
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional, Tuple

import typer

from clusterboot.cache import descriptor_source
from clusterboot.certs import ensure_root_ca, generate_root_ca
from clusterboot.config.loader import load_config
from clusterboot.config.models import ServerConfig
from clusterboot.errors import ClusterbootError
from clusterboot.logging.log import init_logging
from clusterboot.pipeline import check_renders, load_topology, render_node, validate_all
from clusterboot.render.identity import RenderAssets
from clusterboot.server import serve as run_server


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Cloud-config generator for bare-metal Kubernetes clusters")

ConfigOpt = typer.Option(None, "--config", help="Settings YAML (or $CLUSTERBOOT_CONFIG)")
ClusterDescOpt = typer.Option(None, "--cluster-desc", help="Cluster descriptor path or http(s) URL")
TemplateDirOpt = typer.Option(None, "--cloud-config-dir", help="cloud-config template directory")
CaCrtOpt = typer.Option(None, "--ca-crt", help="CA certificate file, in PEM format")
CaKeyOpt = typer.Option(None, "--ca-key", help="CA private key file, in PEM format")
DebugOpt = typer.Option(False, "--debug")
LogDirOpt = typer.Option(None, "--log-dir", help="Also write a DEBUG trace here")


def _settings(config: Optional[Path], **overrides) -> ServerConfig:
    return load_config(
        config,
        {k: (str(v) if isinstance(v, Path) else v) for k, v in overrides.items()},
    )


def _fail(err: Exception) -> None:
    typer.secho(f"Failed:\n{err}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _ca_material(cfg: ServerConfig) -> Tuple[Path, Path]:
    return ensure_root_ca(cfg.ca_key, cfg.ca_crt, cfg.ca_dir)


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _read_descriptor(cfg: ServerConfig) -> bytes:
    """One-shot read; a URL without cache_file is cached in a throwaway directory."""
    if cfg.cache_file or not _is_url(cfg.cluster_desc):
        return descriptor_source(cfg.cluster_desc, cfg.cache_file)()
    with tempfile.TemporaryDirectory(prefix="clusterboot-") as tmp:
        return descriptor_source(cfg.cluster_desc, Path(tmp) / "localfile")()


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def serve(
    config: Optional[Path] = ConfigOpt,
    cluster_desc: Optional[str] = ClusterDescOpt,
    template_dir: Optional[Path] = TemplateDirOpt,
    ca_crt: Optional[Path] = CaCrtOpt,
    ca_key: Optional[Path] = CaKeyOpt,
    addr: Optional[str] = typer.Option(None, "--addr", help="Listening address, e.g. :8080"),
    static_dir: Optional[Path] = typer.Option(None, "--dir", help="Directory served under /static/"),
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
):
    """Serve cloud-config documents at /cloud-config/<mac>."""
    init_logging(log_dir=log_dir, verbose=debug)
    try:
        cfg = _settings(
            config,
            cluster_desc=cluster_desc,
            template_dir=template_dir,
            ca_crt=ca_crt,
            ca_key=ca_key,
            addr=addr,
            static_dir=static_dir,
        )
        key_path, crt_path = _ca_material(cfg)
    except ClusterbootError as e:
        _fail(e)

    run_server(cfg, ca_key=key_path, ca_crt=crt_path)


@app.command()
def validate(
    config: Optional[Path] = ConfigOpt,
    cluster_desc: Optional[str] = ClusterDescOpt,
    template_dir: Optional[Path] = TemplateDirOpt,
    ca_crt: Optional[Path] = CaCrtOpt,
    ca_key: Optional[Path] = CaKeyOpt,
    debug: bool = DebugOpt,
    log_dir: Optional[Path] = LogDirOpt,
):
    """Validate the cluster descriptor and the cloud-config generated for every node."""
    init_logging(log_dir=log_dir, verbose=debug)
    try:
        cfg = _settings(
            config,
            cluster_desc=cluster_desc,
            template_dir=template_dir,
            ca_crt=ca_crt,
            ca_key=ca_key,
        )
        key_path, crt_path = _ca_material(cfg)

        if _is_url(cfg.cluster_desc):
            topology = load_topology(_read_descriptor(cfg), sentinel_mac=cfg.sentinel_mac)
            assets = RenderAssets(
                template_dir=cfg.template_dir,
                ca_key_path=key_path,
                ca_crt_path=crt_path,
                root_template=cfg.root_template,
            )
            macs = check_renders(topology, assets, sentinel_mac=cfg.sentinel_mac)
        else:
            macs = validate_all(
                cfg.cluster_desc,
                cfg.template_dir,
                key_path,
                crt_path,
                root_template=cfg.root_template,
                sentinel_mac=cfg.sentinel_mac,
            )
    except ClusterbootError as e:
        _fail(e)

    typer.secho(f"Success! {len(macs)} cloud-config documents validated", fg=typer.colors.GREEN)


@app.command()
def render(
    mac: str = typer.Argument(..., help="MAC address of the requesting node"),
    config: Optional[Path] = ConfigOpt,
    cluster_desc: Optional[str] = ClusterDescOpt,
    template_dir: Optional[Path] = TemplateDirOpt,
    ca_crt: Optional[Path] = CaCrtOpt,
    ca_key: Optional[Path] = CaKeyOpt,
    debug: bool = DebugOpt,
):
    """Print the cloud-config a node with MAC would receive."""
    init_logging(verbose=debug)
    try:
        cfg = _settings(
            config,
            cluster_desc=cluster_desc,
            template_dir=template_dir,
            ca_crt=ca_crt,
            ca_key=ca_key,
        )
        key_path, crt_path = _ca_material(cfg)
        topology = load_topology(_read_descriptor(cfg), sentinel_mac=cfg.sentinel_mac)
        assets = RenderAssets(
            template_dir=cfg.template_dir,
            ca_key_path=key_path,
            ca_crt_path=crt_path,
            root_template=cfg.root_template,
        )
        body = render_node(topology, mac, assets, sentinel_mac=cfg.sentinel_mac)
    except ClusterbootError as e:
        _fail(e)

    typer.echo(body.decode("utf-8"), nl=False)


@app.command("gen-ca")
def gen_ca(
    out_dir: Path = typer.Argument(Path("."), help="Directory to write ca.pem and ca-key.pem"),
):
    """Generate a new root CA key and self-signed certificate."""
    key_path, crt_path = generate_root_ca(out_dir)
    typer.echo(f"  key : {key_path}")
    typer.echo(f"  cert: {crt_path}")


if __name__ == "__main__":
    app()
