# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/server.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

from clusterboot.cache import descriptor_source
from clusterboot.config.models import ServerConfig
from clusterboot.errors import ClusterbootError
from clusterboot.pipeline import load_topology, render_node
from clusterboot.render.identity import RenderAssets

log = logging.getLogger("clusterboot")

CLOUD_CONFIG_MEDIA_TYPE = "text/yaml"


def create_app(
    config: ServerConfig,
    *,
    ca_key: Path,
    ca_crt: Path,
    source: Optional[Callable[[], bytes]] = None,
) -> FastAPI:
    """
    Build the HTTP app serving ``/cloud-config/{mac}`` and ``/static/``.

    The descriptor is re-read (or taken from the cache) on every request, so
    requests share nothing mutable.
    """
    if source is None:
        source = descriptor_source(
            config.cluster_desc,
            config.cache_file,
            refresh_seconds=config.cache_refresh_seconds,
        )

    assets = RenderAssets(
        template_dir=config.template_dir,
        ca_key_path=ca_key,
        ca_crt_path=ca_crt,
        root_template=config.root_template,
    )

    app = FastAPI(title="clusterboot cloud-config server")

    @app.get("/cloud-config/{mac}")
    def cloud_config(mac: str) -> Response:
        mac = mac.lower()
        try:
            topology = load_topology(source(), sentinel_mac=config.sentinel_mac)
            body = render_node(topology, mac, assets, sentinel_mac=config.sentinel_mac)
        except ClusterbootError as e:
            log.error("cloud-config for %s failed: %s", mac, e)
            return PlainTextResponse(str(e), status_code=500)
        except Exception:
            log.exception("Unexpected failure serving cloud-config for %s", mac)
            return PlainTextResponse("internal error", status_code=500)

        log.info("Served cloud-config for %s", mac)
        return Response(content=body, media_type=CLOUD_CONFIG_MEDIA_TYPE)

    if config.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(config.static_dir)), name="static")
    else:
        log.warning("Static directory %s does not exist, /static/ disabled", config.static_dir)
    return app


def serve(config: ServerConfig, *, ca_key: Path, ca_crt: Path) -> None:
    host, port = config.bind()
    app = create_app(config, ca_key=ca_key, ca_crt=ca_crt)
    log.info("Cloud-config server listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
