from pathlib import Path

import pytest
import yaml

from clusterboot.config.models import DEFAULT_TEMPLATE_DIR
from clusterboot.errors import (
    ConfigError,
    FormatError,
    OutputFormatError,
    RenderError,
    ReservedIdentityError,
    TemplateLoadError,
    TopologyIncompleteError,
    UnsupportedBackendError,
)
from clusterboot.pipeline import check_renders, load_topology, render_node, validate_all
from clusterboot.render.identity import SENTINEL_MAC

from conftest import DESCRIPTOR, MASTER_MAC, WORKER_MAC

REPO_DESCRIPTOR = Path(__file__).resolve().parents[1] / "cluster-desc.yml"


def test_validate_all_checks_sentinel_then_nodes(descriptor_file, ca_files):
    key, crt = ca_files
    macs = validate_all(descriptor_file, DEFAULT_TEMPLATE_DIR, key, crt)
    assert macs == [SENTINEL_MAC, MASTER_MAC, "aa:bb:cc:dd:ee:02", WORKER_MAC]


def test_shipped_example_descriptor_validates(ca_files):
    key, crt = ca_files
    macs = validate_all(REPO_DESCRIPTOR, DEFAULT_TEMPLATE_DIR, key, crt)
    assert len(macs) == 5


def test_every_identity_round_trips(topology, assets):
    for mac in check_renders(topology, assets):
        doc = yaml.safe_load(render_node(topology, mac, assets))
        assert isinstance(doc, dict)
        assert doc["coreos"]["etcd2"]["listen-client-urls"] == "http://0.0.0.0:2379"


def test_invalid_topology_aborts_before_rendering(tmp_path: Path, ca_files, make_templates):
    key, crt = ca_files
    desc = tmp_path / "bad.yml"
    desc.write_text(DESCRIPTOR.replace("vxlan", "token-ring"))
    # template set is broken too; the topology gate must fire first
    tdir = make_templates({"unrelated": "x: 1\n"})
    with pytest.raises(UnsupportedBackendError, match="token-ring"):
        validate_all(desc, tdir, key, crt)


def test_missing_template_dir(descriptor_file, ca_files, tmp_path: Path):
    key, crt = ca_files
    with pytest.raises(TemplateLoadError):
        validate_all(descriptor_file, tmp_path / "nope", key, crt)


def test_broken_output_reports_first_identity(descriptor_file, ca_files, make_templates):
    key, crt = ca_files
    tdir = make_templates({"cc-template": "units: [a, b\n"})
    with pytest.raises(OutputFormatError) as exc:
        validate_all(descriptor_file, tdir, key, crt)
    assert exc.value.mac == SENTINEL_MAC


def test_node_specific_failure_names_node(descriptor_file, ca_files, make_templates):
    key, crt = ca_files
    tdir = make_templates({
        "cc-template": "a: 1\n{% if node.kube_master %}\nb: {{ undefined_thing }}\n{% endif %}\n",
    })
    with pytest.raises(RenderError) as exc:
        validate_all(descriptor_file, tdir, key, crt)
    assert exc.value.mac == MASTER_MAC


def test_custom_root_template_and_sentinel(descriptor_file, ca_files, make_templates):
    key, crt = ca_files
    tdir = make_templates({"node.yaml": "mac: {{ mac | tojson }}\n"})
    macs = validate_all(
        descriptor_file, tdir, key, crt,
        root_template="node.yaml",
        sentinel_mac="FE:FE:FE:FE:FE:FE",
    )
    assert macs[0] == "fe:fe:fe:fe:fe:fe"


def test_load_topology_parses_and_validates(descriptor_text):
    assert len(load_topology(descriptor_text).nodes) == 3
    with pytest.raises(TopologyIncompleteError):
        load_topology(descriptor_text.replace("kube_master: true", "kube_master: false"))
    with pytest.raises(FormatError):
        load_topology("nodes: [\n")


def test_render_node_unknown_mac_uses_sentinel(topology, assets):
    doc = yaml.safe_load(render_node(topology, "12:34:56:78:9a:bc", assets))
    assert doc["hostname"] == "00-00-00-00-00-00"


def test_node_declaring_sentinel_mac_fails_validation(tmp_path: Path, ca_files, make_templates):
    key, crt = ca_files
    desc = tmp_path / "claims-sentinel.yml"
    desc.write_text(DESCRIPTOR.replace('"aa:bb:cc:dd:ee:02"', '"00:00:00:00:00:00"'))
    # only the unregistered render is broken
    tdir = make_templates({"cc-template": "a: 1\n{% if not registered %}b: [{% endif %}\n"})
    with pytest.raises(ReservedIdentityError):
        validate_all(desc, tdir, key, crt)


def test_unregistered_render_is_always_checked(descriptor_file, ca_files, make_templates):
    key, crt = ca_files
    tdir = make_templates({"cc-template": "a: 1\n{% if not registered %}b: [{% endif %}\n"})
    with pytest.raises(OutputFormatError) as exc:
        validate_all(descriptor_file, tdir, key, crt)
    assert exc.value.mac == SENTINEL_MAC


def test_load_topology_rejects_sentinel_node(descriptor_text):
    with pytest.raises(ReservedIdentityError):
        load_topology(descriptor_text.replace('"aa:bb:cc:dd:ee:02"', '"00:00:00:00:00:00"'))


def test_invalid_sentinel_is_config_error(descriptor_file, ca_files, topology, assets):
    key, crt = ca_files
    with pytest.raises(ConfigError, match="invalid sentinel MAC"):
        validate_all(descriptor_file, DEFAULT_TEMPLATE_DIR, key, crt, sentinel_mac="bogus")
    with pytest.raises(ConfigError):
        check_renders(topology, assets, sentinel_mac="bogus")


def test_missing_backend_is_rejected(descriptor_text):
    with pytest.raises(UnsupportedBackendError):
        load_topology(descriptor_text.replace("flannel_backend: vxlan\n", ""))
