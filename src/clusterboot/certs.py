# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/certs.py

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from clusterboot.errors import CAMaterialError

log = logging.getLogger("clusterboot")

CA_KEY_FILE = "ca-key.pem"
CA_CRT_FILE = "ca.pem"
CA_COMMON_NAME = "kube-ca"
CA_VALID_DAYS = 10000


def generate_root_ca(out_dir: Union[str, Path]) -> Tuple[Path, Path]:
    """
    Write a new RSA key and self-signed CA certificate into ``out_dir``.

    Returns (key_path, crt_path).
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, CA_COMMON_NAME)])
    now = datetime.now(timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=CA_VALID_DAYS))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .sign(key, hashes.SHA256())
    )

    key_path = out_dir / CA_KEY_FILE
    crt_path = out_dir / CA_CRT_FILE

    key_path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    os.chmod(key_path, 0o600)
    crt_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))

    log.info("Generated root CA %s / %s", crt_path, key_path)
    return key_path, crt_path


def ensure_root_ca(
    ca_key: Optional[Union[str, Path]],
    ca_crt: Optional[Union[str, Path]],
    out_dir: Union[str, Path] = ".",
) -> Tuple[Path, Path]:
    """
    Resolve the CA key/certificate pair to use.

    Explicit paths must both be given and exist. With neither given, an
    existing pair in ``out_dir`` is reused, otherwise a new one is generated.
    """
    if ca_key and ca_crt:
        key_path, crt_path = Path(ca_key), Path(ca_crt)
        for p in (key_path, crt_path):
            if not p.is_file():
                raise CAMaterialError(f"file {p} is not ready.")
        return key_path, crt_path

    if ca_key or ca_crt:
        raise CAMaterialError("--ca-key and --ca-crt must be given together")

    out_dir = Path(out_dir)
    key_path, crt_path = out_dir / CA_KEY_FILE, out_dir / CA_CRT_FILE
    if key_path.is_file() and crt_path.is_file():
        log.debug("Reusing root CA in %s", out_dir)
        return key_path, crt_path

    log.info("No %s or %s provided, generating now...", CA_CRT_FILE, CA_KEY_FILE)
    return generate_root_ca(out_dir)
