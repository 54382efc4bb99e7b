"""TLS material for HTTPS connections to the wallet.

The cardano-wallet server usually runs with a self-signed CA and requires a
client certificate. Certificate files are parsed up front so that a broken
file is reported as a configuration error before any request is made.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .config import (
    ENV_CLIENT_CERT_FILE,
    ENV_CLIENT_KEY_FILE,
    ClientConfig,
    ConfigurationError,
)

logger = logging.getLogger(__name__)


@dataclass
class TLSSettings:
    """``verify`` and ``cert`` values in the form :mod:`requests` expects."""

    verify: Union[bool, str] = True
    cert: Optional[Tuple[str, str]] = None


def _read_file(path: str, description: str) -> bytes:
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Failed to load {description} '{path}': {exc}") from exc


def load_ca_certificates(path: str) -> list[x509.Certificate]:
    """Parse every PEM certificate of a CA bundle."""

    data = _read_file(path, "server CA file")
    try:
        certificates = x509.load_pem_x509_certificates(data)
    except ValueError as exc:
        raise ConfigurationError(f"Failed to load server CA file '{path}': {exc}") from exc
    logger.debug("Loaded %d CA certificate(s) from %s", len(certificates), path)
    return certificates


def load_client_certificate(cert_path: str, key_path: str) -> Tuple[str, str]:
    """Check that the certificate and key parse and belong together."""

    cert_data = _read_file(cert_path, "client certificate")
    key_data = _read_file(key_path, "client key")
    try:
        certificate = x509.load_pem_x509_certificate(cert_data)
    except ValueError as exc:
        raise ConfigurationError(f"Failed to load client certificate '{cert_path}': {exc}") from exc
    try:
        private_key = serialization.load_pem_private_key(key_data, password=None)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Failed to load client key '{key_path}': {exc}") from exc

    public_format = serialization.PublicFormat.SubjectPublicKeyInfo
    cert_public = certificate.public_key().public_bytes(serialization.Encoding.PEM, public_format)
    key_public = private_key.public_key().public_bytes(serialization.Encoding.PEM, public_format)
    if cert_public != key_public:
        raise ConfigurationError(
            f"Client key '{key_path}' does not match the certificate '{cert_path}'"
        )
    return str(Path(cert_path).expanduser()), str(Path(key_path).expanduser())


def load_tls_settings(config: ClientConfig) -> TLSSettings:
    """Resolve the TLS settings of ``config`` into :class:`TLSSettings`."""

    settings = TLSSettings()
    if config.server_ca_file:
        load_ca_certificates(config.server_ca_file)
        settings.verify = str(Path(config.server_ca_file).expanduser())
    if config.tls_skip_verify:
        logger.warning("TLS certificate verification is disabled")
        settings.verify = False

    if bool(config.client_cert_file) != bool(config.client_key_file):
        raise ConfigurationError(
            f"Either none or both of these must be defined: {ENV_CLIENT_CERT_FILE}, {ENV_CLIENT_KEY_FILE}"
        )
    if config.client_cert_file and config.client_key_file:
        settings.cert = load_client_certificate(config.client_cert_file, config.client_key_file)
    return settings
