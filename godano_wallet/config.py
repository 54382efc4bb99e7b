"""Shared configuration loader for the wallet client and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

ENV_SERVER_ADDRESS = "GODANO_WALLET_CLIENT_SERVER_ADDRESS"
ENV_TLS_SKIP_VERIFY = "GODANO_WALLET_CLIENT_TLS_SKIP_VERIFY"
ENV_SERVER_CA_FILE = "GODANO_WALLET_CLIENT_SERVER_CA"
ENV_CLIENT_CERT_FILE = "GODANO_WALLET_CLIENT_CLIENT_CERT"
ENV_CLIENT_KEY_FILE = "GODANO_WALLET_CLIENT_CLIENT_KEY"
ENV_VERBOSE = "GODANO_WALLET_CLIENT_VERBOSE"
ENV_CONFIG_PATH = "GODANO_WALLET_CLIENT_CONFIG"

DEFAULT_SERVER_ADDRESS = "http://localhost:8090/v2"
DEFAULT_CONFIG_PATH = Path.home() / ".godano-wallet.yaml"


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


@dataclass
class ClientConfig:
    """Connection settings for a cardano-wallet endpoint."""

    server_address: str = DEFAULT_SERVER_ADDRESS
    tls_skip_verify: bool = False
    server_ca_file: str | None = None
    client_cert_file: str | None = None
    client_key_file: str | None = None


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'wallet' section")
    return loaded


def _coerce_bool(value: Any, *, source: str) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "t", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "f", "no", "n", "off"}:
            return False
    raise ConfigurationError(f"Failed to parse {source}={value!r} as bool")


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return default


def _check_server_address(raw: str) -> str:
    try:
        parsed = urlparse(raw)
        # urlparse only validates the port when it is read
        parsed.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid wallet server address: {raw} ({exc})") from exc
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ConfigurationError(f"Invalid wallet server address: {raw}")
    return raw.rstrip("/")


def load_client_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ClientConfig:
    """Load connection settings.

    Values are taken from ``overrides`` (command-line flags), then the
    ``GODANO_WALLET_CLIENT_*`` environment variables, then the ``wallet``
    section of the YAML config file, then the built-in defaults.
    """

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None or bool(env_map.get(ENV_CONFIG_PATH))
    if config_path is not None:
        path = Path(config_path).expanduser()
    elif env_map.get(ENV_CONFIG_PATH):
        path = Path(env_map[ENV_CONFIG_PATH]).expanduser()
    else:
        path = DEFAULT_CONFIG_PATH

    file_config = _load_config_file(path, required=explicit_path)
    wallet_section = file_config.get("wallet") or {}
    if not isinstance(wallet_section, dict):
        raise ConfigurationError(f"Expected 'wallet' to be a mapping in {path}")

    override_map = dict(overrides or {})

    server_address = _first_value(
        override_map.get("server_address"),
        env_map.get(ENV_SERVER_ADDRESS),
        wallet_section.get("server_address"),
        default=DEFAULT_SERVER_ADDRESS,
    )
    skip_verify = _first_value(
        _coerce_bool(override_map.get("tls_skip_verify"), source="tls_skip_verify"),
        _coerce_bool(env_map.get(ENV_TLS_SKIP_VERIFY) or None, source=ENV_TLS_SKIP_VERIFY),
        _coerce_bool(wallet_section.get("tls_skip_verify"), source=f"{path} wallet.tls_skip_verify"),
        default=False,
    )

    return ClientConfig(
        server_address=_check_server_address(str(server_address)),
        tls_skip_verify=bool(skip_verify),
        server_ca_file=_first_value(
            override_map.get("server_ca_file"),
            env_map.get(ENV_SERVER_CA_FILE),
            wallet_section.get("server_ca_file"),
        ),
        client_cert_file=_first_value(
            override_map.get("client_cert_file"),
            env_map.get(ENV_CLIENT_CERT_FILE),
            wallet_section.get("client_cert_file"),
        ),
        client_key_file=_first_value(
            override_map.get("client_key_file"),
            env_map.get(ENV_CLIENT_KEY_FILE),
            wallet_section.get("client_key_file"),
        ),
    )


def early_verbose(env: Mapping[str, str] | None = None) -> bool:
    """Return whether debug logging was requested before argv is parsed."""

    env_map = os.environ if env is None else env
    return bool(env_map.get(ENV_VERBOSE))
