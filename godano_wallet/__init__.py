"""Client and command line tool for the cardano-wallet REST API."""

from .client import (
    RequestCancelledError,
    RequestContext,
    WalletAPIError,
    WalletClient,
    WalletTransportError,
    decode_response,
    new_https_client,
    raise_for_api_error,
)
from .config import ClientConfig, ConfigurationError, load_client_config
from .metadata import (
    MetaBytes,
    MetaInt,
    MetaList,
    MetaMap,
    MetaText,
    Metadata,
    MetadataDuplicateKeyError,
    MetadataEncodingError,
    MetadataError,
    MetadataShapeError,
    MetadataTypeMismatchError,
    MetadataUnknownTagError,
    MetadataUnsupportedTypeError,
    MetadataValue,
    encode_metadata,
    encode_value,
    metadata_from_json,
    metadata_to_json,
    parse_metadata,
    parse_value,
)
from .operations import OPERATIONS, Operation
from .registry import DryRunInterrupt, MethodDescriptor, MethodRegistry
from .tls import TLSSettings, load_tls_settings

__all__ = [
    "WalletClient",
    "RequestContext",
    "RequestCancelledError",
    "WalletAPIError",
    "WalletTransportError",
    "decode_response",
    "new_https_client",
    "raise_for_api_error",
    "ClientConfig",
    "ConfigurationError",
    "load_client_config",
    "TLSSettings",
    "load_tls_settings",
    "OPERATIONS",
    "Operation",
    "DryRunInterrupt",
    "MethodDescriptor",
    "MethodRegistry",
    "Metadata",
    "MetadataValue",
    "MetaInt",
    "MetaText",
    "MetaBytes",
    "MetaList",
    "MetaMap",
    "MetadataError",
    "MetadataTypeMismatchError",
    "MetadataShapeError",
    "MetadataUnknownTagError",
    "MetadataEncodingError",
    "MetadataDuplicateKeyError",
    "MetadataUnsupportedTypeError",
    "parse_metadata",
    "parse_value",
    "encode_metadata",
    "encode_value",
    "metadata_from_json",
    "metadata_to_json",
]
