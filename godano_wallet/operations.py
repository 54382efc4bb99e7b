"""Static inventory of the cardano-wallet REST operations.

The inventory mirrors the operation set of the wallet's OpenAPI definition.
:mod:`godano_wallet.client` generates one client method per entry, and
:mod:`godano_wallet.registry` derives the CLI commands from it.

Two hand-maintained tables accompany the inventory. ``ARGUMENT_NAMES`` lists
the ordered argument names of every client method (context and request
editors excluded); ``METHOD_HAS_BODY`` marks the operations that send a JSON
request body and therefore also have a raw ``*WithBody`` variant. The test
suite checks both tables against the generated client, so they must be
updated whenever the inventory changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .params import PARAMS_TYPES, JSONBody, RawBody

_PLACEHOLDER = re.compile(r"{([a-z_]+)}")
_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

RAW_BODY_SUFFIX = "WithBody"


@dataclass(frozen=True)
class Operation:
    """One client operation.

    ``parameters`` holds the types of the arguments following the request
    context, in call order. ``variadic`` marks the trailing request-editor
    slot that every generated method accepts.
    """

    name: str
    http_method: str
    path: str
    parameters: Tuple[type, ...]
    variadic: bool = True

    @property
    def path_arguments(self) -> List[str]:
        return _PLACEHOLDER.findall(self.path)

    @property
    def python_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def extra_type(self) -> Optional[type]:
        if self.parameters and self.parameters[-1] is not str:
            return self.parameters[-1]
        return None


def to_snake_case(name: str) -> str:
    return _SNAKE_BOUNDARY.sub("_", name).lower()


def _op(name: str, http_method: str, path: str, extra: Optional[type] = None) -> Operation:
    parameters: Tuple[type, ...] = tuple(str for _ in _PLACEHOLDER.findall(path))
    if extra is None and name in PARAMS_TYPES:
        extra = PARAMS_TYPES[name]
    if extra is not None:
        parameters += (extra,)
    return Operation(name=name, http_method=http_method, path=path, parameters=parameters)


_TYPED_OPERATIONS: Tuple[Operation, ...] = (
    # Addresses
    _op("PostAnyAddress", "POST", "/addresses", JSONBody),
    _op("InspectAddress", "GET", "/addresses/{address_id}"),
    # Byron wallets
    _op("ListByronWallets", "GET", "/byron-wallets"),
    _op("PostByronWallet", "POST", "/byron-wallets", JSONBody),
    _op("DeleteByronWallet", "DELETE", "/byron-wallets/{wallet_id}"),
    _op("GetByronWallet", "GET", "/byron-wallets/{wallet_id}"),
    _op("PutByronWallet", "PUT", "/byron-wallets/{wallet_id}", JSONBody),
    _op("ListByronAddresses", "GET", "/byron-wallets/{wallet_id}/addresses"),
    _op("CreateAddress", "POST", "/byron-wallets/{wallet_id}/addresses", JSONBody),
    _op("ImportAddresses", "PUT", "/byron-wallets/{wallet_id}/addresses", JSONBody),
    _op("ImportAddress", "PUT", "/byron-wallets/{wallet_id}/addresses/{address_id}"),
    _op("ListByronAssets", "GET", "/byron-wallets/{wallet_id}/assets"),
    _op("GetByronAssetDefault", "GET", "/byron-wallets/{wallet_id}/assets/{policy_id}"),
    _op("GetByronAsset", "GET", "/byron-wallets/{wallet_id}/assets/{policy_id}/{asset_name}"),
    _op("ByronSelectCoins", "POST", "/byron-wallets/{wallet_id}/coin-selections/random", JSONBody),
    _op("GetByronWalletMigrationInfo", "GET", "/byron-wallets/{wallet_id}/migrations"),
    _op("MigrateByronWallet", "POST", "/byron-wallets/{wallet_id}/migrations", JSONBody),
    _op("PutByronWalletPassphrase", "PUT", "/byron-wallets/{wallet_id}/passphrase", JSONBody),
    _op("PostByronTransactionFee", "POST", "/byron-wallets/{wallet_id}/payment-fees", JSONBody),
    _op("GetByronUTxOsStatistics", "GET", "/byron-wallets/{wallet_id}/statistics/utxos"),
    _op("ListByronTransactions", "GET", "/byron-wallets/{wallet_id}/transactions"),
    _op("PostByronTransaction", "POST", "/byron-wallets/{wallet_id}/transactions", JSONBody),
    _op("DeleteByronTransaction", "DELETE", "/byron-wallets/{wallet_id}/transactions/{transaction_id}"),
    _op("GetByronTransaction", "GET", "/byron-wallets/{wallet_id}/transactions/{transaction_id}"),
    # Network
    _op("GetNetworkClock", "GET", "/network/clock"),
    _op("GetNetworkInformation", "GET", "/network/information"),
    _op("GetNetworkParameters", "GET", "/network/parameters"),
    # Settings
    _op("GetSettings", "GET", "/settings"),
    _op("PutSettings", "PUT", "/settings", JSONBody),
    # Shared wallets
    _op("PostSharedWallet", "POST", "/shared-wallets", JSONBody),
    _op("DeleteSharedWallet", "DELETE", "/shared-wallets/{wallet_id}"),
    _op("GetSharedWallet", "GET", "/shared-wallets/{wallet_id}"),
    _op(
        "PatchSharedWalletInDelegation",
        "PATCH",
        "/shared-wallets/{wallet_id}/delegation-script-template",
        JSONBody,
    ),
    _op(
        "PatchSharedWalletInPayment",
        "PATCH",
        "/shared-wallets/{wallet_id}/payment-script-template",
        JSONBody,
    ),
    # Stake pools
    _op("GetCurrentSmashHealth", "GET", "/smash/health"),
    _op("ListStakePools", "GET", "/stake-pools"),
    _op("QuitStakePool", "DELETE", "/stake-pools/*/wallets/{wallet_id}", JSONBody),
    _op("GetMaintenanceActions", "GET", "/stake-pools/maintenance-actions"),
    _op("PostMaintenanceAction", "POST", "/stake-pools/maintenance-actions", JSONBody),
    _op("JoinStakePool", "PUT", "/stake-pools/{stake_pool_id}/wallets/{wallet_id}", JSONBody),
    # Shelley wallets
    _op("ListWallets", "GET", "/wallets"),
    _op("PostWallet", "POST", "/wallets", JSONBody),
    _op("DeleteWallet", "DELETE", "/wallets/{wallet_id}"),
    _op("GetWallet", "GET", "/wallets/{wallet_id}"),
    _op("PutWallet", "PUT", "/wallets/{wallet_id}", JSONBody),
    _op("ListAddresses", "GET", "/wallets/{wallet_id}/addresses"),
    _op("ListAssets", "GET", "/wallets/{wallet_id}/assets"),
    _op("GetAssetDefault", "GET", "/wallets/{wallet_id}/assets/{policy_id}"),
    _op("GetAsset", "GET", "/wallets/{wallet_id}/assets/{policy_id}/{asset_name}"),
    _op("SelectCoins", "POST", "/wallets/{wallet_id}/coin-selections/random", JSONBody),
    _op("GetDelegationFee", "GET", "/wallets/{wallet_id}/delegation-fees"),
    _op("PostAccountKey", "POST", "/wallets/{wallet_id}/keys/{index}", JSONBody),
    _op("GetWalletKey", "GET", "/wallets/{wallet_id}/keys/{role}/{index}"),
    _op("GetShelleyWalletMigrationInfo", "GET", "/wallets/{wallet_id}/migrations"),
    _op("MigrateShelleyWallet", "POST", "/wallets/{wallet_id}/migrations", JSONBody),
    _op("PutWalletPassphrase", "PUT", "/wallets/{wallet_id}/passphrase", JSONBody),
    _op("PostTransactionFee", "POST", "/wallets/{wallet_id}/payment-fees", JSONBody),
    _op("SignMetadata", "POST", "/wallets/{wallet_id}/signatures/{role}/{index}", JSONBody),
    _op("GetUTxOsStatistics", "GET", "/wallets/{wallet_id}/statistics/utxos"),
    _op("ListTransactions", "GET", "/wallets/{wallet_id}/transactions"),
    _op("PostTransaction", "POST", "/wallets/{wallet_id}/transactions", JSONBody),
    _op("DeleteTransaction", "DELETE", "/wallets/{wallet_id}/transactions/{transaction_id}"),
    _op("GetTransaction", "GET", "/wallets/{wallet_id}/transactions/{transaction_id}"),
)

# Submitting a signed transaction only exists as a raw variant: the payload is
# a binary CBOR blob, not JSON.
_RAW_ONLY_OPERATIONS: Tuple[str, ...] = ("PostExternalTransaction",)


def _raw_variant(op: Operation) -> Operation:
    string_parameters = tuple(t for t in op.parameters if t is str)
    return Operation(
        name=op.name + RAW_BODY_SUFFIX,
        http_method=op.http_method,
        path=op.path,
        parameters=string_parameters + (str, RawBody),
    )


def _build_inventory() -> Tuple[Operation, ...]:
    operations: List[Operation] = []
    for op in _TYPED_OPERATIONS:
        operations.append(op)
        if op.extra_type is JSONBody:
            operations.append(_raw_variant(op))
    operations.append(
        _raw_variant(Operation("PostExternalTransaction", "POST", "/proxy/transactions", ()))
    )
    return tuple(operations)


OPERATIONS: Tuple[Operation, ...] = _build_inventory()
OPERATIONS_BY_NAME: Dict[str, Operation] = {op.name: op for op in OPERATIONS}


ARGUMENT_NAMES: Dict[str, List[str]] = {
    "PostAnyAddress": ["body"],
    "InspectAddress": ["address_id"],
    "ListByronWallets": [],
    "PostByronWallet": ["body"],
    "DeleteByronWallet": ["wallet_id"],
    "GetByronWallet": ["wallet_id"],
    "PutByronWallet": ["wallet_id", "body"],
    "ListByronAddresses": ["wallet_id", "params"],
    "CreateAddress": ["wallet_id", "body"],
    "ImportAddresses": ["wallet_id", "body"],
    "ImportAddress": ["wallet_id", "address_id"],
    "ListByronAssets": ["wallet_id"],
    "GetByronAssetDefault": ["wallet_id", "policy_id"],
    "GetByronAsset": ["wallet_id", "policy_id", "asset_name"],
    "ByronSelectCoins": ["wallet_id", "body"],
    "GetByronWalletMigrationInfo": ["wallet_id"],
    "MigrateByronWallet": ["wallet_id", "body"],
    "PutByronWalletPassphrase": ["wallet_id", "body"],
    "PostByronTransactionFee": ["wallet_id", "body"],
    "GetByronUTxOsStatistics": ["wallet_id"],
    "ListByronTransactions": ["wallet_id", "params"],
    "PostByronTransaction": ["wallet_id", "body"],
    "DeleteByronTransaction": ["wallet_id", "transaction_id"],
    "GetByronTransaction": ["wallet_id", "transaction_id"],
    "GetNetworkClock": ["params"],
    "GetNetworkInformation": [],
    "GetNetworkParameters": [],
    "PostExternalTransaction": ["body"],
    "GetSettings": [],
    "PutSettings": ["body"],
    "PostSharedWallet": ["body"],
    "DeleteSharedWallet": ["wallet_id"],
    "GetSharedWallet": ["wallet_id"],
    "PatchSharedWalletInDelegation": ["wallet_id", "body"],
    "PatchSharedWalletInPayment": ["wallet_id", "body"],
    "GetCurrentSmashHealth": ["params"],
    "ListStakePools": ["params"],
    "QuitStakePool": ["wallet_id", "body"],
    "GetMaintenanceActions": [],
    "PostMaintenanceAction": ["body"],
    "JoinStakePool": ["stake_pool_id", "wallet_id", "body"],
    "ListWallets": [],
    "PostWallet": ["body"],
    "DeleteWallet": ["wallet_id"],
    "GetWallet": ["wallet_id"],
    "PutWallet": ["wallet_id", "body"],
    "ListAddresses": ["wallet_id", "params"],
    "ListAssets": ["wallet_id"],
    "GetAssetDefault": ["wallet_id", "policy_id"],
    "GetAsset": ["wallet_id", "policy_id", "asset_name"],
    "SelectCoins": ["wallet_id", "body"],
    "GetDelegationFee": ["wallet_id"],
    "PostAccountKey": ["wallet_id", "index", "body"],
    "GetWalletKey": ["wallet_id", "role", "index"],
    "GetShelleyWalletMigrationInfo": ["wallet_id"],
    "MigrateShelleyWallet": ["wallet_id", "body"],
    "PutWalletPassphrase": ["wallet_id", "body"],
    "PostTransactionFee": ["wallet_id", "body"],
    "SignMetadata": ["wallet_id", "role", "index", "body"],
    "GetUTxOsStatistics": ["wallet_id"],
    "ListTransactions": ["wallet_id", "params"],
    "PostTransaction": ["wallet_id", "body"],
    "DeleteTransaction": ["wallet_id", "transaction_id"],
    "GetTransaction": ["wallet_id", "transaction_id"],
}

METHOD_HAS_BODY: Dict[str, bool] = {
    "PostAnyAddress": True,
    "PostByronWallet": True,
    "PutByronWallet": True,
    "CreateAddress": True,
    "ImportAddresses": True,
    "ByronSelectCoins": True,
    "MigrateByronWallet": True,
    "PutByronWalletPassphrase": True,
    "PostByronTransactionFee": True,
    "PostByronTransaction": True,
    "PutSettings": True,
    "PostExternalTransaction": True,
    "PostSharedWallet": True,
    "PatchSharedWalletInDelegation": True,
    "PatchSharedWalletInPayment": True,
    "QuitStakePool": True,
    "PostMaintenanceAction": True,
    "JoinStakePool": True,
    "PostWallet": True,
    "PutWallet": True,
    "SelectCoins": True,
    "PostAccountKey": True,
    "MigrateShelleyWallet": True,
    "PutWalletPassphrase": True,
    "PostTransactionFee": True,
    "SignMetadata": True,
    "PostTransaction": True,
}


def _add_raw_variant_names() -> None:
    # Raw variants replace the typed body with a content type and a stream.
    for name in METHOD_HAS_BODY:
        names = ARGUMENT_NAMES[name]
        ARGUMENT_NAMES[name + RAW_BODY_SUFFIX] = names[:-1] + ["content_type", "body"]
    # This operation has no typed variant
    del ARGUMENT_NAMES["PostExternalTransaction"]


_add_raw_variant_names()
