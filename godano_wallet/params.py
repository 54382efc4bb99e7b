"""Argument types of the generated wallet client.

Every client operation takes at most one non-string argument. It is either a
*params* dataclass whose fields become URL query parameters, a JSON request
body, or, for the raw ``*WithBody`` variants, an opaque byte stream sent with
an explicit content type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Optional, Union

# Request body of the typed operations: a JSON object
JSONBody = Dict[str, Any]

# Request body of the raw ``*WithBody`` operations
RawBody = Union[bytes, BinaryIO]


def query_field(name: str, default: Any = None) -> Any:
    """Declare a params field whose query-string name differs from the attribute."""

    return field(default=default, metadata={"query": name})


@dataclass
class ListByronAddressesParams:
    state: Optional[str] = None


@dataclass
class ListAddressesParams:
    state: Optional[str] = None


@dataclass
class ListByronTransactionsParams:
    start: Optional[str] = None
    end: Optional[str] = None
    order: Optional[str] = None


@dataclass
class ListTransactionsParams:
    start: Optional[str] = None
    end: Optional[str] = None
    order: Optional[str] = None
    min_withdrawal: Optional[int] = query_field("minWithdrawal")


@dataclass
class GetNetworkClockParams:
    force_ntp_check: Optional[bool] = query_field("forceNtpCheck")


@dataclass
class GetCurrentSmashHealthParams:
    url: Optional[str] = None


@dataclass
class ListStakePoolsParams:
    stake: Optional[int] = None


# Operations whose extra argument is a params dataclass. All fields are
# optional, so the argument itself may be None.
PARAMS_TYPES: Dict[str, type] = {
    "ListByronAddresses": ListByronAddressesParams,
    "ListByronTransactions": ListByronTransactionsParams,
    "GetNetworkClock": GetNetworkClockParams,
    "GetCurrentSmashHealth": GetCurrentSmashHealthParams,
    "ListStakePools": ListStakePoolsParams,
    "ListAddresses": ListAddressesParams,
    "ListTransactions": ListTransactionsParams,
}


def make_argument(method: str) -> Any:
    """Return a fresh value for the non-string argument of ``method``.

    Params operations get an empty params instance, body operations an empty
    JSON object. Operations without such an argument, and unknown names,
    return ``None``.
    """

    from .operations import METHOD_HAS_BODY

    params_type = PARAMS_TYPES.get(method)
    if params_type is not None:
        return params_type()
    if METHOD_HAS_BODY.get(method):
        return {}
    return None
