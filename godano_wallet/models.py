"""Response types that the wallet API documents loosely."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


@dataclass
class ErrorResponse:
    """Body of a non-2xx response: ``{"message": ..., "code": ...}``."""

    message: str
    code: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ErrorResponse":
        if not isinstance(payload, Mapping) or not isinstance(payload.get("message"), str):
            raise ValueError("error response does not contain a message")
        code = payload.get("code")
        return cls(message=payload["message"], code=str(code) if code is not None else None)


@dataclass
class UTxODistribution:
    """Distribution of UTxO sizes of a wallet.

    ``distribution`` maps the upper bound of each log10 bucket (in lovelace) to
    the number of UTxOs falling into it. ``scale`` is always ``"log10"`` today.
    """

    total_quantity: int
    total_unit: str
    scale: str
    distribution: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UTxODistribution":
        try:
            total = payload["total"]
            buckets = {int(bound): int(count) for bound, count in payload["distribution"].items()}
            return cls(
                total_quantity=int(total["quantity"]),
                total_unit=str(total["unit"]),
                scale=str(payload["scale"]),
                distribution=buckets,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ValueError(f"malformed UTxO statistics: {exc}") from exc


@dataclass
class Quantity:
    quantity: int
    unit: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Quantity":
        return cls(quantity=int(payload["quantity"]), unit=str(payload["unit"]))


@dataclass
class AssetQuantity:
    policy_id: str
    asset_name: str
    quantity: int

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AssetQuantity":
        return cls(
            policy_id=str(payload["policy_id"]),
            asset_name=str(payload["asset_name"]),
            quantity=int(payload["quantity"]),
        )


@dataclass
class WalletBalance:
    total: Quantity
    available: Quantity
    reward: Quantity | None = None


@dataclass
class WalletTip:
    absolute_slot_number: int
    slot_number: int
    epoch_number: int
    time: str
    height: Quantity


@dataclass
class WalletResponse:
    """One entry of ``GET /wallets`` or ``GET /byron-wallets``.

    Byron wallets have no address pool gap, rewards, assets or delegation;
    those fields are then left at their defaults. Timestamps are kept as the
    ISO 8601 strings the server sends.
    """

    id: str
    name: str
    balance: WalletBalance
    state: str
    tip: WalletTip
    address_pool_gap: int | None = None
    assets_available: List[AssetQuantity] = field(default_factory=list)
    assets_total: List[AssetQuantity] = field(default_factory=list)
    delegation_status: str | None = None
    delegation_target: str | None = None
    passphrase_last_updated_at: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "WalletResponse":
        try:
            balance = payload["balance"]
            tip = payload["tip"]
            assets = payload.get("assets") or {}
            active = (payload.get("delegation") or {}).get("active") or {}
            passphrase = payload.get("passphrase") or {}
            gap = payload.get("address_pool_gap")
            return cls(
                id=str(payload["id"]),
                name=str(payload["name"]),
                balance=WalletBalance(
                    total=Quantity.from_dict(balance["total"]),
                    available=Quantity.from_dict(balance["available"]),
                    reward=Quantity.from_dict(balance["reward"]) if "reward" in balance else None,
                ),
                state=str(payload["state"]["status"]),
                tip=WalletTip(
                    absolute_slot_number=int(tip["absolute_slot_number"]),
                    slot_number=int(tip["slot_number"]),
                    epoch_number=int(tip["epoch_number"]),
                    time=str(tip["time"]),
                    height=Quantity.from_dict(tip["height"]),
                ),
                address_pool_gap=int(gap) if gap is not None else None,
                assets_available=[AssetQuantity.from_dict(item) for item in assets.get("available", [])],
                assets_total=[AssetQuantity.from_dict(item) for item in assets.get("total", [])],
                delegation_status=active.get("status"),
                delegation_target=active.get("target"),
                passphrase_last_updated_at=passphrase.get("last_updated_at"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ValueError(f"malformed wallet: {exc}") from exc
