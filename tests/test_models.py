import pytest

from godano_wallet.models import (
    AssetQuantity,
    ErrorResponse,
    Quantity,
    UTxODistribution,
    WalletBalance,
    WalletResponse,
)


def test_error_response_requires_message() -> None:
    assert ErrorResponse.from_dict({"message": "boom", "code": "bad_request"}) == ErrorResponse("boom", "bad_request")
    assert ErrorResponse.from_dict({"message": "boom"}).code is None
    with pytest.raises(ValueError):
        ErrorResponse.from_dict({"code": "bad_request"})
    with pytest.raises(ValueError):
        ErrorResponse.from_dict(["not", "a", "mapping"])


def test_utxo_distribution_parses_bucket_bounds() -> None:
    stats = UTxODistribution.from_dict(
        {"total": {"quantity": 5, "unit": "lovelace"}, "scale": "log10", "distribution": {"10": 2}}
    )

    assert stats == UTxODistribution(total_quantity=5, total_unit="lovelace", scale="log10", distribution={10: 2})


def test_utxo_distribution_rejects_malformed_payload() -> None:
    with pytest.raises(ValueError):
        UTxODistribution.from_dict({"total": {"quantity": 5}, "scale": "log10", "distribution": {}})
    with pytest.raises(ValueError):
        UTxODistribution.from_dict({"total": {"quantity": 5, "unit": "lovelace"}, "scale": "log10"})


BYRON_WALLET = {
    "id": "8f7e",
    "name": "legacy",
    "balance": {
        "available": {"quantity": 1, "unit": "lovelace"},
        "total": {"quantity": 2, "unit": "lovelace"},
    },
    "state": {"status": "syncing", "progress": {"quantity": 50, "unit": "percent"}},
    "tip": {
        "absolute_slot_number": 10,
        "slot_number": 3,
        "epoch_number": 1,
        "time": "2021-03-01T10:00:00Z",
        "height": {"quantity": 9, "unit": "block"},
    },
}


def test_wallet_response_accepts_byron_wallets() -> None:
    wallet = WalletResponse.from_dict(BYRON_WALLET)

    assert wallet.balance == WalletBalance(total=Quantity(2, "lovelace"), available=Quantity(1, "lovelace"))
    assert wallet.state == "syncing"
    assert wallet.tip.height == Quantity(9, "block")
    assert wallet.address_pool_gap is None
    assert wallet.assets_total == []
    assert wallet.delegation_status is None


def test_wallet_response_parses_assets() -> None:
    asset = {"policy_id": "ab", "asset_name": "", "quantity": 3}
    payload = dict(BYRON_WALLET, assets={"available": [], "total": [asset]})

    wallet = WalletResponse.from_dict(payload)

    assert wallet.assets_total == [AssetQuantity(policy_id="ab", asset_name="", quantity=3)]


def test_wallet_response_rejects_malformed_payload() -> None:
    with pytest.raises(ValueError):
        WalletResponse.from_dict({"id": "w"})
    with pytest.raises(ValueError):
        WalletResponse.from_dict(dict(BYRON_WALLET, tip={"slot_number": "x"}))
