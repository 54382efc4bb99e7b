import logging
from dataclasses import dataclass
from typing import Optional

import pytest

from godano_wallet.operations import Operation
from godano_wallet.params import (
    JSONBody,
    ListByronTransactionsParams,
    ListTransactionsParams,
    RawBody,
)
from godano_wallet.registry import (
    DryRunInterrupt,
    MethodRegistry,
    byron_sibling_name,
)


@pytest.fixture(scope="module")
def registry() -> MethodRegistry:
    return MethodRegistry()


class RecordingClient:
    """Stands in for WalletClient; records which method was called with what."""

    def __init__(self) -> None:
        self.calls = []

    def __getattr__(self, name):
        def method(ctx, *args):
            self.calls.append((name, ctx, args))
            return "response"

        return method


def test_verb_and_object_are_split_from_the_name(registry: MethodRegistry) -> None:
    descriptor = registry.get("GetWallet")

    assert descriptor.verb == "get"
    assert descriptor.object == "Wallet"
    assert descriptor.string_args == ("wallet_id",)
    assert descriptor.extra is None
    assert not descriptor.is_byron


def test_plural_objects_are_folded(registry: MethodRegistry) -> None:
    assert registry.get("ListWallets").object == "Wallet"
    assert registry.get("ListStakePools").object == "StakePool"
    assert registry.get("GetMaintenanceActions").object == "MaintenanceAction"
    # not in the table, so left alone
    assert registry.get("GetUTxOsStatistics").object == "UTxOsStatistics"


def test_byron_token_is_removed_from_object(registry: MethodRegistry) -> None:
    descriptor = registry.get("GetByronTransaction")

    assert descriptor.is_byron
    assert descriptor.object == "Transaction"
    assert descriptor.verb == "get"


def test_byron_wallet_migration_info(registry: MethodRegistry) -> None:
    byron = registry.get("GetByronWalletMigrationInfo")
    shelley = registry.get("GetShelleyWalletMigrationInfo")

    assert byron.verb == "get"
    assert byron.object == "WalletMigrationInfo"
    assert byron.is_byron
    assert shelley.name == "GetWalletMigrationInfo"
    assert shelley.object == "WalletMigrationInfo"
    assert shelley.byron_variant is byron


def test_remapped_names_are_used(registry: MethodRegistry) -> None:
    assert registry.get("MigrateShelleyWallet").name == "MigrateWallet"
    assert registry.get("ImportAddresses").object == "AddressBatch"
    assert registry.get("ImportAddress").object == "Address"


def test_raw_body_variants_are_not_commands(registry: MethodRegistry) -> None:
    raw_names = [d.raw_name for d in registry if d.raw_name.endswith("WithBody")]

    assert raw_names == []
    assert "PostExternalTransactionWithBody" not in registry


def test_extra_argument_classification(registry: MethodRegistry) -> None:
    listing = registry.get("ListTransactions")
    posting = registry.get("PostTransaction")

    assert listing.extra.is_params
    assert listing.extra.type is ListTransactionsParams
    assert posting.extra.is_body
    assert posting.extra.name == "body"
    assert posting.string_args == ("wallet_id",)


def test_byron_variants_are_merged(registry: MethodRegistry) -> None:
    select = registry.get("SelectCoins")
    listing = registry.get("ListTransactions")

    assert select.byron_variant.raw_name == "ByronSelectCoins"
    assert listing.byron_variant.raw_name == "ListByronTransactions"
    standalone = {d.raw_name for d in registry}
    assert "ByronSelectCoins" not in standalone
    assert "ListByronTransactions" not in standalone


def test_groups_collapse_single_verb_objects(registry: MethodRegistry) -> None:
    groups = {(g.is_byron, g.object): g for g in registry.groups()}

    wallet = groups[(False, "Wallet")]
    assert [d.verb for d in wallet.verbs] == ["delete", "get", "list", "migrate", "post", "put"]
    assert not wallet.single
    assert groups[(False, "Coins")].single
    assert groups[(False, "Coins")].verbs[0].raw_name == "SelectCoins"


def test_discovery_is_deterministic() -> None:
    first = MethodRegistry()
    second = MethodRegistry()

    assert first.descriptors == second.descriptors
    assert first.groups() == second.groups()


def test_byron_sibling_name() -> None:
    assert byron_sibling_name("SelectCoins") == "SelectByronCoins"
    assert byron_sibling_name("ListWallets") == "ListByronWallets"
    assert byron_sibling_name("lowercase") is None


def test_malformed_operations_are_excluded(caplog) -> None:
    @dataclass
    class NestedParams:
        inner: Optional[ListTransactionsParams] = None

    operations = [
        Operation("GetThing", "GET", "/things/{thing_id}", (str,)),
        Operation("lowerCase", "GET", "/x", ()),
        Operation("GetMissingNames", "GET", "/y", ()),
        Operation("GetBadOrder", "GET", "/z/{a}", (JSONBody, str)),
        Operation("GetNoEditors", "GET", "/n", (), variadic=False),
        Operation("ListNested", "GET", "/nested", (NestedParams,)),
        Operation("PutThingWithBody", "PUT", "/things", (str, RawBody)),
    ]
    names = {
        "GetThing": ["thing_id"],
        "lowerCase": [],
        "GetBadOrder": ["body", "a"],
        "GetNoEditors": [],
        "ListNested": ["params"],
        "PutThingWithBody": ["content_type", "body"],
    }

    with caplog.at_level(logging.DEBUG, logger="godano_wallet.registry"):
        registry = MethodRegistry(operations, argument_names=names, has_body={})

    assert [d.raw_name for d in registry] == ["GetThing"]
    assert "GetMissingNames" in caplog.text
    assert "GetBadOrder" in caplog.text
    assert "ListNested" in caplog.text


def test_argument_count_mismatch_is_excluded() -> None:
    operations = [Operation("GetThing", "GET", "/things/{thing_id}", (str,))]

    registry = MethodRegistry(operations, argument_names={"GetThing": ["a", "b"]}, has_body={})

    assert len(registry) == 0


def test_colliding_commands_keep_the_first() -> None:
    operations = [
        Operation("ListWallets", "GET", "/wallets", ()),
        Operation("ListWallet", "GET", "/wallet", ()),
    ]
    names = {"ListWallets": [], "ListWallet": []}

    registry = MethodRegistry(operations, argument_names=names, has_body={})

    assert [d.raw_name for d in registry] == ["ListWallets"]


def test_incompatible_byron_variant_stays_standalone() -> None:
    operations = [
        Operation("GetWallet", "GET", "/wallets/{wallet_id}", (str,)),
        Operation("GetByronWallet", "GET", "/byron/{wallet_id}/{extra_id}", (str, str)),
    ]
    names = {"GetWallet": ["wallet_id"], "GetByronWallet": ["wallet_id", "extra_id"]}

    registry = MethodRegistry(operations, argument_names=names, has_body={})

    assert registry.get("GetWallet").byron_variant is None
    assert registry.find("Wallet", "get", byron=True).raw_name == "GetByronWallet"
    assert [(g.is_byron, g.object) for g in registry.groups()] == [(False, "Wallet"), (True, "Wallet")]


def test_invoke_passes_context_arguments_and_extra(registry: MethodRegistry) -> None:
    client = RecordingClient()
    ctx = object()

    result = registry.get("GetWallet").invoke(client, ctx, ["abc"])

    assert result == "response"
    assert client.calls == [("get_wallet", ctx, ("abc",))]


def test_invoke_fills_in_empty_extra(registry: MethodRegistry) -> None:
    client = RecordingClient()

    registry.get("PostWallet").invoke(client, None, [])
    registry.get("ListTransactions").invoke(client, None, ["w"])

    assert client.calls[0] == ("post_wallet", None, ({},))
    assert client.calls[1] == ("list_transactions", None, ("w", ListTransactionsParams()))


def test_invoke_with_byron_calls_the_variant(registry: MethodRegistry) -> None:
    client = RecordingClient()

    registry.get("SelectCoins").invoke(client, None, ["w"], {"payments": []}, byron=True)

    assert client.calls == [("byron_select_coins", None, ("w", {"payments": []}))]


def test_invoke_with_byron_converts_params(registry: MethodRegistry) -> None:
    client = RecordingClient()
    params = ListTransactionsParams(order="ascending", min_withdrawal=10)

    registry.get("ListTransactions").invoke(client, None, ["w"], params, byron=True)

    name, _ctx, args = client.calls[0]
    assert name == "list_byron_transactions"
    assert args == ("w", ListByronTransactionsParams(order="ascending"))


def test_byron_conversion_warns_about_dropped_fields(registry: MethodRegistry, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="godano_wallet.registry")
    descriptor = registry.get("ListTransactions")

    descriptor.invoke(RecordingClient(), None, ["w"], ListTransactionsParams(min_withdrawal=10), byron=True)
    descriptor.invoke(RecordingClient(), None, ["w"], ListTransactionsParams(order="ascending"), byron=True)

    warnings = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
    assert warnings == ["Ignoring min_withdrawal=10: not supported by ListByronTransactions"]


def test_invoke_without_variant_rejects_byron(registry: MethodRegistry) -> None:
    with pytest.raises(ValueError):
        registry.get("GetNetworkInformation").invoke(RecordingClient(), None, [], byron=True)


def test_invoke_checks_argument_count(registry: MethodRegistry) -> None:
    with pytest.raises(TypeError):
        registry.get("GetWallet").invoke(RecordingClient(), None, [])


def test_dry_run_editor_interrupts_and_reports(registry: MethodRegistry) -> None:
    seen = []

    class EditingClient:
        def get_wallet(self, ctx, wallet_id, *editors):
            for editor in editors:
                editor(ctx, "prepared-request")
            raise AssertionError("request should not be sent")

    result = registry.get("GetWallet").invoke(
        EditingClient(), None, ["w"], dry_run=True, on_dry_run=seen.append
    )

    assert result is None
    assert seen == ["prepared-request"]


def test_dry_run_interrupt_is_not_a_value_error() -> None:
    assert not issubclass(DryRunInterrupt, (ValueError, RuntimeError))
