import io
import json
from pathlib import Path

import pytest
import requests

from godano_wallet import cli
from godano_wallet import config as config_module
from godano_wallet.client import RequestContext, WalletClient
from godano_wallet.registry import MethodRegistry

SERVER = "http://wallet.local:8090/v2"


class StubSession(requests.Session):
    def __init__(self, response=None, error=None) -> None:
        super().__init__()
        self.response = response
        self.error = error
        self.sent = []

    def send(self, request, **kwargs):
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        return self.response


def _response(status: int, payload) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = "Status"
    response._content = json.dumps(payload).encode()
    return response


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path: Path):
    for name in (
        config_module.ENV_SERVER_ADDRESS,
        config_module.ENV_TLS_SKIP_VERIFY,
        config_module.ENV_SERVER_CA_FILE,
        config_module.ENV_CLIENT_CERT_FILE,
        config_module.ENV_CLIENT_KEY_FILE,
        config_module.ENV_VERBOSE,
        config_module.ENV_CONFIG_PATH,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")
    # keep the package logger propagating so other tests can use caplog
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture(scope="module")
def parser():
    return cli.build_parser(MethodRegistry())


def test_multi_verb_object_has_verb_commands(parser) -> None:
    args = parser.parse_args(["wallet", "get", "abc"])

    assert args.descriptor.raw_name == "GetWallet"
    assert args.arg__wallet_id == "abc"


def test_object_names_accept_camel_case(parser) -> None:
    args = parser.parse_args(["Wallet", "list"])

    assert args.descriptor.raw_name == "ListWallets"


def test_single_verb_object_runs_directly(parser) -> None:
    args = parser.parse_args(["coins", "w", "--body", "{}", "--byron"])

    assert args.descriptor.raw_name == "SelectCoins"
    assert args.byron is True
    assert args.body == "{}"


def test_global_flags_are_accepted_after_the_command(parser) -> None:
    args = parser.parse_args(["-s", SERVER, "wallet", "list", "--dry-run", "-y"])

    assert args.server == SERVER
    assert args.dry_run is True
    assert args.yaml is True


def test_global_flags_before_the_command_are_kept(parser) -> None:
    args = parser.parse_args(["--dry-run", "wallet", "list"])

    assert args.dry_run is True


def test_params_flags_default_to_absent(parser) -> None:
    args = parser.parse_args(["transaction", "list", "w"])

    assert args.param__order is None
    assert args.param__min_withdrawal is None


def test_byron_flag_only_where_a_variant_exists(parser) -> None:
    assert parser.parse_args(["wallet", "get", "w", "--byron"]).byron is True
    with pytest.raises(SystemExit) as excinfo:
        parser.parse_args(["networkinformation", "--byron"])
    assert excinfo.value.code == 2


def test_missing_command_is_a_usage_error(parser) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parser.parse_args([])

    assert excinfo.value.code == 2


def test_dry_run_prints_the_request(capsys) -> None:
    code = cli.main(["wallet", "get", "abc", "--dry-run", "--server", SERVER])

    assert code == 0
    assert capsys.readouterr().out == f"GET {SERVER}/wallets/abc\n"


def test_dry_run_prints_the_body(capsys) -> None:
    code = cli.main(["-s", SERVER, "wallet", "post", "--body", '{"name": "alice"}', "-n"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == f"POST {SERVER}/wallets"
    assert json.loads("\n".join(out[1:])) == {"name": "alice"}


def test_byron_flag_dispatches_to_byron_variant(capsys) -> None:
    code = cli.main(["-s", SERVER, "coins", "w", "--byron", "-n", "--body", '{"payments": []}'])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith(f"POST {SERVER}/byron-wallets/w/coin-selections/random\n")


def test_byron_params_are_converted(capsys) -> None:
    cli.main(["-s", SERVER, "transaction", "list", "w", "--order", "ascending", "--byron", "-n"])

    assert capsys.readouterr().out == f"GET {SERVER}/byron-wallets/w/transactions?order=ascending\n"


def test_absent_flags_are_not_sent(capsys) -> None:
    cli.main(["-s", SERVER, "transaction", "list", "w", "-n"])

    assert capsys.readouterr().out == f"GET {SERVER}/wallets/w/transactions\n"


def test_explicit_false_flag_is_sent(capsys) -> None:
    cli.main(["-s", SERVER, "networkclock", "--force_ntp_check=false", "-n"])

    assert capsys.readouterr().out == f"GET {SERVER}/network/clock?forceNtpCheck=false\n"


def test_run_command_prints_response() -> None:
    parser = cli.build_parser(MethodRegistry())
    args = parser.parse_args(["wallet", "list", "--yaml"])
    session = StubSession(_response(200, [{"id": "w1"}]))
    out = io.StringIO()

    code = cli.run_command(args, ctx=RequestContext(), client=WalletClient(SERVER, session=session), stdout=out)

    assert code == 0
    assert out.getvalue() == "- id: w1\n"
    assert session.sent[0].url == f"{SERVER}/wallets"


def test_http_errors_exit_non_zero(monkeypatch, capsys) -> None:
    session = StubSession(_response(404, {"message": "no such wallet", "code": "no_such_wallet"}))
    monkeypatch.setattr(cli, "new_https_client", lambda server, tls: WalletClient(server, session=session))

    code = cli.main(["wallet", "get", "missing"])

    assert code == 1
    assert "no_such_wallet" in capsys.readouterr().out


def test_transport_errors_are_reported(monkeypatch, capsys) -> None:
    session = StubSession(error=requests.ConnectionError("refused"))
    monkeypatch.setattr(cli, "new_https_client", lambda server, tls: WalletClient(server, session=session))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["wallet", "list"])

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("error: Connection to")


def test_invalid_body_is_reported(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-s", SERVER, "wallet", "post", "--body", "[1]", "-n"])

    assert excinfo.value.code == 1
    assert "must be a JSON object" in capsys.readouterr().err


def test_configuration_errors_are_reported(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-s", "not-a-url", "wallet", "list", "-n"])

    assert excinfo.value.code == 1
    assert "Invalid wallet server address" in capsys.readouterr().err


def test_bad_port_is_a_configuration_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-s", "http://localhost:abc/v2", "wallet", "list", "-n"])

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("error: Invalid wallet server address")
