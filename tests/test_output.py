import io
import json

import requests
import yaml

from godano_wallet.output import format_body, format_data, output_dry_run_request, output_response


def _response(status: int, content: bytes, reason: str = "OK") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = content
    return response


def test_format_data_json_and_yaml() -> None:
    data = {"b": 1, "a": [True, None]}

    assert json.loads(format_data(data)) == data
    assert format_data(data).startswith('{\n    "b": 1')
    assert yaml.safe_load(format_data(data, as_yaml=True)) == data
    assert format_data(data, as_yaml=True).startswith("b: 1")


def test_format_body_passes_non_json_through() -> None:
    assert format_body(b"plain text") == "plain text\n"
    assert format_body(b"") == ""
    assert format_body(None) == ""


def test_output_response_reports_success() -> None:
    out = io.StringIO()

    assert output_response(_response(200, b'{"id": "w"}'), stream=out)
    assert json.loads(out.getvalue()) == {"id": "w"}


def test_output_response_prints_error_bodies_and_reports_failure() -> None:
    out = io.StringIO()

    ok = output_response(_response(403, b'{"message": "no", "code": "forbidden"}', "Forbidden"), stream=out)

    assert not ok
    assert "forbidden" in out.getvalue()


def test_output_dry_run_request() -> None:
    request = requests.Request("POST", "http://wallet.local/v2/wallets", data=b'{"name": "w"}').prepare()
    out = io.StringIO()

    output_dry_run_request(request, stream=out)

    lines = out.getvalue().splitlines()
    assert lines[0] == "POST http://wallet.local/v2/wallets"
    assert json.loads("\n".join(lines[1:])) == {"name": "w"}


def test_output_dry_run_request_without_body() -> None:
    request = requests.Request("GET", "http://wallet.local/v2/wallets").prepare()
    out = io.StringIO()

    output_dry_run_request(request, stream=out)

    assert out.getvalue() == "GET http://wallet.local/v2/wallets\n"
