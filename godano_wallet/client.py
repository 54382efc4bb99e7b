"""HTTP client for the cardano-wallet REST API.

:class:`WalletClient` exposes one method per entry of
:data:`godano_wallet.operations.OPERATIONS`, generated when this module is
imported. Every method takes a :class:`RequestContext`, the operation's string
arguments in path order, its params/body argument when it has one, and any
number of request editors::

    client = WalletClient("http://localhost:8090/v2")
    response = client.get_wallet(RequestContext(), "2512a00e9653fe49a44a5886202e24d77eeb998f")

Methods return the raw :class:`requests.Response` for every HTTP status;
:func:`raise_for_api_error` turns non-2xx responses into
:class:`WalletAPIError`. Request editors are callables receiving the context
and the prepared request right before it is sent; raising from an editor
aborts the request.
"""

from __future__ import annotations

import dataclasses
import inspect
import json
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Sequence
from urllib.parse import quote

import requests
from requests import PreparedRequest, RequestException, Response

from .models import ErrorResponse, UTxODistribution, WalletResponse
from .operations import OPERATIONS, Operation
from .params import JSONBody, RawBody
from .tls import TLSSettings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8090/v2"
DEFAULT_TIMEOUT = 60.0

RequestEditor = Callable[["RequestContext", PreparedRequest], None]


class WalletTransportError(RuntimeError):
    """Raised when the wallet endpoint cannot be reached."""


class RequestCancelledError(RuntimeError):
    """Raised when a request is issued on a cancelled context."""


class WalletAPIError(RuntimeError):
    """Raised for non-2xx responses of the wallet API."""

    def __init__(self, message: str, *, status_code: int, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class RequestContext:
    """Cancellation scope shared by the requests of one invocation.

    Cancelling closes every session bound to the context, which aborts
    in-flight requests, and makes later requests fail immediately.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._sessions: List[requests.Session] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def bind(self, session: requests.Session) -> None:
        if session not in self._sessions:
            self._sessions.append(session)

    def cancel(self) -> None:
        self._cancelled.set()
        for session in self._sessions:
            session.close()

    def check(self) -> None:
        if self.cancelled:
            raise RequestCancelledError("request context was cancelled")


class WalletClient:
    """Client for a cardano-wallet endpoint.

    ``tls`` carries the certificate settings resolved by
    :func:`godano_wallet.tls.load_tls_settings`. The timeout applies to every
    request and failed requests are never retried.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        tls: TLSSettings | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tls = tls or TLSSettings()
        self.timeout = timeout
        self._session = session or requests.Session()

    def _url(self, op: Operation, path_values: Sequence[str]) -> str:
        names = op.path_arguments
        path = op.path.format(**{name: quote(str(value), safe="") for name, value in zip(names, path_values)})
        return f"{self.base_url}{path}"

    def prepare(self, op: Operation, args: Sequence[Any]) -> PreparedRequest:
        """Build the HTTP request for ``op`` called with ``args``."""

        num_strings = len(op.path_arguments)
        headers = {"Accept": "application/json; charset=utf-8"}
        query: Dict[str, str] = {}
        data: Any = None
        extra_type = op.extra_type

        if extra_type is RawBody:
            content_type, data = args[-2], args[-1]
            headers["Content-Type"] = content_type
        elif extra_type is JSONBody:
            body = args[num_strings]
            if body is not None:
                data = json.dumps(body).encode("utf-8")
                headers["Content-Type"] = "application/json; charset=utf-8"
        elif extra_type is not None:
            query = encode_query(args[num_strings])

        request = requests.Request(
            op.http_method,
            self._url(op, args[:num_strings]),
            params=query,
            data=data,
            headers=headers,
        )
        return self._session.prepare_request(request)

    def send_operation(
        self,
        op: Operation,
        ctx: RequestContext,
        args: Sequence[Any],
        editors: Iterable[RequestEditor] = (),
    ) -> Response:
        ctx.check()
        ctx.bind(self._session)
        prepared = self.prepare(op, args)
        for editor in editors:
            editor(ctx, prepared)
        ctx.check()

        logger.debug("%s %s", prepared.method, prepared.url)
        try:
            response = self._session.send(
                prepared,
                timeout=self.timeout,
                verify=self.tls.verify,
                cert=self.tls.cert,
            )
        except RequestException as exc:
            if ctx.cancelled:
                raise RequestCancelledError("request was cancelled") from exc
            logger.debug("Request to %s failed", prepared.url, exc_info=True)
            raise WalletTransportError(
                f"Connection to {self.base_url} failed: {exc}. Check --server or "
                "GODANO_WALLET_CLIENT_SERVER_ADDRESS and the TLS settings."
            ) from exc
        logger.debug("Response status: %s %s", response.status_code, response.reason)
        return response

    def close(self) -> None:
        self._session.close()

    # Typed helpers -------------------------------------------------------

    def utxo_distribution(self, ctx: RequestContext, wallet_id: str, *, byron: bool = False) -> UTxODistribution:
        """Fetch and parse the UTxO size distribution of a wallet."""

        method = self.get_byron_u_tx_os_statistics if byron else self.get_u_tx_os_statistics
        return UTxODistribution.from_dict(decode_response(method(ctx, wallet_id)))

    def list_wallet_responses(self, ctx: RequestContext, *, byron: bool = False) -> List[WalletResponse]:
        """Fetch all wallets of one era as :class:`WalletResponse` objects."""

        method = self.list_byron_wallets if byron else self.list_wallets
        payload = decode_response(method(ctx))
        if not isinstance(payload, list):
            raise ValueError(f"expected a list of wallets, got {type(payload).__name__}")
        return [WalletResponse.from_dict(item) for item in payload]


def encode_query(params: Any) -> Dict[str, str]:
    """Flatten a params dataclass into query parameters, skipping unset fields."""

    if params is None:
        return {}
    query: Dict[str, str] = {}
    for field in dataclasses.fields(params):
        value = getattr(params, field.name)
        if value is None:
            continue
        name = field.metadata.get("query", field.name)
        if isinstance(value, bool):
            query[name] = "true" if value else "false"
        else:
            query[name] = str(value)
    return query


def raise_for_api_error(response: Response) -> None:
    if 200 <= response.status_code < 300:
        return
    try:
        error = ErrorResponse.from_dict(response.json())
    except (ValueError, TypeError):
        raise WalletAPIError(
            f"unknown error, status code: {response.status_code}",
            status_code=response.status_code,
        ) from None
    raise WalletAPIError(error.message, status_code=response.status_code, code=error.code)


def decode_response(response: Response) -> Any:
    """Return the JSON body of a successful response."""

    raise_for_api_error(response)
    try:
        return response.json()
    except ValueError as exc:
        raise WalletAPIError(
            "response body is not valid JSON", status_code=response.status_code
        ) from exc


def new_https_client(server: str, tls: TLSSettings, **kwargs: Any) -> WalletClient:
    return WalletClient(server or DEFAULT_BASE_URL, tls=tls, **kwargs)


def _make_method(op: Operation) -> Callable[..., Response]:
    arity = len(op.parameters)

    def method(self: WalletClient, ctx: RequestContext, *args: Any) -> Response:
        if len(args) < arity:
            raise TypeError(f"{op.python_name}() expects {arity} arguments after ctx, got {len(args)}")
        return self.send_operation(op, ctx, args[:arity], args[arity:])

    names = list(op.path_arguments)
    if op.extra_type is RawBody:
        names += ["content_type", "body"]
    elif op.extra_type is JSONBody:
        names.append("body")
    elif op.extra_type is not None:
        names.append("params")

    parameters = [
        inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD),
        inspect.Parameter("ctx", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=RequestContext),
    ]
    parameters += [
        inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=annotation)
        for name, annotation in zip(names, op.parameters)
    ]
    if op.variadic:
        parameters.append(inspect.Parameter("request_editors", inspect.Parameter.VAR_POSITIONAL))

    method.__name__ = op.python_name
    method.__qualname__ = f"WalletClient.{op.python_name}"
    method.__doc__ = f"{op.name}: {op.http_method} {op.path}"
    method.__signature__ = inspect.Signature(parameters, return_annotation=Response)  # type: ignore[attr-defined]
    method.operation = op  # type: ignore[attr-defined]
    return method


for _operation in OPERATIONS:
    setattr(WalletClient, _operation.python_name, _make_method(_operation))
del _operation
