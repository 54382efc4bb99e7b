"""Command line interface for the cardano-wallet REST API.

Sub-commands are not written by hand: every operation of the generated client
becomes ``<object> [<verb>]`` as discovered by :class:`MethodRegistry`::

    godano-wallet-cli wallet list
    godano-wallet-cli wallet get 2512a00e9653fe49a44a5886202e24d77eeb998f
    godano-wallet-cli transaction list <wallet-id> --order=descending --byron
    godano-wallet-cli wallet post --body-file=new-wallet.json --dry-run
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from functools import partial
from typing import Any, Dict, List, Sequence, TextIO

from .client import (
    RequestCancelledError,
    RequestContext,
    WalletAPIError,
    WalletTransportError,
    new_https_client,
)
from .config import ConfigurationError, early_verbose, load_client_config
from .flags import BodyError, add_body_flags, add_params_flags, build_params, load_body
from .log import configure_logging, level_from_flags
from .output import output_dry_run_request, output_response
from .registry import BYRON, CommandGroup, MethodDescriptor, MethodRegistry
from .tls import load_tls_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def _add_global_flags(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    # Sub-commands repeat the global flags with suppressed defaults, so a flag
    # given after the command does not get reset by the sub-parser.
    def default(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument("-s", "--server", default=default(None), help="wallet server address")
    parser.add_argument("--config", default=default(None), help="YAML config file with a 'wallet' section")
    parser.add_argument(
        "--tls-skip-verify",
        action="store_const",
        const=True,
        default=default(None),
        help="do not verify the server certificate",
    )
    parser.add_argument("--server-ca", default=default(None), help="CA bundle of the wallet server")
    parser.add_argument("--client-cert", default=default(None), help="client certificate (PEM)")
    parser.add_argument("--client-key", default=default(None), help="client private key (PEM)")
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        default=default(False),
        help="print the request instead of sending it",
    )
    parser.add_argument(
        "-y", "--yaml", action="store_true", default=default(False), help="print YAML instead of JSON"
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=default(False), help="debug logging")
    parser.add_argument(
        "-V", "--trace", action="store_true", default=default(False), help="debug logging including call arguments"
    )
    parser.add_argument("-q", "--quiet", action="store_true", default=default(False), help="only log warnings")
    parser.add_argument(
        "-Q", "--very-quiet", action="store_true", default=default(False), help="only log errors"
    )


def _command_help(descriptor: MethodDescriptor) -> str:
    op = descriptor.operation
    return f"{descriptor.name}: {op.http_method} {op.path}"


def _configure_command(parser: argparse.ArgumentParser, descriptor: MethodDescriptor) -> None:
    for name in descriptor.string_args:
        parser.add_argument(f"arg__{name}", metavar=name)
    extra = descriptor.extra
    if extra is not None and extra.is_params:
        add_params_flags(parser, extra.type)
    elif extra is not None and extra.is_body:
        add_body_flags(parser)
    if descriptor.byron_variant is not None:
        parser.add_argument(
            "--byron",
            action="store_true",
            help=f"call {descriptor.byron_variant.name} instead",
        )
    _add_global_flags(parser, suppress=True)
    parser.set_defaults(descriptor=descriptor)


def _add_group(subparsers: Any, group: CommandGroup) -> None:
    name = group.object
    aliases = [name.lower()] if name.lower() != name else []
    if group.single:
        descriptor = group.verbs[0]
        command = subparsers.add_parser(name, aliases=aliases, help=_command_help(descriptor))
        _configure_command(command, descriptor)
        return

    command = subparsers.add_parser(name, aliases=aliases, help=f"{name} operations")
    verbs = command.add_subparsers(dest="verb", metavar="<verb>", required=True)
    for descriptor in group.verbs:
        verb_parser = verbs.add_parser(descriptor.verb, help=_command_help(descriptor))
        _configure_command(verb_parser, descriptor)


def build_parser(registry: MethodRegistry | None = None) -> argparse.ArgumentParser:
    registry = registry or MethodRegistry()
    parser = argparse.ArgumentParser(
        prog="godano-wallet-cli",
        description="Command line client for the cardano-wallet REST API",
    )
    _add_global_flags(parser, suppress=False)
    subparsers = parser.add_subparsers(dest="object", metavar="<object>", required=True)

    byron_groups: List[CommandGroup] = []
    for group in registry.groups():
        if group.is_byron:
            byron_groups.append(group)
        else:
            _add_group(subparsers, group)

    if byron_groups:
        byron_parser = subparsers.add_parser(
            BYRON, aliases=[BYRON.lower()], help="Byron-era operations without a Shelley counterpart"
        )
        byron_subparsers = byron_parser.add_subparsers(dest="byron_object", metavar="<object>", required=True)
        for group in byron_groups:
            _add_group(byron_subparsers, group)
    return parser


def _config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "server_address": args.server,
        "tls_skip_verify": args.tls_skip_verify,
        "server_ca_file": args.server_ca,
        "client_cert_file": args.client_cert,
        "client_key_file": args.client_key,
    }


def _resolve_extra(args: argparse.Namespace, descriptor: MethodDescriptor) -> Any:
    extra = descriptor.extra
    if extra is None:
        return None
    if extra.is_params:
        return build_params(args, extra.type)
    return load_body(getattr(args, "body", None), getattr(args, "body_file", None))


def run_command(
    args: argparse.Namespace,
    *,
    ctx: RequestContext,
    client: Any = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the command selected by ``args`` and return the exit code."""

    descriptor: MethodDescriptor | None = getattr(args, "descriptor", None)
    if descriptor is None:
        raise CLIError("no command given")
    out = stdout or sys.stdout

    positional = [getattr(args, f"arg__{name}") for name in descriptor.string_args]
    extra = _resolve_extra(args, descriptor)

    owns_client = client is None
    if owns_client:
        config = load_client_config(config_path=args.config, overrides=_config_overrides(args))
        client = new_https_client(config.server_address, load_tls_settings(config))
        logger.debug("Using wallet server %s", config.server_address)

    try:
        response = descriptor.invoke(
            client,
            ctx,
            positional,
            extra,
            byron=getattr(args, "byron", False),
            dry_run=args.dry_run,
            on_dry_run=partial(output_dry_run_request, as_yaml=args.yaml, stream=out),
        )
    finally:
        if owns_client:
            client.close()

    if response is None:
        return EXIT_OK
    return EXIT_OK if output_response(response, as_yaml=args.yaml, stream=out) else EXIT_ERROR


def _install_signal_handlers(ctx: RequestContext) -> Dict[int, Any]:
    def handler(signum: int, frame: Any) -> None:
        ctx.cancel()
        raise KeyboardInterrupt

    previous: Dict[int, Any] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handler)
    return previous


def _restore_signal_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        # None means the handler was not installed from Python
        if handler is not None:
            signal.signal(signum, handler)


def main(argv: Sequence[str] | None = None) -> int:
    verbose_env = early_verbose()
    configure_logging(logging.DEBUG if verbose_env else logging.INFO)

    parser = build_parser(MethodRegistry())
    args = parser.parse_args(argv)
    level = level_from_flags(
        trace=args.trace, verbose=args.verbose, quiet=args.quiet, very_quiet=args.very_quiet
    )
    if verbose_env and level == logging.INFO:
        level = logging.DEBUG
    configure_logging(level)

    ctx = RequestContext()
    previous = _install_signal_handlers(ctx)
    try:
        return run_command(args, ctx=ctx)
    except (KeyboardInterrupt, RequestCancelledError):
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except (
        CLIError,
        ConfigurationError,
        BodyError,
        WalletTransportError,
        WalletAPIError,
    ) as exc:
        parser.exit(EXIT_ERROR, f"error: {exc}\n")
    finally:
        _restore_signal_handlers(previous)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
