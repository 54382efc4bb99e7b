"""Command-line flags for params dataclasses and request bodies."""

from __future__ import annotations

import argparse
import dataclasses
import json
import re
import types
import typing
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

SUPPORTED_FIELD_TYPES = (bool, str, int)
_WHITESPACE = re.compile(r"\s+")
_ZERO_VALUES = {bool: False, str: "", int: 0}


class BodyError(ValueError):
    """Raised when a request body cannot be loaded or parsed."""


@dataclass(frozen=True)
class ParamField:
    """One field of a params dataclass, as exposed on the command line."""

    name: str
    type: type
    optional: bool

    @property
    def flag(self) -> str:
        return "--" + flag_name(self.name)

    @property
    def dest(self) -> str:
        return f"param__{self.name}"


def flag_name(field_name: str) -> str:
    return _WHITESPACE.sub("", field_name).lower()


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    if typing.get_origin(hint) in (Union, types.UnionType):
        members = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(members) == 1 and len(typing.get_args(hint)) == 2:
            return members[0], True
    return hint, False


def params_fields(params_type: Any) -> Optional[List[ParamField]]:
    """Return the flag-able fields of ``params_type``, or ``None``.

    A params dataclass qualifies only if every field is a ``bool``, ``str`` or
    ``int``, optionally wrapped in ``Optional``. Nested dataclasses, containers
    and other types disqualify it.
    """

    if not isinstance(params_type, type) or not dataclasses.is_dataclass(params_type):
        return None
    try:
        hints = typing.get_type_hints(params_type)
    except (NameError, TypeError):
        return None
    result: List[ParamField] = []
    for field in dataclasses.fields(params_type):
        if not field.init:
            return None
        field_type, optional = _unwrap_optional(hints.get(field.name))
        if field_type not in SUPPORTED_FIELD_TYPES:
            return None
        result.append(ParamField(name=field.name, type=field_type, optional=optional))
    return result


def is_params_struct(params_type: Any) -> bool:
    return params_fields(params_type) is not None


def parse_bool(raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in {"1", "t", "true", "yes", "on"}:
        return True
    if normalized in {"0", "f", "false", "no", "off"}:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {raw!r}")


def parse_int(raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {raw!r}") from None


def add_params_flags(parser: argparse.ArgumentParser, params_type: type) -> List[ParamField]:
    """Add one flag per field of ``params_type`` to ``parser``.

    Optional fields default to ``None`` so that an omitted flag stays distinct
    from an explicit ``false``, empty string or zero. Boolean flags may be
    given bare (``--flag``) or with a value (``--flag=false``).
    """

    fields = params_fields(params_type)
    if fields is None:
        raise TypeError(f"{params_type!r} is not a flat params dataclass")
    for field in fields:
        default = None if field.optional else _ZERO_VALUES[field.type]
        help_text = f"{field.name} parameter"
        if field.type is bool:
            parser.add_argument(
                field.flag,
                dest=field.dest,
                nargs="?",
                const=True,
                type=parse_bool,
                default=default,
                metavar="BOOL",
                help=help_text,
            )
        else:
            parser.add_argument(
                field.flag,
                dest=field.dest,
                type=parse_int if field.type is int else str,
                default=default,
                help=help_text,
            )
    return fields


def build_params(args: argparse.Namespace, params_type: type) -> Any:
    """Create a ``params_type`` instance from parsed flags."""

    fields = params_fields(params_type) or []
    values = {}
    for field in fields:
        value = getattr(args, field.dest, None)
        if value is None and not field.optional:
            value = _ZERO_VALUES[field.type]
        values[field.name] = value
    return params_type(**values)


def add_body_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-b", "--body", dest="body", default=None, help="JSON-encoded content to send as request body"
    )
    group.add_argument(
        "-B", "--body-file", dest="body_file", default=None, help="JSON file to send as request body"
    )


def load_body(body: str | None, body_file: str | None) -> dict[str, Any]:
    """Return the request body given inline or as a file; an empty object if neither."""

    if body and body_file:
        raise BodyError("Cannot specify both --body/-b and --body-file/-B")
    if body_file:
        try:
            content = Path(body_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise BodyError(f"Failed to read body file {body_file}: {exc}") from exc
    elif body:
        content = body
    else:
        return {}

    try:
        parsed = json.loads(content)
    except ValueError as exc:
        raise BodyError(f"Failed to parse body as JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise BodyError(f"Request body must be a JSON object, got {type(parsed).__name__}")
    return parsed
