"""Rendering of wallet responses and dry-run requests."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

import yaml
from requests import PreparedRequest, Response

logger = logging.getLogger(__name__)

JSON_INDENT = 4


def format_data(data: Any, *, as_yaml: bool = False) -> str:
    if as_yaml:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=JSON_INDENT, ensure_ascii=False) + "\n"


def format_body(raw: bytes | str | None, *, as_yaml: bool = False) -> str:
    """Pretty-print a JSON payload; anything that is not JSON is returned as text."""

    if raw is None:
        return ""
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if not text.strip():
        return ""
    try:
        data = json.loads(text)
    except ValueError:
        return text if text.endswith("\n") else text + "\n"
    return format_data(data, as_yaml=as_yaml)


def output_response(response: Response, *, as_yaml: bool = False, stream: TextIO | None = None) -> bool:
    """Print the response body and return whether the status was 2xx."""

    out = stream or sys.stdout
    success = 200 <= response.status_code < 300
    if success:
        logger.debug("Status: %s %s", response.status_code, response.reason)
    else:
        logger.error("Status: %s %s", response.status_code, response.reason)
    out.write(format_body(response.content, as_yaml=as_yaml))
    return success


def output_dry_run_request(
    request: PreparedRequest, *, as_yaml: bool = False, stream: TextIO | None = None
) -> None:
    out = stream or sys.stdout
    out.write(f"{request.method} {request.url}\n")
    body = request.body
    if body is None:
        return
    if hasattr(body, "read"):
        out.write("<binary stream>\n")
        return
    out.write(format_body(body, as_yaml=as_yaml))
