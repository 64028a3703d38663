"""Send a single request described by a settings file."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

import httpx
from pydantic import ValidationError

from .client import HTTPClient
from .config import Option, RuntimeRequestConfig
from .exceptions import HTTPClientConfigError, HTTPClientError
from .models import HTTPClientSettings
from .options import (
    with_method,
    with_path,
    with_query_param,
    with_request_json,
    with_response_body,
    with_runtime_header,
)


def _pair(raw: str, sep: str) -> tuple[str, str]:
    key, found, value = raw.partition(sep)
    if not found:
        raise argparse.ArgumentTypeError(f"expected KEY{sep}VALUE, got {raw!r}")
    return key.strip(), value.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="layered-httpclient")
    parser.add_argument("--config", type=Path, help="JSON settings file; LAYERED_HTTPCLIENT_* env vars otherwise")
    parser.add_argument("--method")
    parser.add_argument("--path")
    parser.add_argument("--query", action="append", default=[], type=lambda raw: _pair(raw, "="))
    parser.add_argument("--header", action="append", default=[], type=lambda raw: _pair(raw, ":"))
    parser.add_argument("--data", help="JSON request body")
    return parser


def _load_settings(path: Path | None) -> HTTPClientSettings:
    if path is None:
        return HTTPClientSettings.from_env()
    return HTTPClientSettings.model_validate_json(path.read_text())


def _runtime_options(args: argparse.Namespace) -> list[Option[RuntimeRequestConfig]]:
    options: list[Option[RuntimeRequestConfig]] = []
    if args.method:
        options.append(with_method(args.method))
    if args.path:
        options.append(with_path(args.path))
    for key, value in args.query:
        options.append(with_query_param(key, value))
    for key, value in args.header:
        options.append(with_runtime_header(key, value))
    if args.data is not None:
        options.append(with_request_json(json.loads(args.data)))
    return options


def _main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        settings = _load_settings(args.config)
        runtime_options = _runtime_options(args)
        client = HTTPClient.from_options(settings.to_config_options())
    except (ValidationError, HTTPClientError, ValueError, OSError) as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    with client:
        try:
            client.send(*runtime_options, with_response_body(sys.stdout.buffer))
        except HTTPClientConfigError as exc:
            print(f"configuration error: {exc}", file=sys.stderr)
            return 2
        except (HTTPClientError, httpx.HTTPError) as exc:
            print(f"request failed: {exc}", file=sys.stderr)
            return 1
    return 0


def main() -> None:
    raise SystemExit(_main())
