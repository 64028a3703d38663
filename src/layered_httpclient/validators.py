"""Validators for static and runtime request settings.

Every validator raises :class:`HTTPClientValidationError` on bad input and
returns ``None`` otherwise.
"""

from __future__ import annotations

import re
from typing import Mapping

from .exceptions import HTTPClientValidationError


SUPPORTED_SCHEMES = frozenset({"http", "https"})

# Registered-port ceiling; dynamic/ephemeral ports are never valid targets.
MAX_VALID_CONNECT_PORT = 49152

_PORT_PATTERN = re.compile(r"[0-9]+")
_LINE_BREAKS = re.compile(r"[\r\n]")


def validate_scheme(scheme: str) -> None:
    if not scheme:
        raise HTTPClientValidationError("scheme is empty")
    if scheme not in SUPPORTED_SCHEMES:
        raise HTTPClientValidationError(f"scheme is not http or https: {scheme!r}")


def split_host_port(host_port: str) -> tuple[str, str]:
    """Split ``host:port`` (or ``[ipv6]:port``) into its two parts.

    The port is mandatory; there is no fallback to 80 or 443.
    """
    if host_port.startswith("["):
        end = host_port.find("]")
        if end < 0:
            raise HTTPClientValidationError(f"missing ']' in address: {host_port!r}")
        host = host_port[1:end]
        rest = host_port[end + 1 :]
        if not rest.startswith(":"):
            raise HTTPClientValidationError(f"missing port in address: {host_port!r}")
        return host, rest[1:]

    host, sep, port = host_port.rpartition(":")
    if not sep:
        raise HTTPClientValidationError(f"missing port in address: {host_port!r}")
    if ":" in host:
        raise HTTPClientValidationError(f"too many colons in address: {host_port!r}")
    return host, port


def validate_host(host: str) -> None:
    if not host:
        raise HTTPClientValidationError("host is empty")


def validate_port(port: str) -> None:
    if not _PORT_PATTERN.fullmatch(port):
        raise HTTPClientValidationError(f"port is not a valid unsigned integer: {port!r}")
    value = int(port)
    if value < 1 or value > MAX_VALID_CONNECT_PORT:
        raise HTTPClientValidationError(f"port is not in range 1-{MAX_VALID_CONNECT_PORT}: {value}")


def validate_host_port(host_port: str) -> None:
    host, port = split_host_port(host_port)
    validate_host(host)
    validate_port(port)


def validate_host_header(host_header: str) -> None:
    if not host_header:
        raise HTTPClientValidationError("host header is empty")
    validate_header("Host", host_header)


def validate_headers(headers: Mapping[str, str] | None) -> None:
    if headers is None:
        raise HTTPClientValidationError("headers is None")
    for key, value in headers.items():
        validate_header(key, value)


def validate_header(key: str, value: str) -> None:
    if not isinstance(key, str) or not isinstance(value, str):
        raise HTTPClientValidationError(f"header {key!r} must have str key and value")
    if not key or not value:
        raise HTTPClientValidationError("header key or value is empty")
    if _LINE_BREAKS.search(key) or _LINE_BREAKS.search(value):
        raise HTTPClientValidationError(f"header {key!r} contains a line break")


def validate_query_params(params: Mapping[str, str] | None) -> None:
    if params is None:
        raise HTTPClientValidationError("query params is None")


def validate_query_param(key: str, value: str) -> None:
    if not key or not value:
        raise HTTPClientValidationError("query param key or value is empty")
