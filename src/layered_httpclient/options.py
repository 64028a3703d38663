"""Option factories for the client, static and runtime tiers.

Each factory validates its arguments when the option is applied and returns
an :class:`~layered_httpclient.config.Option` whose ``apply`` produces a new
tier value.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, BinaryIO, Mapping
from urllib.parse import unquote, urlsplit

from pydantic_core import PydanticSerializationError, to_json

from .config import (
    ClientConfig,
    Option,
    PrebuiltClient,
    RuntimeRequestConfig,
    StaticRequestConfig,
    Transport,
    TransportSettings,
    apply_options,
)
from .destinations import BodyDestination, JSONDestination
from .exceptions import HTTPClientConfigConflictError, HTTPClientValidationError
from .retry import EnvoyRetryPolicy, default_envoy_retry_policy, encode_envoy_retry_policy
from .validators import (
    validate_header,
    validate_headers,
    validate_host_header,
    validate_host_port,
    validate_query_param,
    validate_query_params,
    validate_scheme,
)


class HttpMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


# client options


def with_transport(transport: Transport) -> Option[ClientConfig]:
    def apply(config: ClientConfig) -> ClientConfig:
        if transport is None:
            raise HTTPClientValidationError("transport is None")
        return replace(config, transport=transport)

    return Option("transport", apply)


def with_default_transport() -> Option[ClientConfig]:
    return Option("default_transport", lambda config: replace(config, transport=TransportSettings()))


def with_httpx_client(client: PrebuiltClient) -> Option[ClientConfig]:
    def apply(config: ClientConfig) -> ClientConfig:
        if client is None:
            raise HTTPClientValidationError("client is None")
        return replace(config, client=client)

    return Option("httpx_client", apply)


def with_client_timeout(timeout: float) -> Option[ClientConfig]:
    def apply(config: ClientConfig) -> ClientConfig:
        if timeout <= 0:
            raise HTTPClientValidationError("timeout must be greater than 0")
        return replace(config, timeout=float(timeout))

    return Option("client_timeout", apply)


def with_insecure_skip_verify(value: bool) -> Option[ClientConfig]:
    """Toggle TLS verification on the transport set by an earlier option."""

    def apply(config: ClientConfig) -> ClientConfig:
        if config.transport is None:
            raise HTTPClientValidationError("transport is not set")
        if not isinstance(config.transport, TransportSettings):
            raise HTTPClientValidationError("tls settings of a prebuilt transport cannot be changed")
        return replace(config, transport=replace(config.transport, verify=not value))

    return Option("insecure_skip_verify", apply)


# static request options


def with_scheme(scheme: str) -> Option[StaticRequestConfig]:
    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        validate_scheme(scheme)
        return replace(config, scheme=scheme)

    return Option("scheme", apply)


def with_host_port(host_port: str) -> Option[StaticRequestConfig]:
    """Set the ``host:port`` target. The port is mandatory."""

    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        validate_host_port(host_port)
        return replace(config, host=host_port)

    return Option("host_port", apply)


def with_host_header(host_header: str) -> Option[StaticRequestConfig]:
    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        validate_host_header(host_header)
        return config.with_headers({"Host": host_header})

    return Option("host_header", apply)


def with_basic_auth(user: str, password: str = "") -> Option[StaticRequestConfig]:
    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        if not user:
            raise HTTPClientValidationError("user is empty")
        return replace(config, user=user, password=password)

    return Option("basic_auth", apply)


def with_url(url: str) -> Option[StaticRequestConfig]:
    """Shorthand for scheme, ``host:port`` and userinfo taken from ``url``.

    The URL may not carry a path (other than ``/``), a query or a fragment;
    those belong to the runtime tier.
    """

    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        try:
            parts = urlsplit(url)
        except ValueError as exc:
            raise HTTPClientValidationError("url could not be parsed", cause=exc) from exc
        if parts.path not in ("", "/"):
            raise HTTPClientValidationError(f"url must not carry a path: {parts.path!r}")
        if parts.query or parts.fragment:
            raise HTTPClientValidationError("url must not carry a query or fragment")

        options: list[Option[StaticRequestConfig]] = []
        if parts.scheme:
            options.append(with_scheme(parts.scheme))
        userinfo, _, host_port = parts.netloc.rpartition("@")
        if host_port:
            options.append(with_host_port(host_port))
        if userinfo:
            user, _, password = userinfo.partition(":")
            options.append(with_basic_auth(unquote(user), unquote(password)))
        return apply_options(config, options)

    return Option("url", apply)


def with_envoy_retry_policy(policy: EnvoyRetryPolicy) -> Option[StaticRequestConfig]:
    """Encode ``policy`` into ``x-envoy-*`` headers sent with every request.

    If ``max_retries`` is non-zero both timeouts are required.
    """

    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        return config.with_headers(encode_envoy_retry_policy(policy))

    return Option("envoy_retry_policy", apply)


def with_default_envoy_retry_policy() -> Option[StaticRequestConfig]:
    return with_envoy_retry_policy(default_envoy_retry_policy())


def with_static_headers(headers: Mapping[str, str]) -> Option[StaticRequestConfig]:
    """Headers sent with every request, e.g. credentials for the upstream."""

    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        validate_headers(headers)
        return config.with_headers(headers)

    return Option("static_headers", apply)


def with_static_header(key: str, value: str) -> Option[StaticRequestConfig]:
    def apply(config: StaticRequestConfig) -> StaticRequestConfig:
        validate_header(key, value)
        return config.with_headers({key: value})

    return Option("static_header", apply)


# runtime request options


def with_runtime_headers(headers: Mapping[str, str]) -> Option[RuntimeRequestConfig]:
    # Prefer tracing middleware for per-request headers; this is for the rest.
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        validate_headers(headers)
        return config.with_headers(headers)

    return Option("runtime_headers", apply)


def with_runtime_header(key: str, value: str) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        validate_header(key, value)
        return config.with_headers({key: value})

    return Option("runtime_header", apply)


def with_request_json(body: Any) -> Option[RuntimeRequestConfig]:
    """Serialize ``body`` as the JSON request body.

    Accepts anything pydantic can serialize: mappings, sequences, dataclasses
    and models.
    """

    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        try:
            content = to_json(body)
        except PydanticSerializationError as exc:
            raise HTTPClientValidationError("request body is not JSON serializable", cause=exc) from exc
        return replace(config.with_headers({"Content-Type": "application/json"}), body=content)

    return Option("request_json", apply)


def with_request_body(body: bytes, content_type: str | None = None) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        if not isinstance(body, (bytes, bytearray)):
            raise HTTPClientValidationError("request body must be bytes")
        if content_type:
            config = config.with_headers({"Content-Type": content_type})
        return replace(config, body=bytes(body))

    return Option("request_body", apply)


def with_method(method: HttpMethod | str) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        name = method.value if isinstance(method, HttpMethod) else str(method).upper()
        try:
            resolved = HttpMethod(name)
        except ValueError as exc:
            raise HTTPClientValidationError(f"unsupported http method: {method!r}") from exc
        return replace(config, method=resolved.value)

    return Option("method", apply)


def with_path(path: str) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        if "://" in path:
            raise HTTPClientValidationError("full URLs are not allowed as a path")
        if "\x00" in path:
            raise HTTPClientValidationError("invalid path characters")
        return replace(config, path=path)

    return Option("path", apply)


def with_query_param(key: str, value: str) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        validate_query_param(key, value)
        return config.with_query({key: value})

    return Option("query_param", apply)


def with_query_params(params: Mapping[str, str]) -> Option[RuntimeRequestConfig]:
    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        validate_query_params(params)
        return config.with_query(params)

    return Option("query_params", apply)


def with_response_json(target: Any = Any) -> Option[RuntimeRequestConfig]:
    """Decode a successful response body as JSON validated against ``target``."""

    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        if isinstance(config.response, BodyDestination):
            raise HTTPClientConfigConflictError("cannot set both response json and response body")
        return replace(config, response=JSONDestination(target))

    return Option("response_json", apply)


def with_response_body(sink: BinaryIO) -> Option[RuntimeRequestConfig]:
    """Copy a successful response body verbatim into ``sink``."""

    def apply(config: RuntimeRequestConfig) -> RuntimeRequestConfig:
        if not callable(getattr(sink, "write", None)):
            raise HTTPClientValidationError("response sink must have a write method")
        if isinstance(config.response, JSONDestination):
            raise HTTPClientConfigConflictError("cannot set both response json and response body")
        return replace(config, response=BodyDestination(sink))

    return Option("response_body", apply)
