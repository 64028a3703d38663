"""Layered HTTP client: client, static and runtime configuration tiers."""

from .client import AsyncHTTPClient, HTTPClient
from .config import (
    ClientConfig,
    Config,
    ConfigOptions,
    Option,
    RuntimeRequestConfig,
    StaticRequestConfig,
    TransportSettings,
    apply_options,
    new_config,
)
from .destinations import BodyDestination, JSONDestination
from .exceptions import (
    HTTPClientConfigConflictError,
    HTTPClientConfigError,
    HTTPClientConstructionError,
    HTTPClientDecodeError,
    HTTPClientError,
    HTTPClientStatusError,
    HTTPClientValidationError,
)
from .models import HTTPClientSettings, RetryPolicySettings
from .options import (
    HttpMethod,
    with_basic_auth,
    with_client_timeout,
    with_default_envoy_retry_policy,
    with_default_transport,
    with_envoy_retry_policy,
    with_host_header,
    with_host_port,
    with_httpx_client,
    with_insecure_skip_verify,
    with_method,
    with_path,
    with_query_param,
    with_query_params,
    with_request_body,
    with_request_json,
    with_response_body,
    with_response_json,
    with_runtime_header,
    with_runtime_headers,
    with_scheme,
    with_static_header,
    with_static_headers,
    with_transport,
    with_url,
)
from .retry import (
    EnvoyRetryPolicy,
    RetryOn,
    default_envoy_retry_policy,
    encode_envoy_retry_policy,
    validate_envoy_retry_policy,
)

__all__ = [
    "AsyncHTTPClient",
    "BodyDestination",
    "ClientConfig",
    "Config",
    "ConfigOptions",
    "EnvoyRetryPolicy",
    "HTTPClient",
    "HTTPClientConfigConflictError",
    "HTTPClientConfigError",
    "HTTPClientConstructionError",
    "HTTPClientDecodeError",
    "HTTPClientError",
    "HTTPClientSettings",
    "HTTPClientStatusError",
    "HTTPClientValidationError",
    "HttpMethod",
    "JSONDestination",
    "Option",
    "RetryOn",
    "RetryPolicySettings",
    "RuntimeRequestConfig",
    "StaticRequestConfig",
    "TransportSettings",
    "apply_options",
    "default_envoy_retry_policy",
    "encode_envoy_retry_policy",
    "new_config",
    "validate_envoy_retry_policy",
    "with_basic_auth",
    "with_client_timeout",
    "with_default_envoy_retry_policy",
    "with_default_transport",
    "with_envoy_retry_policy",
    "with_host_header",
    "with_host_port",
    "with_httpx_client",
    "with_insecure_skip_verify",
    "with_method",
    "with_path",
    "with_query_param",
    "with_query_params",
    "with_request_body",
    "with_request_json",
    "with_response_body",
    "with_response_json",
    "with_runtime_header",
    "with_runtime_headers",
    "with_scheme",
    "with_static_header",
    "with_static_headers",
    "with_transport",
    "with_url",
]
