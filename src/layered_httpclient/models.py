"""Pydantic settings models that describe a client as a JSON/env document."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import ClientConfig, ConfigOptions, Option, RuntimeRequestConfig, StaticRequestConfig
from .options import (
    with_basic_auth,
    with_client_timeout,
    with_default_envoy_retry_policy,
    with_default_transport,
    with_envoy_retry_policy,
    with_host_header,
    with_host_port,
    with_insecure_skip_verify,
    with_method,
    with_path,
    with_query_params,
    with_scheme,
    with_static_headers,
    with_url,
)
from .retry import EnvoyRetryPolicy, RetryOn


ENV_PREFIX = "LAYERED_HTTPCLIENT_"


class LayeredHTTPClientModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RetryPolicySettings(LayeredHTTPClientModel):
    max_retries: int = Field(default=0, ge=0)
    total_timeout_ms: int = Field(default=0, ge=0)
    per_try_timeout_ms: int = Field(default=0, ge=0)
    retry_on: list[RetryOn] = Field(default_factory=list)
    retriable_status_codes: list[int] = Field(default_factory=list)
    retriable_headers: list[str] = Field(default_factory=list)

    def to_policy(self) -> EnvoyRetryPolicy:
        return EnvoyRetryPolicy(
            max_retries=self.max_retries,
            total_timeout=timedelta(milliseconds=self.total_timeout_ms),
            per_try_timeout=timedelta(milliseconds=self.per_try_timeout_ms),
            retry_on=tuple(self.retry_on),
            retriable_status_codes=tuple(self.retriable_status_codes),
            retriable_headers=tuple(self.retriable_headers),
        )


class HTTPClientSettings(LayeredHTTPClientModel):
    url: str | None = None
    scheme: str | None = None
    host_port: str | None = None
    host_header: str | None = None
    user: str | None = None
    password: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float | None = Field(default=None, gt=0)
    insecure_skip_verify: bool | None = None
    retry_policy: RetryPolicySettings | Literal["default"] | None = None
    method: str | None = None
    path: str | None = None
    query: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _url_excludes_parts(self) -> "HTTPClientSettings":
        if self.url and (self.scheme or self.host_port):
            raise ValueError("url cannot be combined with scheme or host_port")
        return self

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Mapping[str, str] | None = None) -> "HTTPClientSettings":
        env = os.environ if environ is None else environ
        fields = ("url", "host_header", "user", "password", "timeout", "insecure_skip_verify")
        values = {}
        for name in fields:
            raw = env.get(f"{prefix}{name.upper()}")
            if raw:
                values[name] = raw
        return cls.model_validate(values)

    def to_config_options(self) -> ConfigOptions:
        client_options: list[Option[ClientConfig]] = []
        if self.timeout is not None:
            client_options.append(with_client_timeout(self.timeout))
        if self.insecure_skip_verify is not None:
            client_options.append(with_default_transport())
            client_options.append(with_insecure_skip_verify(self.insecure_skip_verify))

        static_options: list[Option[StaticRequestConfig]] = []
        if self.url:
            static_options.append(with_url(self.url))
        if self.scheme:
            static_options.append(with_scheme(self.scheme))
        if self.host_port:
            static_options.append(with_host_port(self.host_port))
        if self.user:
            static_options.append(with_basic_auth(self.user, self.password))
        if self.host_header:
            static_options.append(with_host_header(self.host_header))
        if self.headers:
            static_options.append(with_static_headers(self.headers))
        if self.retry_policy == "default":
            static_options.append(with_default_envoy_retry_policy())
        elif self.retry_policy is not None:
            static_options.append(with_envoy_retry_policy(self.retry_policy.to_policy()))

        runtime_options: list[Option[RuntimeRequestConfig]] = []
        if self.method:
            runtime_options.append(with_method(self.method))
        if self.path:
            runtime_options.append(with_path(self.path))
        if self.query:
            runtime_options.append(with_query_params(self.query))

        return ConfigOptions(
            client_options=tuple(client_options),
            static_request_options=tuple(static_options),
            runtime_request_options=tuple(runtime_options),
        )
