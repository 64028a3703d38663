"""Three-tier request configuration and the option fold that builds it.

``ClientConfig`` describes the connection, ``StaticRequestConfig`` the
endpoint (fixed when a client is built) and ``RuntimeRequestConfig`` a single
call. Each tier is a frozen dataclass; options never mutate the value they
receive, they return a new one with copied header and query containers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Generic, Iterable, Mapping, Sequence, TypeVar

import httpx

from .destinations import ResponseDestination


logger = logging.getLogger(__name__)

DEFAULT_MAX_IDLE_CONNS_PER_HOST = 10
DEFAULT_IDLE_CONN_TIMEOUT = 10.0
DEFAULT_DIAL_TIMEOUT = 2.0
DEFAULT_TLS_HANDSHAKE_TIMEOUT = 5.0
DEFAULT_TIMEOUT = 2.0

T = TypeVar("T")


@dataclass(frozen=True)
class Option(Generic[T]):
    """A named transformation of one configuration tier.

    ``apply`` returns the updated tier value or raises an
    :class:`~layered_httpclient.exceptions.HTTPClientError`.
    """

    name: str
    func: Callable[[T], T] = field(repr=False)

    def apply(self, config: T) -> T:
        return self.func(config)


def apply_options(initial: T, options: Iterable[Option[T]]) -> T:
    """Fold ``options`` over ``initial`` left to right.

    The first failing option's error propagates and the partially folded value
    is dropped. ``initial`` itself is never modified.
    """
    result = initial
    for option in options:
        logger.debug("applying option %s", option.name)
        result = option.apply(result)
    return result


@dataclass(frozen=True)
class TransportSettings:
    """Declarative description of the default pooled transport.

    httpx has no per-host connection limit; ``max_idle_conns_per_host`` caps
    the keep-alive connections of the whole pool.
    """

    max_idle_conns_per_host: int = DEFAULT_MAX_IDLE_CONNS_PER_HOST
    idle_conn_timeout: float = DEFAULT_IDLE_CONN_TIMEOUT
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT
    tls_handshake_timeout: float = DEFAULT_TLS_HANDSHAKE_TIMEOUT
    verify: bool = True

    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_keepalive_connections=self.max_idle_conns_per_host,
            keepalive_expiry=self.idle_conn_timeout,
        )

    def timeout(self, call_timeout: float) -> httpx.Timeout:
        # httpx has a single connect phase covering both TCP and TLS.
        return httpx.Timeout(call_timeout, connect=self.dial_timeout + self.tls_handshake_timeout)

    def build(self) -> httpx.HTTPTransport:
        return httpx.HTTPTransport(verify=self.verify, limits=self.limits())

    def build_async(self) -> httpx.AsyncHTTPTransport:
        return httpx.AsyncHTTPTransport(verify=self.verify, limits=self.limits())


Transport = TransportSettings | httpx.BaseTransport | httpx.AsyncBaseTransport
PrebuiltClient = httpx.Client | httpx.AsyncClient


@dataclass(frozen=True)
class ClientConfig:
    transport: Transport | None = None
    client: PrebuiltClient | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class StaticRequestConfig:
    scheme: str = ""
    user: str = ""
    password: str = ""
    host: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    def with_headers(self, updates: Mapping[str, str]) -> "StaticRequestConfig":
        headers = self.headers.copy()
        headers.update(updates)
        return replace(self, headers=headers)


@dataclass(frozen=True)
class RuntimeRequestConfig:
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes | None = None
    response: ResponseDestination | None = None
    method: str = "GET"
    path: str = ""
    query: Mapping[str, str] = field(default_factory=dict)

    def with_headers(self, updates: Mapping[str, str]) -> "RuntimeRequestConfig":
        headers = self.headers.copy()
        headers.update(updates)
        return replace(self, headers=headers)

    def with_query(self, updates: Mapping[str, str]) -> "RuntimeRequestConfig":
        query = dict(self.query)
        query.update(updates)
        return replace(self, query=query)


@dataclass(frozen=True)
class Config:
    client_config: ClientConfig = field(default_factory=ClientConfig)
    static_request_config: StaticRequestConfig = field(default_factory=StaticRequestConfig)
    runtime_request_config: RuntimeRequestConfig = field(default_factory=RuntimeRequestConfig)


@dataclass(frozen=True)
class ConfigOptions:
    client_options: Sequence[Option[ClientConfig]] = ()
    static_request_options: Sequence[Option[StaticRequestConfig]] = ()
    runtime_request_options: Sequence[Option[RuntimeRequestConfig]] = ()


def new_config(options: ConfigOptions) -> Config:
    """Apply client, static and runtime options, in that order."""
    return Config(
        client_config=apply_options(ClientConfig(), options.client_options),
        static_request_config=apply_options(StaticRequestConfig(), options.static_request_options),
        runtime_request_config=apply_options(RuntimeRequestConfig(), options.runtime_request_options),
    )
