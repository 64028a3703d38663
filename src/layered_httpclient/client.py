"""Synchronous and asynchronous request clients."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Iterable, TypeVar

import httpx

from .config import (
    ClientConfig,
    Config,
    ConfigOptions,
    Option,
    RuntimeRequestConfig,
    TransportSettings,
    apply_options,
    new_config,
)
from .destinations import ResponseDestination
from .exceptions import (
    HTTPClientConfigConflictError,
    HTTPClientConfigError,
    HTTPClientConstructionError,
    HTTPClientStatusError,
)
from .security import redact_url, sanitize_headers
from .urls import build_url


logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound="_BaseHTTPClient")


def _require_destination(runtime: RuntimeRequestConfig) -> ResponseDestination:
    if runtime.response is None:
        raise HTTPClientConfigError("no response destination given")
    return runtime.response


class _BaseHTTPClient:
    """Holds the static and baseline runtime tiers fixed at construction.

    Both are frozen values and every call folds its own options onto a new
    runtime value, so concurrent ``send`` calls never share merged state.
    """

    _client_type: type = httpx.Client
    _transport_type: type = httpx.BaseTransport
    _transport_builder: Callable[[TransportSettings], Any] = staticmethod(TransportSettings.build)

    def __init__(self, config: Config) -> None:
        client_config = config.client_config
        if client_config.client is not None and client_config.transport is not None:
            raise HTTPClientConfigConflictError("cannot set both client and transport")
        self._static = config.static_request_config
        self._runtime = config.runtime_request_config
        self._owns_client = client_config.client is None
        # A caller-supplied httpx client keeps its own timeout policy.
        self._call_timeout = client_config.timeout if self._owns_client else None
        self._httpx = client_config.client if client_config.client is not None else self._build_client(client_config)
        if not isinstance(self._httpx, self._client_type):
            raise HTTPClientConstructionError(
                f"{type(self).__name__} requires an {self._client_type.__name__}, got {type(self._httpx).__name__}"
            )
        logger.debug(
            "built %s for %s://%s (owns client: %s)",
            type(self).__name__,
            self._static.scheme,
            self._static.host,
            self._owns_client,
        )

    @classmethod
    def from_options(cls: type[ClientT], options: ConfigOptions) -> ClientT:
        return cls(new_config(options))

    def _build_client(self, client_config: ClientConfig) -> Any:
        transport = client_config.transport if client_config.transport is not None else TransportSettings()
        if isinstance(transport, TransportSettings):
            timeout = transport.timeout(client_config.timeout)
            try:
                transport = self._transport_builder(transport)
            except OSError as exc:
                raise HTTPClientConstructionError("failed to build transport", cause=exc) from exc
        else:
            if not isinstance(transport, self._transport_type):
                raise HTTPClientConstructionError(
                    f"{type(self).__name__} requires an {self._transport_type.__name__}, got {type(transport).__name__}"
                )
            timeout = httpx.Timeout(client_config.timeout)
        return self._client_type(transport=transport, timeout=timeout, trust_env=False)

    def _budget(self, timeout: float | None) -> float | None:
        """Seconds allowed for the whole call: connect, headers and body."""
        if timeout is None:
            return self._call_timeout
        if timeout <= 0:
            raise HTTPClientConfigError("timeout must be greater than 0")
        return float(timeout)

    def _merge_runtime(self, options: Iterable[Option[RuntimeRequestConfig]]) -> RuntimeRequestConfig:
        return apply_options(self._runtime, options)

    def _headers(self, runtime: RuntimeRequestConfig) -> httpx.Headers:
        merged = self._static.headers.copy()
        merged.update(runtime.headers)
        return merged

    def _build_request(self, runtime: RuntimeRequestConfig, timeout: float | None) -> httpx.Request:
        url = build_url(self._static, runtime)
        request = self._httpx.build_request(
            runtime.method,
            url,
            headers=self._headers(runtime),
            content=runtime.body,
            timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else httpx.Timeout(timeout),
        )
        logger.debug(
            "sending %s %s headers=%s",
            request.method,
            redact_url(url),
            sanitize_headers(request.headers),
        )
        return request

    @staticmethod
    def _deadline_exceeded(request: httpx.Request, budget: float) -> httpx.ReadTimeout:
        return httpx.ReadTimeout(f"call did not complete within {budget}s", request=request)

    @staticmethod
    def _dispatch(response: httpx.Response, body: bytes, destination: ResponseDestination) -> Any:
        logger.debug("received %s from %s", response.status_code, redact_url(str(response.request.url)))
        if response.status_code != httpx.codes.OK:
            raise HTTPClientStatusError(
                f"not ok status code: {response.status_code}",
                status_code=response.status_code,
                body=body,
                headers=response.headers,
            )
        return destination.deliver(body)


class HTTPClient(_BaseHTTPClient):
    """Blocking client: one ``send`` call is one request."""

    _client_type = httpx.Client
    _transport_type = httpx.BaseTransport
    _transport_builder = staticmethod(TransportSettings.build)

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._httpx.close()

    def send(self, *options: Option[RuntimeRequestConfig], timeout: float | None = None) -> Any:
        """Merge ``options`` onto the baseline runtime config and send the request.

        ``timeout`` bounds the whole call, body read included; it defaults to
        the client timeout. Returns the decoded value for a JSON destination,
        ``None`` for a body sink. Transport errors from httpx propagate
        unchanged, and an exceeded deadline raises ``httpx.ReadTimeout``.
        """
        runtime = self._merge_runtime(options)
        destination = _require_destination(runtime)
        budget = self._budget(timeout)
        request = self._build_request(runtime, timeout)
        deadline = None if budget is None else time.monotonic() + budget
        response = self._httpx.send(request, stream=True)
        try:
            chunks: list[bytes] = []
            for chunk in response.iter_bytes():
                if deadline is not None and time.monotonic() > deadline:
                    raise self._deadline_exceeded(request, budget)
                chunks.append(chunk)
            if deadline is not None and time.monotonic() > deadline:
                raise self._deadline_exceeded(request, budget)
        finally:
            response.close()
        return self._dispatch(response, b"".join(chunks), destination)


class AsyncHTTPClient(_BaseHTTPClient):
    """Asyncio client; cancelling the awaiting task aborts the request."""

    _client_type = httpx.AsyncClient
    _transport_type = httpx.AsyncBaseTransport
    _transport_builder = staticmethod(TransportSettings.build_async)

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._httpx.aclose()

    async def _fetch(self, request: httpx.Request) -> tuple[httpx.Response, bytes]:
        response = await self._httpx.send(request, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()
        return response, body

    async def send(self, *options: Option[RuntimeRequestConfig], timeout: float | None = None) -> Any:
        runtime = self._merge_runtime(options)
        destination = _require_destination(runtime)
        budget = self._budget(timeout)
        request = self._build_request(runtime, timeout)
        try:
            response, body = await asyncio.wait_for(self._fetch(request), timeout=budget)
        except asyncio.TimeoutError as exc:
            raise self._deadline_exceeded(request, budget) from exc
        return self._dispatch(response, body, destination)
