"""Envoy retry policy: validation and encoding into proxy headers.

Nothing here retries anything. The policy is translated into the
``x-envoy-*`` request headers and the upstream Envoy proxy performs the
retries on the client's behalf.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Sequence

from .exceptions import HTTPClientValidationError
from .strings import join


MAX_RETRIES_HEADER = "x-envoy-max-retries"
TOTAL_TIMEOUT_HEADER = "x-envoy-upstream-rq-timeout-ms"
PER_TRY_TIMEOUT_HEADER = "x-envoy-upstream-rq-per-try-timeout-ms"
RETRIABLE_STATUS_CODES_HEADER = "x-envoy-retriable-status-codes"
RETRIABLE_HEADERS_HEADER = "x-envoy-retriable-headers"
RETRY_ON_HEADER = "x-envoy-retry-on"

MAX_RETRIES_LIMIT = 65535

_MILLISECOND = timedelta(milliseconds=1)


class RetryOn(str, Enum):
    """Conditions accepted by Envoy's ``x-envoy-retry-on`` header."""

    FIVE_XX = "5xx"
    GATEWAY_ERROR = "gateway-error"
    RESET = "reset"
    CONNECT_FAILURE = "connect-failure"
    ENVOY_RATELIMITED = "envoy-ratelimited"
    RETRIABLE_4XX = "retriable-4xx"
    REFUSED_STREAM = "refused-stream"
    HTTP3_POST_CONNECT_FAILURE = "http3-post-connect-failure"
    # Only meaningful together with retriable_status_codes / retriable_headers.
    RETRIABLE_STATUS_CODES = "retriable-status-codes"
    RETRIABLE_HEADERS = "retriable-headers"


@dataclass(frozen=True)
class EnvoyRetryPolicy:
    max_retries: int = 0
    total_timeout: timedelta = timedelta(0)
    per_try_timeout: timedelta = timedelta(0)
    retry_on: Sequence[RetryOn] = field(default_factory=tuple)
    retriable_status_codes: Sequence[int] = field(default_factory=tuple)
    retriable_headers: Sequence[str] = field(default_factory=tuple)


def default_envoy_retry_policy() -> EnvoyRetryPolicy:
    return EnvoyRetryPolicy(
        max_retries=3,
        total_timeout=timedelta(seconds=31),
        per_try_timeout=timedelta(seconds=10),
        retry_on=(
            RetryOn.CONNECT_FAILURE,
            RetryOn.ENVOY_RATELIMITED,
            RetryOn.RETRIABLE_4XX,
            RetryOn.REFUSED_STREAM,
            RetryOn.RETRIABLE_STATUS_CODES,
        ),
        retriable_status_codes=(429, 502, 503),
    )


def _milliseconds(value: timedelta) -> int:
    return value // _MILLISECOND


def validate_envoy_retry_policy(policy: EnvoyRetryPolicy) -> None:
    """Check the policy is internally consistent.

    Timeouts are compared at millisecond resolution, the resolution of the
    headers they end up in.
    """
    if policy.max_retries < 0 or policy.max_retries > MAX_RETRIES_LIMIT:
        raise HTTPClientValidationError(f"max_retries must be within 0-{MAX_RETRIES_LIMIT}, got {policy.max_retries}")
    total = _milliseconds(policy.total_timeout)
    per_try = _milliseconds(policy.per_try_timeout)
    if total < 0 or per_try < 0:
        raise HTTPClientValidationError(f"timeouts must not be negative: total={total}ms per_try={per_try}ms")
    if policy.max_retries > 0 and (total == 0 or per_try == 0):
        raise HTTPClientValidationError(
            f"max_retries is set but total_timeout ({total}ms) or per_try_timeout ({per_try}ms) is not set"
        )
    if total < per_try:
        raise HTTPClientValidationError(f"total_timeout ({total}ms) is less than per_try_timeout ({per_try}ms)")
    if total < (per_try + 1) * policy.max_retries:
        raise HTTPClientValidationError(
            f"total_timeout ({total}ms) is less than (per_try_timeout ({per_try}ms) + 1) * max_retries ({policy.max_retries})"
        )
    for status_code in policy.retriable_status_codes:
        if status_code < 100 or status_code > 599:
            raise HTTPClientValidationError(f"invalid status code {status_code} in retriable_status_codes")
    for header in policy.retriable_headers:
        if not header:
            raise HTTPClientValidationError("empty header name in retriable_headers")
    for condition in policy.retry_on:
        try:
            RetryOn(condition)
        except ValueError as exc:
            raise HTTPClientValidationError(f"unknown retry_on condition {condition!r}") from exc


def encode_envoy_retry_policy(policy: EnvoyRetryPolicy) -> dict[str, str]:
    """Validate ``policy`` and return the headers that carry it.

    List values keep their input order; nothing is sorted or de-duplicated.
    """
    validate_envoy_retry_policy(policy)
    headers = {MAX_RETRIES_HEADER: str(policy.max_retries)}
    total = _milliseconds(policy.total_timeout)
    per_try = _milliseconds(policy.per_try_timeout)
    if total > 0:
        headers[TOTAL_TIMEOUT_HEADER] = str(total)
    if per_try > 0:
        headers[PER_TRY_TIMEOUT_HEADER] = str(per_try)
    if policy.retriable_status_codes:
        headers[RETRIABLE_STATUS_CODES_HEADER] = join(policy.retriable_status_codes, ",")
    if policy.retriable_headers:
        headers[RETRIABLE_HEADERS_HEADER] = join(policy.retriable_headers, ",")
    if policy.retry_on:
        headers[RETRY_ON_HEADER] = join(policy.retry_on, ",")
    return headers
