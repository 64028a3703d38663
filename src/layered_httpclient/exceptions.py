"""Exceptions raised by the layered HTTP client."""

from __future__ import annotations

from typing import Mapping


class HTTPClientError(Exception):
    """Base exception for all layered HTTP client failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class HTTPClientConfigError(HTTPClientError):
    """Raised when the request configuration is unusable."""


class HTTPClientConfigConflictError(HTTPClientConfigError):
    """Raised when mutually exclusive settings are both present."""


class HTTPClientValidationError(HTTPClientConfigError):
    """Raised when an option receives a malformed value."""


class HTTPClientConstructionError(HTTPClientError):
    """Raised when the transport or client cannot be built."""


class HTTPClientStatusError(HTTPClientError):
    """Raised for any response status other than 200."""


class HTTPClientDecodeError(HTTPClientError):
    """Raised when a response body cannot be decoded into its destination."""
