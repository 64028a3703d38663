"""Where a successful response body goes.

A runtime config holds at most one destination: either a JSON target type
that the body is validated against, or a writable binary sink that receives
the body verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Union

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from .exceptions import HTTPClientDecodeError, HTTPClientValidationError


@dataclass(frozen=True)
class JSONDestination:
    target: Any = Any
    adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            adapter = TypeAdapter(self.target)
        except PydanticSchemaGenerationError as exc:
            raise HTTPClientValidationError(f"cannot decode JSON into {self.target!r}", cause=exc) from exc
        object.__setattr__(self, "adapter", adapter)

    def deliver(self, body: bytes) -> Any:
        try:
            return self.adapter.validate_json(body)
        except ValidationError as exc:
            raise HTTPClientDecodeError(
                "response body is not valid JSON for the requested type",
                body=body,
                cause=exc,
            ) from exc


@dataclass(frozen=True)
class BodyDestination:
    sink: BinaryIO

    def deliver(self, body: bytes) -> None:
        self.sink.write(body)


ResponseDestination = Union[JSONDestination, BodyDestination]
