"""Small string helpers shared by the header encoders."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


def to_strings(values: Iterable[object]) -> list[str]:
    """Render each value as text, using the value of enum members."""
    rendered: list[str] = []
    for value in values:
        if isinstance(value, Enum):
            value = value.value
        rendered.append(str(value))
    return rendered


def join(values: Iterable[object], sep: str) -> str:
    return sep.join(to_strings(values))
