"""Absolute URL construction from the static and runtime tiers."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import quote, urlencode, urlunsplit

from .config import RuntimeRequestConfig, StaticRequestConfig
from .exceptions import HTTPClientValidationError


_USERINFO_SAFE = "!$&'()*+,;=-._~"
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def encode_query(query: Mapping[str, str]) -> str:
    """URL-encode query params sorted by key."""
    return urlencode(sorted(query.items()))


def _userinfo(static: StaticRequestConfig) -> str:
    if not static.user:
        return ""
    userinfo = quote(static.user, safe=_USERINFO_SAFE)
    if static.password:
        userinfo += ":" + quote(static.password, safe=_USERINFO_SAFE)
    return userinfo + "@"


def build_url(static: StaticRequestConfig, runtime: RuntimeRequestConfig) -> str:
    """Return ``scheme://[user[:password]@]host:port/path?query``."""
    if not static.scheme:
        raise HTTPClientValidationError("scheme is not set")
    if not static.host:
        raise HTTPClientValidationError("host is not set")
    netloc = _userinfo(static) + static.host
    path = quote(runtime.path, safe=_PATH_SAFE)
    return urlunsplit((static.scheme, netloc, path, encode_query(runtime.query), ""))
