"""Response header policy.

Plans are computed, never stored, so responses must not be cached by
browsers or intermediaries, and any origin may read them.
"""

from __future__ import annotations

from typing import Mapping
from types import MappingProxyType


JSON_CONTENT_TYPE = "application/json; charset=utf-8"

CACHE_CONTROL = "Cache-Control"
ALLOW_ORIGIN = "Access-Control-Allow-Origin"

API_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        CACHE_CONTROL: "no-store",
        ALLOW_ORIGIN: "*",
    }
)

