"""Response envelope helpers.

Every body is a flat JSON object with an ``ok`` flag:
  - success: ``{"ok": true, ...payload}``
  - failure: ``{"ok": false, "error": "<message>"}``

Failures are still served with HTTP 200; callers branch on ``ok``.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from starlette.background import BackgroundTask
from starlette.responses import JSONResponse

from .errors import ErrorCode
from .headers import API_HEADERS, JSON_CONTENT_TYPE


JsonObject = dict[str, Any]


class ApiJSONResponse(JSONResponse):
    """Pretty-printed JSON with the service's fixed response headers."""

    media_type = JSON_CONTENT_TYPE

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        background: BackgroundTask | None = None,
    ) -> None:
        merged = dict(API_HEADERS)
        if headers:
            merged.update(headers)
        super().__init__(content, status_code=status_code, headers=merged, background=background)

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def ok(payload: Mapping[str, Any] | None = None) -> JsonObject:
    """Build a successful response body."""

    out: JsonObject = {"ok": True}
    if payload:
        out.update(dict(payload))
    return out


def fail(error: ErrorCode, *, message: str | None = None, details: Any | None = None) -> JsonObject:
    """Build a failure response body. ``details`` is included only when given."""

    out: JsonObject = {"ok": False, "error": error.as_error(message=message)}
    if details is not None:
        out["details"] = details
    return out
