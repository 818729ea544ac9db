"""HTTP service around the timestamp engine.

Routes:
  - GET /api?name=<FOLDER>          one plan
  - GET <anything>/api?name=...     same, for deployments under a sub-path
  - GET /api/order?name=A&name=B    many plans, newest -> oldest
  - GET / and /healthz              liveness

Requests never surface as framework 500s; the middleware guard converts
unexpected exceptions into the ``ok: false`` envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, Response
from starlette.middleware.cors import CORSMiddleware

from . import __version__
from .clock import base_instant, epoch_millis
from .config import EngineConfig, config_from_env
from .debug import debug_enabled
from .engine import lex_fraction, order_names, plan, stable_hash01
from .errors import MISSING_NAME, UNEXPECTED_ERROR, error_details
from .models import Plan
from .responses import ApiJSONResponse, fail, ok


log = logging.getLogger("sas_timestamps.server")


def _debug_payload(result: Plan, config: EngineConfig) -> dict[str, Any]:
    return {
        "fraction": lex_fraction(result.payload_used),
        "nudge": stable_hash01(result.effective_name),
        "baseEpochMillis": epoch_millis(base_instant(config)),
    }


def _plan_payload(result: Plan, config: EngineConfig) -> dict[str, Any]:
    payload = result.as_dict()
    if debug_enabled():
        payload["debug"] = _debug_payload(result, config)
    return payload


def create_app(config: EngineConfig | None = None) -> FastAPI:
    app = FastAPI(
        title="SAS Timestamps",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        default_response_class=ApiJSONResponse,
    )

    # Tables are immutable; built once and shared by all requests.
    app.state.config = config if config is not None else config_from_env()  # type: ignore[attr-defined]

    # Catalog front-ends fetch from other origins; preflight is handled here.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _exception_guard(request: Request, call_next):
        """Ensure unexpected exceptions never escape as framework 500s."""

        try:
            response: Response = await call_next(request)
            return response
        except Exception as exc:  # noqa: BLE001
            log.exception("unhandled error for %s %s", request.method, request.url.path)
            details = error_details(exc) if debug_enabled() else None
            return ApiJSONResponse(fail(UNEXPECTED_ERROR, details=details), status_code=200)

    @app.get("/")
    async def root():
        return ok({"status": "ok"})

    @app.get("/healthz")
    async def healthz():
        return ok({"status": "ok"})

    @app.get("/api/order")
    async def api_order(request: Request):
        names = [n for n in request.query_params.getlist("name") if n]
        if not names:
            log.info("%s: %s %s", MISSING_NAME.code, request.method, request.url.path)
            return fail(MISSING_NAME)

        cfg: EngineConfig = request.app.state.config
        plans = order_names(names, cfg)
        return ok({"count": len(plans), "items": [_plan_payload(p, cfg) for p in plans]})

    async def api_plan(request: Request):
        name = request.query_params.get("name") or ""
        if not name:
            log.info("%s: %s %s", MISSING_NAME.code, request.method, request.url.path)
            return fail(MISSING_NAME)

        cfg: EngineConfig = request.app.state.config
        return ok(_plan_payload(plan(name, cfg), cfg))

    app.add_api_route("/api", api_plan, methods=["GET"])
    # Deployments served from a sub-path (e.g. /<repo>/api).
    app.add_api_route("/{prefix:path}/api", api_plan, methods=["GET"])

    return app
