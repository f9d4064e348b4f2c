from __future__ import annotations

import json
import logging
from time import perf_counter
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from shotcoach.services.observability import observability_tracker

logger = logging.getLogger("shotcoach.request")


def _route_path(request: Request) -> str:
    # Group /beans/7/guidance and /beans/8/guidance under the route template.
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template:
        return request.scope.get("root_path", "") + template
    return request.url.path


def _log_request(event: str, request: Request, request_id: str, status_code: int, duration_ms: float) -> None:
    path = _route_path(request)
    observability_tracker.record(
        method=request.method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )

    payload = {
        "event": event,
        "request_id": request_id,
        "method": request.method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }

    if event == "request_error":
        logger.exception(json.dumps(payload))
    elif status_code >= 500:
        logger.error(json.dumps(payload))
    elif status_code >= 400:
        logger.warning(json.dumps(payload))
    else:
        logger.info(json.dumps(payload))


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        started = perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            _log_request("request_error", request, request_id, 500, (perf_counter() - started) * 1000)
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "request_id": request_id},
            )
        else:
            _log_request("request_completed", request, request_id, response.status_code, (perf_counter() - started) * 1000)

        response.headers["X-Request-ID"] = request_id
        return response
