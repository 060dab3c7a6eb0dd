"""
HTTP ingress: POST /events/{event_name} with the raw message body -> Registry.dispatch.
Error envelope: {"error": {"code": "...", "message": "..."}}.
"""
from __future__ import annotations

from typing import Any, Callable

import structlog
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from eventroute.events.errors import DecodeError, EmptyNameError, NoHandlerError
from eventroute.events.registry import Registry

logger = structlog.get_logger(__name__)


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse({"error": {"code": code, "message": message}}, status_code=status)


def _make_dispatch_endpoint(registry: Registry) -> Callable:
    async def endpoint(request: Request) -> Response:
        event_name = request.path_params["event_name"]
        body = await request.body()
        try:
            # handlers are synchronous; keep them off the event loop
            await run_in_threadpool(registry.dispatch, event_name, body)
        except EmptyNameError as e:
            return _error(400, "EMPTY_NAME", str(e))
        except NoHandlerError as e:
            return _error(404, "NO_HANDLER", str(e))
        except DecodeError as e:
            return _error(422, "DECODE_ERROR", str(e))
        except Exception as e:
            logger.error(
                "handler_failed",
                event_name=event_name,
                error_type=type(e).__name__,
                error=str(e),
            )
            return _error(500, "HANDLER_ERROR", str(e))
        return JSONResponse({"ok": True}, status_code=202)

    return endpoint


def _make_names_endpoint(registry: Registry) -> Callable:
    async def endpoint(request: Request) -> Response:
        return JSONResponse({"events": registry.names()})

    return endpoint


def create_ingress(registry: Registry, *, path: str = "/events", **starlette_kwargs: Any) -> Starlette:
    """Starlette app serving GET {path} (registered names) and POST {path}/{event_name}."""
    base = "/" + path.strip("/")
    routes = [
        Route(base, _make_names_endpoint(registry), methods=["GET"]),
        Route(base + "/{event_name:path}", _make_dispatch_endpoint(registry), methods=["POST"]),
    ]
    return Starlette(routes=routes, **starlette_kwargs)
