"""HTTP routes.

Handlers resolve the acting principal from the request, call into the index
core, and shape JSON responses. No index logic lives here.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from quicknav import __version__
from quicknav.errors import ErrorCode, QuickNavError
from quicknav.models.hooks import ContentUpdatedEvent, StatusTransitionEvent

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import Lifespan

    from quicknav.state import AppState

    Handler = Callable[[Request, AppState], Awaitable[Response]]

log = structlog.get_logger()

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.STORE_UNAVAILABLE: 503,
    ErrorCode.CONTENT_SOURCE_UNAVAILABLE: 503,
}


def _endpoint(name: str) -> Callable[[Handler], Callable[[Request], Awaitable[Response]]]:
    """Inject AppState and serialise QuickNavError into the error envelope."""

    def decorator(handler: Handler) -> Callable[[Request], Awaitable[Response]]:
        @functools.wraps(handler)
        async def wrapper(request: Request) -> Response:
            state: AppState = request.app.state.quicknav
            try:
                return await handler(request, state)
            except QuickNavError as exc:
                log.warning(
                    "request_error",
                    endpoint=name,
                    code=exc.code,
                    message=exc.message,
                    recoverable=exc.recoverable,
                )
                return JSONResponse(exc.to_dict(), status_code=_STATUS_BY_CODE[exc.code])
            except Exception:
                log.error("request_unexpected_error", endpoint=name, exc_info=True)
                raise

        return wrapper

    return decorator


def _principal_id(request: Request, state: AppState) -> str:
    header = state.settings.server.principal_header
    principal_id = request.headers.get(header, "").strip()
    if not principal_id:
        raise QuickNavError(
            code=ErrorCode.UNAUTHORIZED,
            message="Request does not identify a principal.",
            suggestion=f"Send the acting user's id in the {header} header.",
        )
    return principal_id


async def _reader_id(request: Request, state: AppState) -> str:
    """Return the principal id, requiring the baseline read capability."""
    principal_id = _principal_id(request, state)
    if not await state.source.can_read(principal_id):
        raise QuickNavError(
            code=ErrorCode.FORBIDDEN,
            message=f"Principal '{principal_id}' cannot read content.",
            suggestion="Grant the principal the 'read' capability on the host platform.",
        )
    return principal_id


async def _json_body(request: Request) -> object:
    try:
        return await request.json()
    except ValueError as exc:
        raise QuickNavError(
            code=ErrorCode.INVALID_INPUT,
            message="Request body is not valid JSON.",
            suggestion="Send a JSON object body with Content-Type: application/json.",
        ) from exc


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@_endpoint("content_index")
async def content_index(request: Request, state: AppState) -> Response:
    """Serve the principal's index.

    Every principal who can read gets a response; items they may not edit
    are left out of the index rather than refused.
    """
    principal_id = await _reader_id(request, state)
    items = await state.controller.get_index(principal_id)
    return JSONResponse([item.model_dump(mode="json") for item in items])


@_endpoint("client_options")
async def client_options(request: Request, state: AppState) -> Response:
    principal_id = await _reader_id(request, state)
    navigation = state.settings.navigation
    return JSONResponse(
        {
            "search-results-limit": navigation.search_results_limit,
            "shortcuts": {
                name: shortcut.model_dump(mode="json")
                for name, shortcut in navigation.shortcuts.items()
            },
            "plugin_version": __version__,
            "user_db_version": await state.controller.get_build_timestamp(principal_id),
            "root_url": state.settings.server.root_url,
        }
    )


# ---------------------------------------------------------------------------
# Mutation hooks (called by the host platform)
# ---------------------------------------------------------------------------


@_endpoint("content_updated")
async def content_updated(request: Request, state: AppState) -> Response:
    principal_id = _principal_id(request, state)
    try:
        event = ContentUpdatedEvent.model_validate(await _json_body(request))
    except ValueError as exc:
        raise QuickNavError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion='Provide {"before": {"title": ...}, "after": {"title": ...}}.',
        ) from exc

    invalidated = await state.trigger.on_content_updated(event.before, event.after, principal_id)
    return JSONResponse({"invalidated": invalidated})


@_endpoint("status_transition")
async def status_transition(request: Request, state: AppState) -> Response:
    principal_id = _principal_id(request, state)
    try:
        event = StatusTransitionEvent.model_validate(await _json_body(request))
    except ValueError as exc:
        raise QuickNavError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion='Provide {"old_status": ..., "new_status": ...}.',
        ) from exc

    invalidated = await state.trigger.on_content_status_transition(
        event.old_status, event.new_status, principal_id, item_id=event.item_id
    )
    return JSONResponse({"invalidated": invalidated})


def create_app(
    *,
    state: AppState | None = None,
    api_prefix: str = "/quick-navigation-interface/v1",
    lifespan: Lifespan[Starlette] | None = None,
) -> Starlette:
    """Build the Starlette application.

    Pass ``state`` directly when the caller owns the resources (tests);
    otherwise ``lifespan`` is expected to set ``app.state.quicknav``.
    """
    routes = [
        Route("/content-index/", content_index, methods=["GET"]),
        Route("/client-options/", client_options, methods=["GET"]),
        Route("/hooks/content-updated", content_updated, methods=["POST"]),
        Route("/hooks/status-transition", status_transition, methods=["POST"]),
    ]
    app = Starlette(routes=[Mount(api_prefix, routes=routes)], lifespan=lifespan)
    if state is not None:
        app.state.quicknav = state
    return app
