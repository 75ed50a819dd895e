"""HTTP transport and security middleware."""

from __future__ import annotations

import re
import secrets
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.datastructures import Headers
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from quicknav.config import Settings

log = structlog.get_logger()

_LOCALHOST_ORIGIN = re.compile(r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$")


class SecurityMiddleware:
    """Pure ASGI middleware for HTTP transport security.

    Enforces two checks on every HTTP request:
    1. Optional bearer key authentication (the host platform holds the key).
    2. Origin validation: localhost plus any configured admin origins.

    Implemented as pure ASGI (not BaseHTTPMiddleware) so responses are never
    buffered by the middleware layer.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        auth_enabled: bool,
        auth_key: str | None = None,
        allowed_origins: frozenset[str] = frozenset(),
    ) -> None:
        self.app = app
        self.auth_enabled = auth_enabled
        self.auth_key = auth_key
        self.allowed_origins = allowed_origins

    def _origin_allowed(self, origin: str) -> bool:
        return origin in self.allowed_origins or bool(_LOCALHOST_ORIGIN.match(origin))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            headers = Headers(scope=scope)

            # 1. Optional bearer key authentication
            if self.auth_enabled:
                auth_header = headers.get("authorization", "")
                if not auth_header.startswith("Bearer ") or auth_header[7:] != self.auth_key:
                    await Response("Unauthorized", status_code=401)(scope, receive, send)
                    return

            # 2. Origin validation — prevents DNS rebinding attacks
            origin = headers.get("origin", "")
            if origin and not self._origin_allowed(origin):
                await Response("Forbidden", status_code=403)(scope, receive, send)
                return

        await self.app(scope, receive, send)


def secure_app(app: ASGIApp, settings: Settings) -> SecurityMiddleware:
    """Wrap ``app`` in SecurityMiddleware, generating a key if auth has none."""
    http_log = log.bind(transport="http")

    auth_key: str | None = settings.server.auth_key or None

    if settings.server.auth_enabled and not auth_key:
        auth_key = secrets.token_urlsafe(32)
        http_log.warning("http_auth_key_auto_generated", auth_key=auth_key)

    if not settings.server.auth_enabled:
        http_log.warning("http_auth_disabled")

    return SecurityMiddleware(
        app,
        auth_enabled=settings.server.auth_enabled,
        auth_key=auth_key,
        allowed_origins=frozenset(settings.server.allowed_origins),
    )


def run_http_server(app: ASGIApp, settings: Settings) -> None:
    """Serve ``app`` behind SecurityMiddleware with uvicorn."""
    uvicorn.run(
        secure_app(app, settings),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )
