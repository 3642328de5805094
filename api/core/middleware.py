"""ASGI middleware: security headers and request context."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import bind_contextvars, clear_contextvars

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000


class SecurityHeadersMiddleware:
    """Adds security headers (CSP, X-Frame-Options, etc.).

    Certificates embed their signature and QR code as data: URIs, and the
    certificate page uses blob: URLs for sharing, so both are allowed for images.
    """

    SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
        (b"x-content-type-options", b"nosniff"),
        (b"x-frame-options", b"DENY"),
        (b"x-xss-protection", b"0"),
        (b"referrer-policy", b"strict-origin-when-cross-origin"),
        (
            b"content-security-policy",
            b"default-src 'self';"
            b" script-src 'self' 'unsafe-inline';"
            b" style-src 'self' 'unsafe-inline';"
            b" img-src 'self' data: blob:;"
            b" connect-src 'self';"
            b" font-src 'self';"
            b" frame-ancestors 'none'",
        ),
        (b"permissions-policy", b"camera=(), microphone=(), geolocation=()"),
    ]

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        is_static = scope.get("path", "").startswith("/static/")

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.extend(self.SECURITY_HEADERS)
                if is_static:
                    headers.append(
                        (b"cache-control", b"public, max-age=31536000, immutable")
                    )
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


class RequestContextMiddleware:
    """Binds a request id into the log context and times each request.

    Emits one ``request.completed`` line for errors and slow requests,
    and returns ``x-request-id`` / ``x-request-duration-ms`` headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = str(uuid.uuid4())
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")

        clear_contextvars()
        bind_contextvars(request_id=request_id)

        response_status: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message.get("type") == "http.response.start":
                response_status = int(message.get("status", 0))
                duration_ms = (time.perf_counter() - start_time) * 1000
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.append(
                    (b"x-request-duration-ms", f"{duration_ms:.2f}".encode())
                )
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            if (
                response_status is None
                or response_status >= 400
                or duration_ms > SLOW_REQUEST_MS
            ):
                logger.info(
                    "request.completed",
                    extra={
                        "http_method": method,
                        "http_path": path,
                        "http_status_code": response_status,
                        "duration_ms": round(duration_ms, 2),
                    },
                )
            clear_contextvars()
