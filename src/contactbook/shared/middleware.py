"""
Request interceptors.

``build_middleware`` returns them in the order they wrap the router, outermost
first: request logging, panic recovery, secure headers, session load/save.
CSRF checks are applied by the dynamic routers themselves
(see ``contactbook.shared.csrf``).
"""

from typing import Any

from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import Response

from contactbook.config import Settings
from contactbook.shared.errors import server_error
from contactbook.shared.logging import (
    REQUEST_ID_HEADER,
    generate_request_id,
    get_logger,
    request_id_var,
)

logger = get_logger(__name__)

STATIC_SUFFIXES = (".css", ".js", ".png", ".jpg", ".jpeg", ".ico")

# Per OWASP secure headers guidance.
# https://owasp.org/www-project-secure-headers/
SECURE_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' fonts.googleapis.com; font-src fonts.gstatic.com"
    ),
    "Referrer-Policy": "origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "deny",
    "X-XSS-Protection": "0",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log it.

    Static asset requests are not logged unless the app runs ``verbose``.
    """

    def __init__(self, app: Any, verbose: bool = False) -> None:
        super().__init__(app)
        self.verbose = verbose

    def _should_skip(self, path: str) -> bool:
        return not self.verbose and path.endswith(STATIC_SUFFIXES)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        token = request_id_var.set(request_id)
        try:
            if not self._should_skip(request.url.path):
                logger.info(
                    "received request",
                    extra={
                        "ip": request.client.host if request.client else None,
                        "protocol": f"HTTP/{request.scope.get('http_version', '1.1')}",
                        "method": request.method,
                        "uri": request.url.path
                        + (f"?{request.url.query}" if request.url.query else ""),
                    },
                )
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RecoverPanicMiddleware(BaseHTTPMiddleware):
    """Turn any unhandled exception into a 500 and close the connection."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            response = server_error(request, exc)
            response.headers["Connection"] = "close"
            return response


class SecureHeadersMiddleware(BaseHTTPMiddleware):
    """Add the OWASP recommended headers to every response."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURE_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def build_middleware(settings: Settings) -> list[Middleware]:
    """Return the interceptor chain, outermost first."""
    return [
        Middleware(RequestLoggingMiddleware, verbose=settings.verbose),
        Middleware(RecoverPanicMiddleware),
        Middleware(SecureHeadersMiddleware),
        Middleware(
            SessionMiddleware,
            secret_key=settings.session_secret,
            session_cookie=settings.session_cookie,
            max_age=int(settings.session_lifetime.total_seconds()),
            same_site="lax",
            https_only=settings.is_production,
        ),
    ]
