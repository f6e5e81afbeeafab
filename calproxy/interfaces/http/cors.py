"""Permissive cross-origin policy applied to every response."""

from typing import Sequence

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Adds fixed CORS headers and answers every preflight with 204.

    Unlike Starlette's ``CORSMiddleware`` the headers do not depend on the
    request carrying an ``Origin`` header, and ``OPTIONS`` never reaches
    routing.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Sequence[str] = ("*",),
        allow_methods: Sequence[str] = ("GET", "OPTIONS"),
        allow_headers: Sequence[str] = ("Content-Type",),
    ) -> None:
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": ", ".join(allow_origins),
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
        }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(self.headers)
        return response
