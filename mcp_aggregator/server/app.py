"""HTTP entry point exposing the router as a single JSON-RPC endpoint."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from ..backend import BackendClient
from ..config.models import AggregatorConfig
from ..protocol import EnvelopeDecodeError, RequestEnvelope, parse_error_envelope
from ..routing import AggregatorRouter

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Add the permissive CORS headers to every response.

    Unlike starlette's ``CORSMiddleware`` the headers are sent whether or not
    the request carries an ``Origin``.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        response = await call_next(request)
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response


def create_app(
    config: AggregatorConfig,
    router: Optional[AggregatorRouter] = None,
) -> Starlette:
    """Build the starlette application around a router.

    When no router is given one is created together with its own backend
    client, which is closed on application shutdown.
    """
    client: Optional[BackendClient] = None
    if router is None:
        client = BackendClient(timeout=config.runtime.request_timeout)
        router = AggregatorRouter(config, client)

    async def preflight(request: Request) -> Response:
        return Response(status_code=200)

    async def rpc(request: Request) -> Response:
        body = await request.body()
        try:
            envelope = RequestEnvelope.decode(body)
        except EnvelopeDecodeError as e:
            logger.info(f"Rejected malformed request body: {e}")
            return JSONResponse(parse_error_envelope().encode(), status_code=400)

        response = await router.route(envelope)
        return JSONResponse(response.encode())

    async def status(request: Request) -> Response:
        return JSONResponse(
            {
                "status": "active",
                "servers": {name: b.url for name, b in router.backends.items()},
                "default": router.classifier.default_backend,
                "routing": router.get_stats(),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    async def sse(request: Request) -> Response:
        return PlainTextResponse(f"SSE endpoint for {config.manager.name}")

    async def info(request: Request) -> Response:
        lines = [config.manager.name, "", "This server aggregates multiple MCP servers:"]
        for name, backend in router.backends.items():
            marker = " (default)" if name == router.classifier.default_backend else ""
            lines.append(f"- {name}{marker}: {backend.url}")
        lines += [
            "",
            "Endpoints:",
            "- POST / - MCP JSON-RPC requests",
            "- GET /sse - SSE endpoint for MCP clients",
            "- GET /status - Server status and configuration",
        ]
        return PlainTextResponse("\n".join(lines) + "\n")

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        if client is not None:
            await client.aclose()

    # Any verb not matched above gets the info page.
    routes = [
        Route("/status", status, methods=["GET"]),
        Route("/sse", sse, methods=["GET"]),
        Route("/{path:path}", preflight, methods=["OPTIONS"]),
        Route("/{path:path}", rpc, methods=["POST"]),
        Route("/{path:path}", info),
    ]

    return Starlette(
        routes=routes,
        middleware=[Middleware(CORSHeadersMiddleware)],
        lifespan=lifespan,
    )
