"""FastAPI application exposing the channel directory.

Routes
------
``GET /channel/{name}.tar.xz``
    307 to a presigned URL of the channel's latest tarball, with a
    ``Link: <base>/permanent/<id>.tar.xz>; rel="immutable"`` header.
``GET /permanent/{id}.tar.xz``
    307 to a presigned URL of that tarball.

Errors are rendered as ``{"error": code, "message": message}`` using only
the caller-safe message.  Authentication failures are a bare 401.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

import s3channel
from s3channel.core.auth import JwtGate
from s3channel.core.errors import ChannelServiceError
from s3channel.core.refresher import ConfigRefresher
from s3channel.core.resolver import ChannelResolver, Redirect

logger = logging.getLogger(__name__)


def _redirect_response(redirect: Redirect) -> RedirectResponse:
    return RedirectResponse(
        redirect.location,
        status_code=307,
        headers=redirect.headers(),
    )


def create_app(
    resolver: ChannelResolver,
    *,
    refresher: ConfigRefresher | None = None,
    gate: JwtGate | None = None,
) -> FastAPI:
    """Build the HTTP app around an already loaded directory.

    Parameters
    ----------
    resolver:
        Resolves requests against the live configuration snapshot.
    refresher:
        Started on application startup and stopped on shutdown, if given.
    gate:
        When given, every request must carry a valid JWT.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if refresher is not None:
            refresher.start()
        try:
            yield
        finally:
            if refresher is not None:
                await refresher.stop()

    app = FastAPI(
        title="s3-nix-channel",
        version=s3channel.__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.resolver = resolver

    @app.exception_handler(ChannelServiceError)
    async def _service_error(_request: Request, exc: ChannelServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc)
        else:
            logger.debug("Request rejected: %s", exc)
        return JSONResponse(
            {"error": exc.code, "message": exc.public_message},
            status_code=exc.status_code,
        )

    @app.get("/channel/{path:path}")
    async def handle_channel(path: str) -> RedirectResponse:
        """Redirect to the latest tarball of the requested channel."""
        return _redirect_response(await resolver.resolve_channel(path))

    @app.get("/permanent/{path:path}")
    async def handle_permanent(path: str) -> RedirectResponse:
        """Forward a request to the backing store."""
        return _redirect_response(await resolver.resolve_permanent(path))

    if gate is not None:

        @app.middleware("http")
        async def auth_middleware(request: Request, call_next) -> Response:
            if not await asyncio.to_thread(gate.check, request.headers):
                return Response(status_code=401)
            return await call_next(request)

    # Registered last so it wraps the auth middleware and logs its rejections.
    @app.middleware("http")
    async def log_request_middleware(request: Request, call_next) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request: %s %s -> %d (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            time.perf_counter() - start,
        )
        return response

    return app


def run_server(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 3000,
    log_level: str = "info",
) -> None:
    """Serve *app* through uvicorn until interrupted."""
    logger.info("Listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
