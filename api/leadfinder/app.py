"""FastAPI application for the lead finder service.

Run:
    uv run uvicorn api.leadfinder.app:app --reload --port 3000
    uv run python main.py
"""

import logging
from typing import Optional

logging.basicConfig(level=logging.INFO)

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.leadfinder.routes import router as api_router
from services.leadfinder.config import get_config

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


class BodyLimitMiddleware:
    """Reject request bodies larger than max_body_bytes with 413.

    Bytes are counted as they arrive, so chunked uploads without a
    Content-Length are capped as well. The accepted body is replayed
    to the app as a single message.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            await _too_large(scope, receive, send)
            return

        body = bytearray()
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            if len(body) > self.max_body_bytes:
                await _too_large(scope, receive, send)
                return
            more_body = message.get("more_body", False)

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": bytes(body), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


async def _too_large(scope: Scope, receive: Receive, send: Send) -> None:
    response = JSONResponse(
        status_code=413,
        content={"detail": "Request body too large"},
        headers=CORS_HEADERS,
    )
    await response(scope, receive, send)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "Invalid request: " + "; ".join(parts)


def create_app(max_body_bytes: Optional[int] = None) -> FastAPI:
    limit = max_body_bytes if max_body_bytes is not None else get_config().max_body_bytes
    app = FastAPI(title="Lead Finder")

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # 400 instead of FastAPI's default 422
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.middleware("http")
    async def cors(request: Request, call_next):
        # Preflight for any path, answered before routing
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    # Outermost, so oversized bodies never reach routing
    app.add_middleware(BodyLimitMiddleware, max_body_bytes=limit)

    # GET /, POST /api/run, POST /api/places-to-csv
    app.include_router(api_router)
    return app


app = create_app()
