"""JSON HTTP API (aiohttp) plus optional static front-end.

Routes:
    GET  /api/                 health message
    GET  /api/gardens          list garden names
    GET  /api/gardens/{name}   full garden record
    POST /api/gardens          create a garden
    POST /api/chat             journal a message and get advice
    POST /api/analyze          analyze a plant photo
    POST /api/review           run a periodic review
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import asdict
from typing import TYPE_CHECKING

from aiohttp import web

from indigo.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ProviderError,
)

if TYPE_CHECKING:
    from indigo.config import ServerConfig
    from indigo.core import Indigo

logger = logging.getLogger(__name__)

INDIGO_KEY = web.AppKey("indigo", object)


def _indigo(request: web.Request) -> Indigo:
    return request.app[INDIGO_KEY]


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        response = web.Response()
    else:
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            # Router 404/405s are raised rather than returned
            exc.headers.update(CORS_HEADERS)
            raise
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except NotFoundError:
        return web.json_response({"error": "Garden not found"}, status=404)
    except ConflictError as e:
        return web.json_response({"error": e.message}, status=409)
    except (ConfigurationError, ValueError) as e:
        return web.json_response({"error": str(e)}, status=400)
    except ProviderError as e:
        logger.error("Provider error on %s: %s", request.path, e.message)
        return web.json_response({"error": e.message}, status=502)
    except Exception as e:
        logger.exception("Unhandled error on %s", request.path)
        return web.json_response({"error": str(e) or "Internal Server Error"}, status=500)


async def _json_body(request: web.Request, *required: str) -> dict:
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict) or any(not body.get(f) for f in required):
        raise ValueError(f"Missing required fields: {', '.join(required)}")
    return body


# ── Handlers ─────────────────────────────────────────────────


async def handle_root(request: web.Request) -> web.Response:
    return web.json_response({"message": "Indigo API is running"})


async def handle_list_gardens(request: web.Request) -> web.Response:
    return web.json_response({"gardens": _indigo(request).list_gardens()})


async def handle_get_garden(request: web.Request) -> web.Response:
    memory = _indigo(request).get_garden(request.match_info["name"])
    return web.json_response(memory.to_dict())


async def handle_create_garden(request: web.Request) -> web.Response:
    body = await _json_body(request, "name")
    if not isinstance(body["name"], str):
        raise ValueError("Field 'name' must be a string")
    memory = _indigo(request).create_garden(
        body["name"],
        principles=list(body.get("principles") or []),
        location=body.get("location", ""),
        zone=str(body.get("zone", "")),
        style=body.get("style", ""),
    )
    return web.json_response(memory.to_dict(), status=201)


async def handle_chat(request: web.Request) -> web.Response:
    body = await _json_body(request, "message", "gardenName", "provider")
    response = await _indigo(request).chat(body["gardenName"], body["message"], body["provider"])
    return web.json_response({"response": response})


async def handle_analyze(request: web.Request) -> web.Response:
    body = await _json_body(request, "image", "gardenName", "provider")
    analysis = await _indigo(request).analyze(
        body["gardenName"],
        body["image"],
        body["provider"],
        description=body.get("description"),
    )
    return web.json_response({"analysis": analysis})


async def handle_review(request: web.Request) -> web.Response:
    body = await _json_body(request, "gardenName", "period", "provider")
    record = await _indigo(request).review(body["gardenName"], body["period"], body["provider"])
    return web.json_response({"review": asdict(record) if record else None})


# ── App assembly ─────────────────────────────────────────────


def create_app(indigo: Indigo) -> web.Application:
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[INDIGO_KEY] = indigo

    app.router.add_get("/api/", handle_root)
    app.router.add_get("/api/gardens", handle_list_gardens)
    app.router.add_get("/api/gardens/{name}", handle_get_garden)
    app.router.add_post("/api/gardens", handle_create_garden)
    app.router.add_post("/api/chat", handle_chat)
    app.router.add_post("/api/analyze", handle_analyze)
    app.router.add_post("/api/review", handle_review)

    static_dir = indigo.config.server.static_dir
    if static_dir and static_dir.is_dir():
        index = static_dir / "index.html"

        async def handle_index(request: web.Request) -> web.StreamResponse:
            if not index.exists():
                raise web.HTTPNotFound()
            return web.FileResponse(index)

        app.router.add_get("/", handle_index)
        # Registered last so /api/* routes resolve first
        app.router.add_static("/", static_dir)
    return app


class HTTPConnector:
    """Serves the API until SIGINT/SIGTERM."""

    def __init__(self, indigo: Indigo, config: ServerConfig) -> None:
        self._indigo = indigo
        self._config = config
        self._shutdown_event = asyncio.Event()

    @property
    def name(self) -> str:
        return "http"

    def _setup_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down...", sig.name)
        self._shutdown_event.set()

    async def run(self) -> None:
        self._setup_signals()
        runner = web.AppRunner(create_app(self._indigo))
        await runner.setup()
        site = web.TCPSite(runner, self._config.host, self._config.port)
        await site.start()
        logger.info("Indigo running at http://%s:%d", self._config.host, self._config.port)
        try:
            await self._shutdown_event.wait()
        finally:
            await runner.cleanup()
            logger.info("Indigo stopped.")

    async def stop(self) -> None:
        self._shutdown_event.set()
