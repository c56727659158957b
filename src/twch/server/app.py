"""HTTP server: stream listings and live chat as plain text."""

import logging
import sys
from collections.abc import Awaitable, Callable

import aiohttp
from aiohttp import web

from ..api.base import ApiError
from ..api.twitch import TwitchApiClient
from ..chat.connection import open_channel_stream
from ..chat.stream import ChannelMessageStream
from ..core.models import format_streams
from ..core.settings import ConfigError, Settings
from ..main import setup_logging
from .heartbeat import heartbeat_chunks

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10

StreamOpener = Callable[[str], Awaitable[ChannelMessageStream]]

SETTINGS_KEY = web.AppKey("settings", Settings)
API_CLIENT_KEY = web.AppKey("api_client", TwitchApiClient)
OPEN_STREAM_KEY = web.AppKey("open_stream", StreamOpener)

routes = web.RouteTableDef()


def _parse_limit(request: web.Request) -> int:
    value = request.query.get("limit")
    if value is None:
        return DEFAULT_LIMIT
    if not value.isdigit() or int(value) == 0:
        raise web.HTTPBadRequest(text=f"invalid limit: {value!r}\n")
    return int(value)


def _text_response(body: str) -> web.Response:
    response = web.Response(text=body, content_type="text/plain", charset="utf-8")
    response.enable_compression()
    return response


def _api_client(request: web.Request) -> TwitchApiClient:
    client = request.app.get(API_CLIENT_KEY)
    if client is None:
        raise web.HTTPInternalServerError(text="Twitch API credentials are not configured\n")
    return client


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turn API failures into plain-text 502 responses."""
    try:
        return await handler(request)
    except ApiError as e:
        logger.error(f"{request.method} {request.path}: {e}")
        raise web.HTTPBadGateway(text=f"{e}\n") from e


@routes.get("/")
async def get_streams(request: web.Request) -> web.Response:
    limit = _parse_limit(request)
    streams = await _api_client(request).get_streams(limit)
    return _text_response(format_streams(streams))


@routes.get("/search")
async def search_channels(request: web.Request) -> web.Response:
    query = request.query.get("q")
    if not query:
        raise web.HTTPBadRequest(text="missing query parameter 'q'\n")
    limit = _parse_limit(request)
    streams = await _api_client(request).search_channels(query, limit)
    return _text_response(format_streams(streams))


@routes.get("/{channel:[a-zA-Z0-9_]+}")
async def start_channel_stream(request: web.Request) -> web.StreamResponse:
    channel = request.match_info["channel"]
    settings = request.app[SETTINGS_KEY]

    try:
        stream = await request.app[OPEN_STREAM_KEY](channel)
    except (aiohttp.ClientError, OSError) as e:
        logger.error(f"Failed to connect to #{channel}: {e}")
        raise web.HTTPInternalServerError(text=f"failed to connect to chat: {e}\n") from e

    logger.info(f"Streaming #{channel} to {request.remote}")
    response = web.StreamResponse(
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
    response.content_type = "text/plain"
    response.charset = "utf-8"

    chunks = heartbeat_chunks(stream, settings.heartbeat_interval)
    try:
        await response.prepare(request)
        async for chunk in chunks:
            await response.write(chunk.encode("utf-8"))
        await response.write_eof()
    except ConnectionResetError:
        logger.info(f"Client left #{channel}")
    finally:
        await chunks.aclose()
        await stream.aclose()
        logger.info(f"Closed #{channel} stream ({stream.dropped} frames dropped)")

    return response


async def _close_api_client(app: web.Application) -> None:
    client = app.get(API_CLIENT_KEY)
    if client is not None:
        await client.close()


def create_app(
    settings: Settings,
    api_client: TwitchApiClient | None = None,
    open_stream: StreamOpener = open_channel_stream,
) -> web.Application:
    """Build the aiohttp application."""
    app = web.Application(
        middlewares=[
            web.normalize_path_middleware(append_slash=False, remove_slash=True),
            error_middleware,
        ]
    )
    app[SETTINGS_KEY] = settings
    if api_client is None:
        try:
            api_client = TwitchApiClient.from_settings(settings)
        except ConfigError as e:
            logger.warning(f"Stream listing disabled: {e}")
    if api_client is not None:
        app[API_CLIENT_KEY] = api_client
    app[OPEN_STREAM_KEY] = open_stream
    app.on_cleanup.append(_close_api_client)
    app.add_routes(routes)
    return app


def main() -> int:
    """Entry point for twch-server."""
    setup_logging()

    try:
        settings = Settings.load()
        host, port = settings.http_host_port()
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Listening on http://{host}:{port}")
    web.run_app(create_app(settings), host=host, port=port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
