"""ASGI entry point that splits traffic between the SSE and streamable HTTP transports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

SSE_PATH = "/sse"
SSE_MESSAGE_PATH = "/sse/message"
STREAMABLE_HTTP_PATH = "/mcp"


class TransportRouter:
    """Dispatch by request path:

    - ``/sse`` and ``/sse/message[/...]`` -> SSE transport
    - ``/mcp`` (exact) -> streamable HTTP transport
    - anything else -> 404 with an empty body

    Lifespan events go to the streamable app, whose session manager must run.
    """

    def __init__(self, sse_app: ASGIApp, streamable_app: ASGIApp) -> None:
        self.sse_app = sse_app
        self.streamable_app = streamable_app

    def resolve(self, path: str) -> ASGIApp | None:
        if path in (SSE_PATH, SSE_MESSAGE_PATH) or path.startswith(SSE_MESSAGE_PATH + "/"):
            return self.sse_app
        if path == STREAMABLE_HTTP_PATH:
            return self.streamable_app
        return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self.streamable_app(scope, receive, send)
            return

        path = scope.get("path", "")
        app = self.resolve(path)
        if app is self.sse_app and path == SSE_MESSAGE_PATH:
            # FastMCP mounts the message endpoint with a trailing slash
            scope = dict(scope, path=SSE_MESSAGE_PATH + "/", raw_path=(SSE_MESSAGE_PATH + "/").encode())
        if app is not None:
            await app(scope, receive, send)
        elif scope["type"] == "websocket":
            await WebSocketClose()(scope, receive, send)
        else:
            await Response(status_code=404)(scope, receive, send)


def build_asgi_app(server: "FastMCP") -> TransportRouter:
    return TransportRouter(server.sse_app(), server.streamable_http_app())
