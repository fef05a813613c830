from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

import uvicorn
from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from autobound_common.tooling import InstrumentConfig, instrument_async_tool
from autobound_config.settings import (
    SECRET_NAMES,
    Credentials,
    HttpSettings,
    ProviderUrls,
    ServerSettings,
    init_runtime,
)
from autobound_mcp.http_client import HttpClient
from autobound_mcp.registry import ToolRegistry, build_registry
from autobound_mcp.router import SSE_MESSAGE_PATH, SSE_PATH, STREAMABLE_HTTP_PATH, build_asgi_app
from autobound_mcp.tools import Email, ExtraQuery, Freshness, NonEmptyStr, Number, SafeSearch, Url


logger = logging.getLogger(__name__)

SERVER_NAME = "Autobound MCP Multi-Tool"
MCP_CLIENT_ID = "autobound_mcp"


def to_mcp_content(result: dict) -> list[TextContent]:
    """Render normalized JSON blocks as MCP text content (MCP has no JSON block type)."""
    return [TextContent(type="text", text=json.dumps(block["json"], ensure_ascii=False)) for block in result["content"]]


async def _forward(registry: ToolRegistry, name: str, **arguments: Any) -> list[TextContent]:
    supplied = {k: v for k, v in arguments.items() if v is not None}
    return to_mcp_content(await registry.invoke(name, supplied))


def create_server(registry: ToolRegistry, settings: ServerSettings | None = None) -> FastMCP:
    """Build the FastMCP server exposing every tool in `registry`."""
    settings = settings or ServerSettings()

    mcp = FastMCP(
        name=SERVER_NAME,
        instructions="Sales insights (Autobound), company data (PredictLeads) and web search (You.com) as tools.",
        host=settings.host,
        port=settings.port,
        sse_path=SSE_PATH,
        message_path=SSE_MESSAGE_PATH + "/",
        streamable_http_path=STREAMABLE_HTTP_PATH,
    )

    def mcp_tool(name: str):
        definition = registry.get(name)

        def decorator(fn: Callable[..., Awaitable[list[TextContent]]]):
            cfg = InstrumentConfig(kind="tool", name=name, client_id=MCP_CLIENT_ID)
            wrapped = instrument_async_tool(cfg)(fn)
            mcp.tool(name=name, description=definition.description, structured_output=False)(wrapped)
            return wrapped

        return decorator

    @mcp_tool("autoboundInsights")
    async def autobound_insights(
        contactEmail: Email | None = None,
        contactLinkedinUrl: Url | None = None,
        contactCompanyUrl: Url | None = None,
        userEmail: Email | None = None,
        userLinkedinUrl: Url | None = None,
        userCompanyUrl: Url | None = None,
        insightSubtype: str | list[str] | None = None,
    ) -> list[TextContent]:
        return await _forward(
            registry,
            "autoboundInsights",
            contactEmail=contactEmail,
            contactLinkedinUrl=contactLinkedinUrl,
            contactCompanyUrl=contactCompanyUrl,
            userEmail=userEmail,
            userLinkedinUrl=userLinkedinUrl,
            userCompanyUrl=userCompanyUrl,
            insightSubtype=insightSubtype,
        )

    @mcp_tool("predictLeads")
    async def predict_leads(path: NonEmptyStr, query: ExtraQuery | None = None) -> list[TextContent]:
        return await _forward(registry, "predictLeads", path=path, query=query)

    @mcp_tool("youSearch")
    async def you_search(
        query: NonEmptyStr,
        numWebResults: Number | None = None,
        freshness: Freshness | None = None,
        country: str | None = None,
        safesearch: SafeSearch | None = None,
    ) -> list[TextContent]:
        return await _forward(
            registry,
            "youSearch",
            query=query,
            numWebResults=numWebResults,
            freshness=freshness,
            country=country,
            safesearch=safesearch,
        )

    return mcp


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    init_runtime()
    settings = ServerSettings.from_env()

    credentials = Credentials.from_env()
    missing = credentials.missing(SECRET_NAMES)
    if missing:
        logger.warning("Secrets not configured: %s; tools that need them will fail", ", ".join(missing))

    registry = build_registry(
        credentials,
        http_client=HttpClient(settings=HttpSettings.from_env()),
        urls=ProviderUrls.from_env(),
    )
    mcp = create_server(registry, settings)

    if settings.transport == "http":
        logger.info("Serving %s on http://%s:%s (%s, %s)", SERVER_NAME, settings.host, settings.port, SSE_PATH, STREAMABLE_HTTP_PATH)
        uvicorn.run(build_asgi_app(mcp), host=settings.host, port=settings.port)
    else:
        mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()
