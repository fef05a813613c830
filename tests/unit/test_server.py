import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import TextContent

from autobound_config.settings import Credentials
from autobound_mcp.registry import build_registry
from autobound_mcp.server import SERVER_NAME, create_server, to_mcp_content
from tests.helpers.fake_http import make_response


@pytest.fixture()
def server(registry):
    return create_server(registry)


def test_to_mcp_content_renders_json_blocks_as_text():
    out = to_mcp_content({"content": [{"type": "json", "json": {"foo": 1}}]})
    assert out == [TextContent(type="text", text='{"foo": 1}')]


def test_server_name(server):
    assert server.name == SERVER_NAME


@pytest.mark.asyncio
async def test_tool_surface_and_schemas(server):
    tools = {t.name: t for t in await server.list_tools()}
    assert set(tools) == {"autoboundInsights", "predictLeads", "youSearch"}

    assert tools["predictLeads"].inputSchema["required"] == ["path"]
    assert tools["youSearch"].inputSchema["required"] == ["query"]
    assert not tools["autoboundInsights"].inputSchema.get("required")

    props = tools["autoboundInsights"].inputSchema["properties"]
    assert set(props) == {
        "contactEmail",
        "contactLinkedinUrl",
        "contactCompanyUrl",
        "userEmail",
        "userLinkedinUrl",
        "userCompanyUrl",
        "insightSubtype",
    }
    assert "freshness" in tools["youSearch"].inputSchema["properties"]


@pytest.mark.asyncio
async def test_call_tool_returns_payload_as_json_text(server, session):
    session.queue(make_response(200, {"foo": 1}))

    content = await server.call_tool("youSearch", {"query": "widgets"})

    assert len(content) == 1
    assert json.loads(content[0].text) == {"foo": 1}
    assert session.sent[0].url.endswith("?query=widgets")


@pytest.mark.asyncio
async def test_unset_optionals_are_not_forwarded(server, session):
    session.queue(make_response(200, {}))

    await server.call_tool("autoboundInsights", {"contactEmail": "jane@acme.com"})

    assert json.loads(session.sent[0].body) == {"contactEmail": "jane@acme.com"}


@pytest.mark.asyncio
async def test_missing_secret_surfaces_as_tool_error(session, http_client):
    server = create_server(build_registry(Credentials({}), http_client=http_client))

    with pytest.raises(ToolError, match="Missing YOUCOM_API_KEY secret"):
        await server.call_tool("youSearch", {"query": "widgets"})
    assert session.sent == []


@pytest.mark.asyncio
async def test_invalid_email_never_reaches_the_provider(server, session):
    with pytest.raises(ToolError):
        await server.call_tool("autoboundInsights", {"contactEmail": "not-an-email"})
    assert session.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [True, "7"])
async def test_result_count_must_be_a_number(server, session, value):
    with pytest.raises(ToolError):
        await server.call_tool("youSearch", {"query": "widgets", "numWebResults": value})
    assert session.sent == []


@pytest.mark.asyncio
async def test_provider_error_surfaces_as_tool_error(server, session):
    session.queue(make_response(400, {"message": "bad input"}))
    with pytest.raises(ToolError, match="PredictLeads API error: bad input"):
        await server.call_tool("predictLeads", {"path": "/companies/example.com"})
