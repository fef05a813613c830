import pytest

from tests.helpers.mcp_runtime import assert_tools_present, mcp_stdio_session, result_text


pytestmark = pytest.mark.integration

SERVER_MODULE = "autobound_mcp.server"


# The stdio client runs an anyio task group, so each test opens and closes
# its session in its own task.


@pytest.mark.asyncio
async def test_stdio_server_lists_all_tools(server_env):
    async with mcp_stdio_session(SERVER_MODULE, env=server_env) as session:
        await assert_tools_present(session, ["autoboundInsights", "predictLeads", "youSearch"])


@pytest.mark.asyncio
async def test_stdio_server_reports_missing_secret_as_tool_error(server_env):
    async with mcp_stdio_session(SERVER_MODULE, env=server_env) as session:
        res = await session.call_tool("predictLeads", {"path": "/companies/example.com"})
    assert res.isError
    assert "Missing PREDICTLEADS_API_KEY or PREDICTLEADS_API_TOKEN secret" in result_text(res)


@pytest.mark.asyncio
async def test_stdio_server_rejects_bad_arguments(server_env):
    async with mcp_stdio_session(SERVER_MODULE, env=server_env) as session:
        bad_filter = await session.call_tool("youSearch", {"query": "widgets", "safesearch": "maybe"})
        bad_count = await session.call_tool("youSearch", {"query": "widgets", "numWebResults": True})
    assert bad_filter.isError
    assert bad_count.isError
