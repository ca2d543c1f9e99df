"""End-to-end tests through the FastMCP server.

Uses fastmcp's in-memory Client, so calls go through the real MCP tool
layer, the dispatcher and OpineClient, with HTTP served by MockTransport.
"""

import json

import httpx
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from core.opine_client import OpineClient
from tools.dispatcher import ToolDispatcher
from tools.mcp_server import SERVER_NAME, build_server

from conftest import FakeOpineClient


def _opine_api(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if request.url.raw_path.startswith(b"/v1/deals/eid%3A00130000003DzUiAAK"):
        return httpx.Response(200, json={
            "id": "deal-9", "name": "Globex", "salesProcessId": 42, "salesProcessStageId": 5,
        })
    if path == "/v1/deals":
        return httpx.Response(200, json={"items": [], "limit": 100, "offset": 0, "totalCount": 0})
    if path == "/v1/sales-processes":
        return httpx.Response(200, json={
            "items": [{"id": 42, "name": "Enterprise"}], "limit": 1000, "offset": 0, "totalCount": 1,
        })
    if path == "/v1/sales-process-stages":
        return httpx.Response(200, json={
            "items": [{"id": 4, "title": "Discovery"}], "limit": 1000, "offset": 0, "totalCount": 1,
        })
    return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def server():
    client = OpineClient(
        api_key="k",
        base_url="https://api.test.opine/v1",
        transport=httpx.MockTransport(_opine_api),
    )
    return build_server(ToolDispatcher(client))


class TestServer:

    def test_server_name(self, server):
        assert server.name == SERVER_NAME

    @pytest.mark.asyncio
    async def test_every_dispatcher_tool_is_registered(self, server):
        async with Client(server) as client:
            tools = await client.list_tools()
        registered = {tool.name for tool in tools}
        assert registered == set(ToolDispatcher(FakeOpineClient()).tool_names)

    @pytest.mark.asyncio
    async def test_describe_salesforce_deal_end_to_end(self, server):
        async with Client(server) as client:
            result = await client.call_tool(
                "describe_deal_sales_process",
                {"id": "00130000003DzUi", "isSalesforceId": True},
            )
        assert len(result.content) == 1
        payload = json.loads(result.content[0].text)
        assert payload["deal"]["id"] == "deal-9"
        assert payload["salesProcess"] == {"id": 42, "name": "Enterprise"}
        # Stage 5 is not in the fetched list.
        assert payload["salesProcessStage"] is None

    @pytest.mark.asyncio
    async def test_remote_error_surfaces_as_tool_error(self, server):
        async with Client(server) as client:
            with pytest.raises(ToolError, match="Error executing get_deal: Opine API error: 404 Not Found"):
                await client.call_tool("get_deal", {"id": "nope"})

    @pytest.mark.asyncio
    async def test_bad_salesforce_id_surfaces_as_tool_error(self, server):
        async with Client(server) as client:
            with pytest.raises(ToolError, match="Invalid Salesforce ID length: 3"):
                await client.call_tool("get_salesforce_deal", {"id": "abc"})

    @pytest.mark.asyncio
    async def test_paging_bounds_in_tool_schema(self, server):
        async with Client(server) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}
        properties = tools["list_deals"].inputSchema["properties"]
        limit = json.dumps(properties["limit"])
        assert '"minimum": 1' in limit
        assert '"maximum": 1000' in limit
        assert '"minimum": 0' in json.dumps(properties["offset"])
        assert '"minLength": 1' in json.dumps(tools["get_deal"].inputSchema["properties"]["id"])

    @pytest.mark.asyncio
    async def test_out_of_range_limit_rejected(self, server):
        async with Client(server) as client:
            await client.call_tool("list_deals", {"limit": 1000})
            with pytest.raises(ToolError):
                await client.call_tool("list_deals", {"limit": 0})

    @pytest.mark.asyncio
    async def test_empty_deal_id_rejected(self, server):
        async with Client(server) as client:
            with pytest.raises(ToolError):
                await client.call_tool("get_deal", {"id": ""})
