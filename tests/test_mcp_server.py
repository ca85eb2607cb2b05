"""
Tests for the MCP server wiring.

Handlers are exercised through the low-level server's request handler table,
the same entry points the stdio transport uses.
"""

from importlib.metadata import version
from pathlib import Path

import pytest
from mcp import types
from mcp.server import Server

from univoucher_mcp.server.config import Config, DocsConfig, ServerConfig
from univoucher_mcp.server.mcp_server import UniVoucherMCPServer


@pytest.fixture
def mcp_server(docs_root: Path) -> UniVoucherMCPServer:
    config = Config(
        docs=DocsConfig(docs_path=str(docs_root)),
        server=ServerConfig(name="univoucher-test"),
    )
    return UniVoucherMCPServer(config)


class TestHandlers:
    """Test registered MCP handlers."""

    def test_all_capabilities_registered(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test resources, tools and prompts are all advertised."""
        handlers = mcp_server.server.request_handlers

        for request_type in (
            types.ListResourcesRequest,
            types.ReadResourceRequest,
            types.ListToolsRequest,
            types.CallToolRequest,
            types.ListPromptsRequest,
            types.GetPromptRequest,
        ):
            assert request_type in handlers

    @pytest.mark.asyncio
    async def test_list_tools(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test the tool catalog covers both providers."""
        handler = mcp_server.server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))
        names = [tool.name for tool in result.root.tools]

        assert len(names) == 10  # noqa: PLR2004
        assert names[0] == "list_doc_pages"
        assert "create_gift_card" in names

    @pytest.mark.asyncio
    async def test_list_resources(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test the resource catalog covers both providers."""
        handler = mcp_server.server.request_handlers[types.ListResourcesRequest]

        result = await handler(types.ListResourcesRequest(method="resources/list"))
        uris = [str(resource.uri) for resource in result.root.resources]

        assert len(uris) == 23  # noqa: PLR2004
        assert "univoucher://docs/faq" in uris
        assert "univoucher://api/endpoints" in uris

    @pytest.mark.asyncio
    async def test_read_doc_resource(
        self, mcp_server: UniVoucherMCPServer, docs_root: Path
    ) -> None:
        """Test a doc resource is returned as markdown text."""
        handler = mcp_server.server.request_handlers[types.ReadResourceRequest]

        result = await handler(
            types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri="univoucher://docs/fees"),
            )
        )
        contents = result.root.contents

        assert contents[0].text == (docs_root / "fees.md").read_text(encoding="utf-8")
        assert contents[0].mimeType == "text/markdown"

    @pytest.mark.asyncio
    async def test_call_doc_tool(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test a tool call returns the provider's text blocks."""
        handler = mcp_server.server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(
                    name="get_doc_page", arguments={"page_id": "faq"}
                ),
            )
        )

        assert result.root.isError is False
        assert result.root.content[0].text.startswith("# UniVoucher Documentation: faq")

    @pytest.mark.asyncio
    async def test_call_tool_error_stays_in_band(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test a failing tool is a normal result carrying the error text."""
        handler = mcp_server.server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name="get_fee_history", arguments={}),
            )
        )

        assert result.root.isError is False
        assert result.root.content[0].text.startswith("Error: Missing required parameter(s)")

    @pytest.mark.asyncio
    async def test_get_prompt(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test prompts render through the server."""
        handler = mcp_server.server.request_handlers[types.GetPromptRequest]

        result = await handler(
            types.GetPromptRequest(
                method="prompts/get",
                params=types.GetPromptRequestParams(
                    name="univoucher_api_query", arguments={"query_type": "chain_info"}
                ),
            )
        )

        assert result.root.description == "UniVoucher API Query: chain_info"

    @pytest.mark.asyncio
    async def test_list_prompts(self, mcp_server: UniVoucherMCPServer) -> None:
        """Test both prompts are listed."""
        handler = mcp_server.server.request_handlers[types.ListPromptsRequest]

        result = await handler(types.ListPromptsRequest(method="prompts/list"))

        assert [prompt.name for prompt in result.root.prompts] == [
            "univoucher_support",
            "univoucher_api_query",
        ]


def test_installed_sdk_has_decorator_registration() -> None:
    """Test the installed mcp release is a 1.x one with the low-level decorators."""
    major = int(version("mcp").split(".")[0])

    assert major == 1
    for decorator in ("list_resources", "read_resource", "list_tools", "call_tool"):
        assert callable(getattr(Server, decorator))
