"""MCP Server Core - Protocol Implementation.

This package contains the server side of the UniVoucher MCP server:
- mcp_server.py: MCP server entry point (stdio transport)
- dispatcher.py: Routing of resource/tool requests to providers
- prompts.py: Prompt templates
- schemas.py: Tool argument schemas
- config.py: Server configuration

Submodules are imported directly; this package does not re-export them so
providers can import config and schemas without pulling in the server.
"""

__all__: list[str] = []
