"""Capability providers for the UniVoucher MCP server.

- documents: Markdown documentation catalog, page reads and search
- api: UniVoucher REST API gateway
"""

from univoucher_mcp.providers.base import CapabilityProvider

__all__ = ["CapabilityProvider"]
