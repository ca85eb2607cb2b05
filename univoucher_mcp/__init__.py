"""
UniVoucher MCP: documentation and live API access for the UniVoucher gift-card protocol

An MCP server that exposes:
- univoucher_mcp.providers.documents: the UniVoucher documentation pages
- univoucher_mcp.providers.api: queries against the UniVoucher REST API
- univoucher_mcp.server: the dispatcher and stdio MCP server wiring them together
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("univoucher-mcp")
except PackageNotFoundError:
    # Development checkout, not installed via pip
    __version__ = "1.4.0"

__all__ = ["__version__"]
