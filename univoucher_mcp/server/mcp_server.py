"""UniVoucher MCP server implementation.

This module provides the main MCP server wrapper that:
1. Loads configuration (YAML file + UNIVOUCHER_* environment variables)
2. Builds the documentation and API providers behind a Dispatcher
3. Registers MCP resource, tool and prompt handlers
4. Serves the MCP protocol over stdio

Architecture:
- MCP client -> UniVoucherMCPServer -> Dispatcher -> one provider -> disk or REST API
- Tool failures come back as normal results carrying an error message
- Unknown resources/tools/prompts and resource read failures are raised and
  become protocol-level errors in the SDK

Example:
    # Start MCP server
    python -m univoucher_mcp.server.mcp_server --config univoucher_config.yml

    # Or use the console script
    univoucher-mcp --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import GetPromptResult, Prompt, Resource, TextContent, Tool
from pydantic import AnyUrl

from univoucher_mcp import __version__
from univoucher_mcp.observability.logging import configure_logging
from univoucher_mcp.server import prompts
from univoucher_mcp.server.config import Config, load_config
from univoucher_mcp.server.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class UniVoucherMCPServer:
    """MCP server exposing UniVoucher documentation and API access.

    Attributes:
        config: Loaded configuration
        dispatcher: Routes requests to the documentation and API providers
        server: MCP server instance
    """

    def __init__(self, config: Config, dispatcher: Dispatcher | None = None) -> None:
        """Initialize the server.

        Args:
            config: Server configuration
            dispatcher: Optional prebuilt dispatcher (defaults to one built from config)
        """
        self.config = config
        self.dispatcher = dispatcher or Dispatcher.from_config(config)

        self.server = Server(config.server.name, version=__version__)
        logger.info("Created MCP server: %s %s", config.server.name, __version__)

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register MCP handlers on the low-level server."""

        @self.server.list_resources()
        async def list_resources() -> list[Resource]:
            return await self.dispatcher.list_resources()

        @self.server.read_resource()
        async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
            return await self.dispatcher.read_resource(str(uri))

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return await self.dispatcher.list_tools()

        # Providers validate their own arguments and report failures in-band
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
            return await self.dispatcher.call_tool(name, arguments or {})

        @self.server.list_prompts()
        async def list_prompts() -> list[Prompt]:
            return prompts.list_prompts()

        @self.server.get_prompt()
        async def get_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
            return prompts.get_prompt(name, arguments)

        logger.info("Registered MCP resource, tool and prompt handlers")

    async def run(self) -> None:
        """Run the MCP server using stdio transport.

        This is the main entry point for starting the server.
        """
        logger.info("Starting UniVoucher MCP server on stdio")

        try:
            async with stdio_server() as (read, write):
                await self.server.run(read, write, self.server.create_initialization_options())
        finally:
            await self.dispatcher.close()


def serve_mcp(config_path: str | None = None, log_level: str | None = None) -> None:
    """Load configuration and run the stdio server until the client disconnects.

    Args:
        config_path: Optional path to a YAML config file
        log_level: Optional log level overriding the configured one
    """
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.exception("Invalid configuration: %s", e)
        sys.exit(1)

    configure_logging(log_level or config.server.log_level, config.server.log_format)
    logger.info(
        "Configuration loaded from %s",
        config._config_path or "defaults",
        extra={"config": config.to_dict()},
    )

    try:
        asyncio.run(UniVoucherMCPServer(config).run())

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)

    except Exception as e:
        logger.exception("Server error: %s", e)
        sys.exit(1)


def main() -> None:
    """CLI entry point for the stdio MCP server.

    Supports command-line arguments:
    --config: Path to YAML configuration file (default: ./univoucher_config.yml)
    --log-level: Logging level override
    """
    parser = argparse.ArgumentParser(
        description="UniVoucher MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start server with defaults (public API, ./docs)
  univoucher-mcp

  # Enable gift card creation
  export UNIVOUCHER_PRIVATE_KEY=0x...
  univoucher-mcp --config univoucher_config.yml
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: ./univoucher_config.yml)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from configuration, INFO)",
    )

    args = parser.parse_args()
    serve_mcp(args.config, args.log_level)


__all__ = [
    "UniVoucherMCPServer",
    "main",
    "serve_mcp",
]


if __name__ == "__main__":
    main()
