"""UniVoucher MCP CLI - Command-line interface for running and inspecting the server.

This module provides command-line tools for:
- Starting the stdio MCP server
- Listing tools and resources
- Reading a resource or calling a tool without an MCP client

Example:
    # Start MCP server
    univoucher-mcp-cli serve

    # List tools
    univoucher-mcp-cli tools

    # Call a tool
    univoucher-mcp-cli call get_doc_page --arg page_id=faq
    univoucher-mcp-cli call get_chains --arg chain=8453

    # Read a resource
    univoucher-mcp-cli read univoucher://api/endpoints
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from univoucher_mcp.framework.errors import UniVoucherError
from univoucher_mcp.observability.logging import configure_logging
from univoucher_mcp.server.config import Config, load_config
from univoucher_mcp.server.dispatcher import Dispatcher
from univoucher_mcp.server.mcp_server import serve_mcp

logger = logging.getLogger(__name__)


def parse_tool_arguments(pairs: list[str] | None) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are JSON-decoded when possible.

    Raises:
        ValueError: If a pair has no '='
    """
    arguments: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            msg = f"Invalid argument '{pair}'. Expected key=value"
            raise ValueError(msg)
        try:
            arguments[key] = json.loads(raw)
        except json.JSONDecodeError:
            arguments[key] = raw
    return arguments


def _load(args: argparse.Namespace) -> Config:
    return load_config(Path(args.config) if args.config else None)


async def _with_dispatcher(config: Config, action: Any) -> Any:
    dispatcher = Dispatcher.from_config(config)
    try:
        return await action(dispatcher)
    finally:
        await dispatcher.close()


# =============================================================================
# Commands
# =============================================================================


def serve(args: argparse.Namespace) -> int:
    """Start the stdio MCP server."""
    serve_mcp(args.config, args.log_level)
    return 0


def list_tools(args: argparse.Namespace) -> int:
    """Print every tool with its input schema."""
    tools = asyncio.run(_with_dispatcher(_load(args), lambda d: d.list_tools()))
    print(json.dumps([tool.model_dump(mode="json", exclude_none=True) for tool in tools], indent=2))
    return 0


def list_resources(args: argparse.Namespace) -> int:
    """Print every resource descriptor."""
    resources = asyncio.run(_with_dispatcher(_load(args), lambda d: d.list_resources()))
    print(
        json.dumps(
            [resource.model_dump(mode="json", exclude_none=True) for resource in resources],
            indent=2,
        )
    )
    return 0


def read_resource(args: argparse.Namespace) -> int:
    """Print the contents of one resource.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        contents = asyncio.run(
            _with_dispatcher(_load(args), lambda d: d.read_resource(args.uri))
        )
    except UniVoucherError as e:
        logger.error("%s", e.message)
        return 1

    for item in contents:
        print(item.content)
    return 0


def call_tool(args: argparse.Namespace) -> int:
    """Call one tool and print its content blocks.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        arguments = parse_tool_arguments(args.arg)
        blocks = asyncio.run(
            _with_dispatcher(_load(args), lambda d: d.call_tool(args.tool, arguments))
        )
    except ValueError as e:
        logger.error("%s", e)
        return 1
    except UniVoucherError as e:
        logger.error("%s", e.message)
        return 1

    for block in blocks:
        print(block.text)
    return 0


# =============================================================================
# Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="univoucher-mcp-cli",
        description="UniVoucher MCP server and inspection tools",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config file")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    serve_parser = subparsers.add_parser("serve", help="Start the stdio MCP server")
    serve_parser.set_defaults(func=serve)

    tools_parser = subparsers.add_parser("tools", help="List tools")
    tools_parser.set_defaults(func=list_tools)

    resources_parser = subparsers.add_parser("resources", help="List resources")
    resources_parser.set_defaults(func=list_resources)

    read_parser = subparsers.add_parser("read", help="Read a resource")
    read_parser.add_argument("uri", help="Resource URI, e.g. univoucher://docs/faq")
    read_parser.set_defaults(func=read_resource)

    call_parser = subparsers.add_parser("call", help="Call a tool")
    call_parser.add_argument("tool", help="Tool name, e.g. get_doc_page")
    call_parser.add_argument(
        "--arg",
        action="append",
        metavar="KEY=VALUE",
        help="Tool argument (repeatable); VALUE is parsed as JSON when possible",
    )
    call_parser.set_defaults(func=call_tool)

    return parser


def main() -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args()

    configure_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
