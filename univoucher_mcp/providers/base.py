"""Base class for capability providers.

A capability provider owns one domain (documentation, remote API) and
implements the four MCP capabilities for it: list/read resources and
list/call tools. The dispatcher picks a provider with ``handles_resource`` /
``handles_tool`` and delegates to it.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource, TextContent, Tool

from univoucher_mcp.framework.errors import (
    ErrorSeverity,
    UniVoucherError,
    to_univoucher_error,
)

logger = logging.getLogger(__name__)

RESOURCE_SCHEME = "univoucher"


def text_block(text: str) -> TextContent:
    """Wrap a string in a text content block."""
    return TextContent(type="text", text=text)


def json_block(payload: Any) -> TextContent:
    """Serialize a JSON-shaped payload with 2-space indentation."""
    return text_block(json.dumps(payload, indent=2, default=str))


class CapabilityProvider(ABC):
    """Abstract base class for capability providers.

    Subclasses set ``name`` and ``resource_prefix`` and implement the
    abstract methods. Tool invocation goes through ``call_tool``, which wraps
    ``_execute_tool`` in an error boundary: any failure becomes a normal
    response whose only block is an ``Error: ...`` string. Resource reads have
    no such boundary and raise to the caller.
    """

    name: str = ""
    resource_prefix: str = ""

    def handles_resource(self, uri: str) -> bool:
        """Return True if ``uri`` lives in this provider's namespace."""
        return bool(self.resource_prefix) and uri.startswith(self.resource_prefix)

    @abstractmethod
    def handles_tool(self, name: str) -> bool:
        """Return True if this provider claims the tool ``name``."""

    @abstractmethod
    async def list_resources(self) -> list[Resource]:
        """Return this provider's resource catalog."""

    @abstractmethod
    async def read_resource(self, uri: str) -> list[ReadResourceContents]:
        """Read one resource.

        Raises:
            UniVoucherError: If the resource cannot be read
        """

    @abstractmethod
    async def list_tools(self) -> list[Tool]:
        """Return this provider's tool catalog."""

    @abstractmethod
    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> Sequence[TextContent]:
        """Run a tool. May raise; ``call_tool`` turns failures into in-band errors."""

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> list[TextContent]:
        """Invoke a tool inside the provider's error boundary.

        Args:
            name: Tool name
            arguments: Raw, untyped tool arguments

        Returns:
            Content blocks; on failure a single ``Error: <message>`` block
        """
        arguments = arguments or {}
        logger.info("Tool call: %s (provider=%s)", name, self.name)
        try:
            return list(await self._execute_tool(name, arguments))
        except Exception as e:
            error = to_univoucher_error(e)
            extra = {"tool": name, "error": error.to_details().to_dict()}
            if not isinstance(e, UniVoucherError):
                logger.exception("Unexpected failure in tool '%s'", name, extra=extra)
            elif error.severity == ErrorSeverity.FATAL:
                logger.error("Tool '%s' failed: %s", name, error.message, extra=extra)
            else:
                logger.warning("Tool '%s' failed: %s", name, error.message, extra=extra)
            return [self._format_error(error)]

    @staticmethod
    def _format_error(error: UniVoucherError) -> TextContent:
        return text_block(f"Error: {error.message}")

    def get_provider_info(self) -> dict[str, Any]:
        """Get provider information.

        Returns:
            Dictionary with provider metadata
        """
        return {"provider": self.name, "resource_prefix": self.resource_prefix}
