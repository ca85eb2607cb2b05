"""Request dispatcher.

Routes the four MCP capability requests to the provider that owns them.
Providers are held in a fixed order (documentation first, then API) and each
one answers ``handles_resource`` / ``handles_tool``; the first provider that
answers yes wins. Listing concatenates every provider's catalog in the same
order.

The dispatcher does no I/O and does not catch provider errors: tool failures
are already reported in-band by the providers, and resource read failures
propagate to the transport layer on purpose.
"""

import logging
from collections.abc import Sequence
from typing import Any

from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource, TextContent, Tool

from univoucher_mcp.framework.errors import UnknownResourceError, UnknownToolError
from univoucher_mcp.providers.api import UniVoucherAPIProvider
from univoucher_mcp.providers.base import CapabilityProvider
from univoucher_mcp.providers.documents import UniVoucherDocumentationProvider
from univoucher_mcp.server.config import Config

logger = logging.getLogger(__name__)


class Dispatcher:
    """Fan-out of capability requests to an ordered list of providers.

    Attributes:
        providers: Providers in routing order
    """

    def __init__(self, providers: Sequence[CapabilityProvider]) -> None:
        if not providers:
            msg = "Dispatcher requires at least one provider"
            raise ValueError(msg)
        self.providers: tuple[CapabilityProvider, ...] = tuple(providers)
        logger.info(
            "Dispatcher initialized with providers: %s",
            [p.name for p in self.providers],
            extra={"providers": [p.get_provider_info() for p in self.providers]},
        )

    @classmethod
    def from_config(cls, config: Config) -> "Dispatcher":
        """Build the documentation and API providers from configuration."""
        return cls(
            [
                UniVoucherDocumentationProvider(root=config.docs.docs_path),
                UniVoucherAPIProvider(config.api, signing_key=config.signing_key),
            ]
        )

    def provider_for_resource(self, uri: str) -> CapabilityProvider:
        for provider in self.providers:
            if provider.handles_resource(uri):
                return provider
        raise UnknownResourceError(uri)

    def provider_for_tool(self, name: str) -> CapabilityProvider:
        for provider in self.providers:
            if provider.handles_tool(name):
                return provider
        raise UnknownToolError(name)

    async def list_resources(self) -> list[Resource]:
        resources: list[Resource] = []
        for provider in self.providers:
            resources.extend(await provider.list_resources())
        return resources

    async def read_resource(self, uri: str) -> list[ReadResourceContents]:
        """Read a resource from the provider owning its namespace.

        Raises:
            UnknownResourceError: If no provider owns the URI
            UniVoucherError: Whatever the provider raises
        """
        provider = self.provider_for_resource(uri)
        logger.debug("Routing resource %s to provider '%s'", uri, provider.name)
        return await provider.read_resource(uri)

    async def list_tools(self) -> list[Tool]:
        tools: list[Tool] = []
        for provider in self.providers:
            tools.extend(await provider.list_tools())
        return tools

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> list[TextContent]:
        """Invoke a tool on the provider claiming its name.

        Raises:
            UnknownToolError: If no provider claims the name
        """
        provider = self.provider_for_tool(name)
        logger.debug("Routing tool %s to provider '%s'", name, provider.name)
        return await provider.call_tool(name, arguments or {})

    async def close(self) -> None:
        """Release provider resources (HTTP clients)."""
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
