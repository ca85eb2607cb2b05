"""UniVoucher REST API gateway provider.

Translates MCP tool calls into requests against the UniVoucher v1 REST API and
exposes the API's OpenAPI document as resources.

Architecture:
- Tool arguments arrive untyped; each operation validates what it needs
- Read-only filters are forwarded verbatim, the remote service validates them
- create_gift_card is the only state-changing call and is validated locally
  before any network traffic
- The parsed OpenAPI document is cached for the process lifetime
"""

import asyncio
import logging
import re
import secrets
import time
from collections.abc import Awaitable, Callable, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import quote

import yaml
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource, TextContent, Tool

from univoucher_mcp.framework.errors import (
    CredentialMissingError,
    InvalidAddressError,
    InvalidAmountError,
    MissingParameterError,
    RemoteParseFailedError,
    RemoteRequestFailedError,
    UnknownResourceError,
    UnknownToolError,
    UnsupportedChainError,
)
from univoucher_mcp.providers.api.client import UniVoucherAPIClient
from univoucher_mcp.providers.base import RESOURCE_SCHEME, CapabilityProvider, json_block
from univoucher_mcp.server.config import APIConfig, normalize_credential

logger = logging.getLogger(__name__)

# Ethereum, Optimism, BNB Chain, Polygon, Base, Arbitrum One, Avalanche C-Chain
SUPPORTED_CHAIN_IDS: tuple[int, ...] = (1, 10, 56, 137, 8453, 42161, 43114)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

ORDER_ID_PREFIX = "mcp_order_"

API_TOOL_NAMES: tuple[str, ...] = (
    "query_api_cards",
    "get_single_card",
    "create_gift_card",
    "get_current_fees",
    "get_fee_history",
    "get_chains",
)

# Names following the API naming convention are routed here even if unknown,
# so the caller gets an in-band "Unknown tool" error rather than a dispatch error
API_TOOL_PREFIXES: tuple[str, ...] = ("query_", "get_")

HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


def generate_order_id() -> str:
    """Best-effort unique order id: millisecond clock plus 40 random bits."""
    return f"{ORDER_ID_PREFIX}{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_int(value: Any) -> int | None:
    """Coerce a chain id to int, or None if it is not an integer value."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(arguments: dict[str, Any]) -> dict[str, str]:
    """Forward every non-null argument as a query parameter."""
    return {key: _query_value(value) for key, value in arguments.items() if value is not None}


class UniVoucherAPIProvider(CapabilityProvider):
    """Capability provider for the UniVoucher REST API.

    Attributes:
        config: API configuration
        client: HTTP client used for every remote call
    """

    name = "api"
    resource_prefix = f"{RESOURCE_SCHEME}://api/"

    def __init__(
        self,
        config: APIConfig | None = None,
        signing_key: str | None = None,
        client: UniVoucherAPIClient | None = None,
    ) -> None:
        """Initialize API provider.

        Args:
            config: API configuration (defaults to the public v1 API)
            signing_key: Optional signing key for create_gift_card, with or without 0x
            client: Optional preconfigured HTTP client
        """
        self.config = config or APIConfig()
        self._signing_key = normalize_credential(signing_key)
        self.client = client or UniVoucherAPIClient(
            self.config.base_url,
            timeout_seconds=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
        )

        self._openapi_document: dict[str, Any] | None = None
        self._openapi_lock = asyncio.Lock()

        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            "query_api_cards": self.query_cards,
            "get_single_card": self.get_single_card,
            "create_gift_card": self.create_gift_card,
            "get_current_fees": self.get_current_fees,
            "get_fee_history": self.get_fee_history,
            "get_chains": self.get_chains,
        }

        logger.info(
            "Initialized UniVoucherAPIProvider: base_url=%s, signing_key_configured=%s",
            self.config.base_url,
            self._signing_key is not None,
        )

    # ------------------------------------------------------------------
    # Capability contract
    # ------------------------------------------------------------------

    def handles_tool(self, name: str) -> bool:
        return name in API_TOOL_NAMES or name.startswith(API_TOOL_PREFIXES)

    async def list_resources(self) -> list[Resource]:
        return [
            Resource(
                uri=f"{self.resource_prefix}openapi-spec",
                name="UniVoucher OpenAPI Specification",
                description="Complete OpenAPI specification for UniVoucher API",
                mimeType="application/yaml",
            ),
            Resource(
                uri=f"{self.resource_prefix}endpoints",
                name="API Endpoints",
                description="List of available API endpoints with descriptions",
                mimeType="application/json",
            ),
        ]

    async def read_resource(self, uri: str) -> list[ReadResourceContents]:
        """Read an API resource.

        Raises:
            UnknownResourceError: If the resource id is not openapi-spec or endpoints
            RemoteRequestFailedError: If the schema document cannot be fetched
            RemoteParseFailedError: If the schema document has an unexpected shape
        """
        resource_id = uri.removeprefix(self.resource_prefix)

        if resource_id == "openapi-spec":
            text = await self.get_openapi_spec()
            return [ReadResourceContents(content=text, mime_type="application/yaml")]

        if resource_id == "endpoints":
            endpoints = await self.get_endpoints_list()
            return [
                ReadResourceContents(
                    content=json_block(endpoints).text, mime_type="application/json"
                )
            ]

        raise UnknownResourceError(uri)

    async def list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="query_api_cards",
                description="Query UniVoucher cards with various filters",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer", "description": "Page number", "default": 1},
                        "limit": {
                            "type": "integer",
                            "description": "Results per page",
                            "default": 20,
                        },
                        "status": {
                            "type": "string",
                            "enum": ["active", "redeemed", "cancelled"],
                            "description": "Filter by card status",
                        },
                        "chain": {"type": "integer", "description": "Filter by chain ID"},
                        "creator": {"type": "string", "description": "Filter by creator address"},
                        "redeemedBy": {
                            "type": "string",
                            "description": "Filter by redeemer address",
                        },
                        "belongTo": {
                            "type": "string",
                            "description": "Filter cards created by OR redeemed by this address",
                        },
                        "tokenAddress": {
                            "type": "string",
                            "description": "Filter by token address",
                        },
                        "sortDirection": {
                            "type": "string",
                            "enum": ["asc", "desc"],
                            "description": "Sort direction",
                            "default": "desc",
                        },
                    },
                },
            ),
            Tool(
                name="get_single_card",
                description=(
                    "Get details of a single card by ID or slot ID. "
                    "If both are given, id is used."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer", "description": "Card ID"},
                        "slotId": {"type": "string", "description": "Card slot ID"},
                    },
                    "oneOf": [
                        {"required": ["id"]},
                        {"required": ["slotId"]},
                    ],
                },
            ),
            Tool(
                name="create_gift_card",
                description=(
                    "Create a UniVoucher gift card on a supported chain. "
                    "Requires a signing key configured on the server."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "chainId": {
                            "type": "integer",
                            "enum": list(SUPPORTED_CHAIN_IDS),
                            "description": "Network chain ID",
                        },
                        "tokenAddress": {
                            "type": "string",
                            "pattern": ADDRESS_PATTERN.pattern,
                            "description": (
                                "Token contract address "
                                "(0x0000000000000000000000000000000000000000 for native)"
                            ),
                        },
                        "tokenAmount": {
                            "type": "string",
                            "description": "Amount of tokens to load on the card, e.g. '0.5'",
                        },
                        "orderId": {
                            "type": "string",
                            "description": "Optional client order ID (generated if omitted)",
                        },
                    },
                    "required": ["chainId", "tokenAddress", "tokenAmount"],
                },
            ),
            Tool(
                name="get_current_fees",
                description="Get current fee percentages for chains",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "chainId": {
                            "type": "integer",
                            "description": (
                                "Specific chain ID (optional - returns all if not specified)"
                            ),
                        },
                    },
                },
            ),
            Tool(
                name="get_fee_history",
                description="Get fee update history for a specific chain",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "chainId": {"type": "integer", "description": "Chain ID"},
                    },
                    "required": ["chainId"],
                },
            ),
            Tool(
                name="get_chains",
                description="Get information about supported chains",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "chain": {
                            "type": "integer",
                            "description": (
                                "Specific chain ID (optional - returns all if not specified)"
                            ),
                        },
                    },
                },
            ),
        ]

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> Sequence[TextContent]:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(name, list(API_TOOL_NAMES))
        result = await handler(arguments)
        return [json_block(result)]

    # ------------------------------------------------------------------
    # Read-only operations
    # ------------------------------------------------------------------

    async def query_cards(self, filters: dict[str, Any]) -> Any:
        """GET /cards/all with every supplied filter as a query parameter."""
        return await self.client.get_json("/cards/all", params=build_query_params(filters))

    async def get_single_card(self, params: dict[str, Any]) -> Any:
        """GET /cards/single by id or slotId.

        When both are supplied ``id`` takes precedence and ``slotId`` is ignored.

        Raises:
            MissingParameterError: If neither id nor slotId is supplied
        """
        card_id = params.get("id")
        slot_id = params.get("slotId")

        if not _is_missing(card_id):
            if not _is_missing(slot_id):
                logger.warning(
                    "get_single_card received both id and slotId; using id=%s", card_id
                )
            query = {"id": _query_value(card_id)}
        elif not _is_missing(slot_id):
            query = {"slotId": _query_value(slot_id)}
        else:
            raise MissingParameterError("get_single_card", ["id or slotId"])

        return await self.client.get_json("/cards/single", params=query)

    async def get_current_fees(self, params: dict[str, Any]) -> Any:
        """GET /fees/current, optionally for one chain."""
        chain_id = params.get("chainId")
        query = {} if _is_missing(chain_id) else {"chainId": _query_value(chain_id)}
        return await self.client.get_json("/fees/current", params=query)

    async def get_fee_history(self, params: dict[str, Any]) -> Any:
        """GET /fees/history/{chainId}.

        Raises:
            MissingParameterError: If chainId is absent (checked before any request)
        """
        chain_id = params.get("chainId")
        if _is_missing(chain_id):
            raise MissingParameterError("get_fee_history", ["chainId"])
        segment = quote(_query_value(chain_id), safe="")
        return await self.client.get_json(f"/fees/history/{segment}")

    async def get_chains(self, params: dict[str, Any]) -> Any:
        """GET /chains, optionally for one chain."""
        chain = params.get("chain")
        query = {} if _is_missing(chain) else {"chain": _query_value(chain)}
        return await self.client.get_json("/chains", params=query)

    # ------------------------------------------------------------------
    # State-changing operation
    # ------------------------------------------------------------------

    async def create_gift_card(self, params: dict[str, Any]) -> dict[str, Any]:
        """POST /cards/create, signed with the configured key.

        Validation short-circuits in this order: signing key, required
        parameters, chain, token address, amount. Nothing is sent unless all
        checks pass.

        Raises:
            CredentialMissingError: No signing key configured
            MissingParameterError: chainId, tokenAddress or tokenAmount absent
            UnsupportedChainError: chainId not in SUPPORTED_CHAIN_IDS
            InvalidAddressError: tokenAddress is not a 0x-prefixed 20-byte hex string
            InvalidAmountError: tokenAmount is not a positive number
            RemoteRequestFailedError: The API rejected the request
        """
        if self._signing_key is None:
            raise CredentialMissingError("create_gift_card")

        required = ("chainId", "tokenAddress", "tokenAmount")
        missing = [name for name in required if _is_missing(params.get(name))]
        if missing:
            raise MissingParameterError("create_gift_card", missing)

        chain_id = _as_int(params["chainId"])
        if chain_id not in SUPPORTED_CHAIN_IDS:
            raise UnsupportedChainError(params["chainId"], list(SUPPORTED_CHAIN_IDS))

        token_address = params["tokenAddress"]
        if not isinstance(token_address, str) or not ADDRESS_PATTERN.match(token_address):
            raise InvalidAddressError(token_address)

        token_amount = self._parse_amount(params["tokenAmount"])

        order_id = params.get("orderId")
        if _is_missing(order_id):
            order_id = generate_order_id()

        body = {
            "network": chain_id,
            "tokenAddress": token_address,
            "amount": token_amount,
            "orderId": str(order_id),
            "privateKey": self._signing_key,
        }

        logger.info(
            "Creating gift card: network=%s token=%s amount=%s orderId=%s",
            chain_id,
            token_address,
            token_amount,
            order_id,
        )

        try:
            # Not idempotent: a timeout or 5xx may still have created the card
            result = await self.client.post_json("/cards/create", body, retry=False)
        except RemoteRequestFailedError as e:
            if e.status_code is None:
                raise
            msg = f"Gift card creation failed: {e.status_code} {e.reason}. Response: {e.body}"
            raise RemoteRequestFailedError(
                msg, status_code=e.status_code, reason=e.reason, body=e.body
            ) from e

        return {"orderId": str(order_id), "response": result}

    @staticmethod
    def _parse_amount(raw: Any) -> str:
        """Validate tokenAmount and return it in its original textual form."""
        if isinstance(raw, bool):
            raise InvalidAmountError(raw)
        text = str(raw).strip()
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise InvalidAmountError(raw) from e
        if not amount.is_finite() or amount <= 0:
            raise InvalidAmountError(raw)
        return text

    # ------------------------------------------------------------------
    # OpenAPI document
    # ------------------------------------------------------------------

    async def get_openapi_spec(self) -> str:
        """Fetch the raw OpenAPI YAML document."""
        return await self.client.get_text(self.config.openapi_url)

    async def get_endpoints_list(self) -> list[dict[str, Any]]:
        """Flatten the cached OpenAPI document into path/method/summary entries.

        Raises:
            RemoteParseFailedError: If the document is not valid YAML or has no paths mapping
        """
        document = await self._get_openapi_document()

        endpoints = []
        for path, operations in document["paths"].items():
            methods = []
            for method, details in operations.items():
                # Skip path-level keys such as "parameters" and "summary"
                if str(method).lower() not in HTTP_METHODS:
                    continue
                details = details if isinstance(details, dict) else {}
                methods.append(
                    {
                        "method": str(method).upper(),
                        "summary": details.get("summary"),
                        "description": details.get("description"),
                    }
                )
            endpoints.append({"path": path, "methods": methods})

        return endpoints

    async def _get_openapi_document(self) -> dict[str, Any]:
        """Return the parsed OpenAPI document, fetching it at most once."""
        if self._openapi_document is not None:
            return self._openapi_document

        async with self._openapi_lock:
            if self._openapi_document is None:
                self._openapi_document = await self._fetch_openapi_document()
                logger.info(
                    "Cached OpenAPI document with %s paths", len(self._openapi_document["paths"])
                )

        return self._openapi_document

    async def _fetch_openapi_document(self) -> dict[str, Any]:
        text = await self.get_openapi_spec()
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            msg = f"Failed to parse OpenAPI spec: {e}"
            raise RemoteParseFailedError(msg, cause=e) from e

        if not isinstance(document, dict) or not isinstance(document.get("paths"), dict):
            msg = "Failed to parse OpenAPI spec: document has no 'paths' mapping"
            raise RemoteParseFailedError(msg)

        for path, operations in document["paths"].items():
            if not isinstance(operations, dict):
                msg = f"Failed to parse OpenAPI spec: path item {path!r} is not a mapping"
                raise RemoteParseFailedError(msg)

        return document

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()

    def get_provider_info(self) -> dict[str, Any]:
        info = super().get_provider_info()
        info.update(
            {
                "base_url": self.config.base_url,
                "signing_key_configured": self._signing_key is not None,
                "openapi_cached": self._openapi_document is not None,
            }
        )
        return info
