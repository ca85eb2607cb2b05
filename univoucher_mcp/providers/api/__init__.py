"""UniVoucher REST API gateway provider."""

from univoucher_mcp.providers.api.client import UniVoucherAPIClient
from univoucher_mcp.providers.api.gateway import (
    API_TOOL_NAMES,
    SUPPORTED_CHAIN_IDS,
    UniVoucherAPIProvider,
    generate_order_id,
)

__all__ = [
    "API_TOOL_NAMES",
    "SUPPORTED_CHAIN_IDS",
    "UniVoucherAPIClient",
    "UniVoucherAPIProvider",
    "generate_order_id",
]
