"""Documentation provider for UniVoucher Markdown pages."""

from univoucher_mcp.providers.documents.filesystem_markdown import (
    DOC_TOOL_NAMES,
    UniVoucherDocumentationProvider,
)

__all__ = ["DOC_TOOL_NAMES", "UniVoucherDocumentationProvider"]
