"""Framework-level building blocks shared by providers and the server."""

from univoucher_mcp.framework.errors import (
    CredentialMissingError,
    ErrorCode,
    ErrorDetails,
    ErrorSeverity,
    InternalError,
    InvalidAddressError,
    InvalidAmountError,
    MissingParameterError,
    PageNotFoundError,
    RemoteParseFailedError,
    RemoteRequestFailedError,
    UniVoucherError,
    UnknownPromptError,
    UnknownResourceError,
    UnknownToolError,
    UnsupportedChainError,
    ValidationError,
    to_univoucher_error,
)

__all__ = [
    "CredentialMissingError",
    "ErrorCode",
    "ErrorDetails",
    "ErrorSeverity",
    "InternalError",
    "InvalidAddressError",
    "InvalidAmountError",
    "MissingParameterError",
    "PageNotFoundError",
    "RemoteParseFailedError",
    "RemoteRequestFailedError",
    "UniVoucherError",
    "UnknownPromptError",
    "UnknownResourceError",
    "UnknownToolError",
    "UnsupportedChainError",
    "ValidationError",
    "to_univoucher_error",
]
