"""
Error taxonomy for standardized error handling across the UniVoucher MCP server.

Providers raise these typed exceptions. Dispatch-level lookup failures
(unknown resource, unknown tool, unknown prompt) propagate to the transport
layer, which turns them into protocol-level errors. Tool execution failures
are caught at the provider boundary and reported in-band.

Key features:
- Error code enums (avoid typos)
- Severity levels (fatal, transient, user_error)
- Pydantic models for structured error details
- Boundary translation to UniVoucherError
"""

from enum import Enum
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Error Codes and Severity
# ============================================================================


class ErrorCode(str, Enum):
    """Enumeration of all error codes in the system."""

    # Dispatch errors
    UNKNOWN_RESOURCE = "UNKNOWN_RESOURCE"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    UNKNOWN_PROMPT = "UNKNOWN_PROMPT"

    # Documentation errors
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_AMOUNT = "INVALID_AMOUNT"

    # Remote API errors
    REMOTE_REQUEST_FAILED = "REMOTE_REQUEST_FAILED"
    REMOTE_PARSE_FAILED = "REMOTE_PARSE_FAILED"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(str, Enum):
    """Error severity; selects the log level at the tool error boundary."""

    FATAL = "fatal"  # Unrecoverable, requires intervention
    TRANSIENT = "transient"  # Temporary, retryable
    USER_ERROR = "user_error"  # User mistake, not retryable


# ============================================================================
# Pydantic Error Models
# ============================================================================


class ErrorDetails(BaseModel):
    """Structured error details for serialization."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: ErrorCode = Field(..., description="Error code enum")
    message: str = Field(..., description="Human-readable error message")
    context: dict[str, Any] = Field(default_factory=dict, description="Additional context")
    severity: ErrorSeverity = Field(default=ErrorSeverity.FATAL, description="Error severity")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump(mode="json")


# ============================================================================
# Base Exception Class
# ============================================================================


class UniVoucherError(Exception):
    """Base class for all UniVoucher MCP server errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
        severity: ErrorSeverity = ErrorSeverity.FATAL,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.severity = severity

    def to_details(self) -> ErrorDetails:
        """Convert to structured ErrorDetails."""
        return ErrorDetails(
            code=self.code, message=self.message, context=self.details, severity=self.severity
        )


# ============================================================================
# Dispatch Errors
# ============================================================================


class UnknownResourceError(UniVoucherError):
    """No provider owns the requested resource URI."""

    def __init__(self, uri: str) -> None:
        super().__init__(
            f"Unknown resource: {uri}",
            ErrorCode.UNKNOWN_RESOURCE,
            {"uri": uri},
            severity=ErrorSeverity.USER_ERROR,
        )
        self.uri = uri


class UnknownToolError(UniVoucherError):
    """No provider claims the requested tool name."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        details: dict[str, Any] = {"tool": name}
        if available:
            details["available"] = available
        super().__init__(
            f"Unknown tool: {name}",
            ErrorCode.UNKNOWN_TOOL,
            details,
            severity=ErrorSeverity.USER_ERROR,
        )
        self.name = name


class UnknownPromptError(UniVoucherError):
    """Requested prompt is not defined."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown prompt: {name}",
            ErrorCode.UNKNOWN_PROMPT,
            {"prompt": name},
            severity=ErrorSeverity.USER_ERROR,
        )


# ============================================================================
# Documentation Errors
# ============================================================================


class PageNotFoundError(UniVoucherError):
    """Documentation page is not in the catalog or its file is missing."""

    def __init__(self, page_id: str, reason: str | None = None) -> None:
        details = {"page_id": page_id}
        if reason:
            details["reason"] = reason
        super().__init__(
            f"Documentation not found: {page_id}",
            ErrorCode.PAGE_NOT_FOUND,
            details,
            severity=ErrorSeverity.USER_ERROR,
        )
        self.page_id = page_id


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(UniVoucherError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        received: Any | None = None,
    ) -> None:
        details = {}
        if field:
            details["field"] = field
        if expected:
            details["expected"] = expected
        if received is not None:
            details["received"] = str(received)
        super().__init__(
            message, ErrorCode.VALIDATION_ERROR, details, severity=ErrorSeverity.USER_ERROR
        )


class CredentialMissingError(ValidationError):
    """Signing credential is required but not configured."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot run '{operation}': no signing key configured. "
            "Set UNIVOUCHER_PRIVATE_KEY and restart the server."
        )
        self.code = ErrorCode.CREDENTIAL_MISSING
        self.details["operation"] = operation


class MissingParameterError(ValidationError):
    """One or more required parameters were not supplied."""

    def __init__(self, tool_name: str, missing: list[str]) -> None:
        super().__init__(
            f"Missing required parameter(s) for {tool_name}: {', '.join(missing)}",
            field=",".join(missing),
        )
        self.code = ErrorCode.MISSING_PARAMETER
        self.details["tool"] = tool_name
        self.details["missing"] = missing


class UnsupportedChainError(ValidationError):
    """Chain ID is not one of the supported networks."""

    def __init__(self, chain_id: Any, supported: list[int]) -> None:
        super().__init__(
            f"Unsupported chainId {chain_id}. Supported chains: "
            f"{', '.join(str(c) for c in supported)}",
            field="chainId",
            expected=f"one of {supported}",
            received=chain_id,
        )
        self.code = ErrorCode.UNSUPPORTED_CHAIN


class InvalidAddressError(ValidationError):
    """Token address is not a 0x-prefixed 20-byte hex string."""

    def __init__(self, address: Any) -> None:
        super().__init__(
            f"Invalid tokenAddress '{address}': expected 0x followed by 40 hex characters",
            field="tokenAddress",
            expected="0x-prefixed 20-byte hex address",
            received=address,
        )
        self.code = ErrorCode.INVALID_ADDRESS


class InvalidAmountError(ValidationError):
    """Token amount is not a positive number."""

    def __init__(self, amount: Any) -> None:
        super().__init__(
            f"Invalid tokenAmount '{amount}': must be a positive number",
            field="tokenAmount",
            expected="positive number",
            received=amount,
        )
        self.code = ErrorCode.INVALID_AMOUNT


# ============================================================================
# Remote API Errors
# ============================================================================


class RemoteRequestFailedError(UniVoucherError):
    """Remote API returned a non-success status or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
        body: str | None = None,
        url: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if reason:
            details["reason"] = reason
        if body:
            details["body"] = body
        if url:
            details["url"] = url
        severity = (
            ErrorSeverity.USER_ERROR
            if status_code is not None and 400 <= status_code < 500
            else ErrorSeverity.TRANSIENT
        )
        super().__init__(message, ErrorCode.REMOTE_REQUEST_FAILED, details, severity=severity)
        self.status_code = status_code
        self.reason = reason
        self.body = body


class RemoteParseFailedError(UniVoucherError):
    """Remote schema document could not be parsed into the expected shape."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        details = {}
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(
            message, ErrorCode.REMOTE_PARSE_FAILED, details, severity=ErrorSeverity.FATAL
        )


# ============================================================================
# Internal Errors
# ============================================================================


class InternalError(UniVoucherError):
    """Internal server error (unexpected condition)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        details = {}
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(message, ErrorCode.INTERNAL_ERROR, details, severity=ErrorSeverity.FATAL)


# ============================================================================
# Boundary Translation Functions
# ============================================================================


def to_univoucher_error(exc: Exception) -> UniVoucherError:
    """
    Translate arbitrary exceptions to UniVoucherError at boundaries.

    Args:
        exc: Any exception

    Returns:
        UniVoucherError instance
    """
    if isinstance(exc, UniVoucherError):
        return exc

    if isinstance(exc, pydantic.ValidationError):
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ())) or "input"
            problems.append(f"{location}: {err.get('msg', 'invalid value')}")
        return ValidationError(message="Invalid arguments: " + "; ".join(problems))
    if isinstance(exc, ValueError):
        return ValidationError(message=str(exc))
    return InternalError(message=f"Unexpected error: {exc}", cause=exc)
