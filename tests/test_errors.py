"""
Tests for the error taxonomy.

Tests verify:
- Error codes and severities per error type
- Serialization through ErrorDetails
- Boundary translation of foreign exceptions
"""

import pytest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from univoucher_mcp.framework.errors import (
    CredentialMissingError,
    ErrorCode,
    ErrorDetails,
    ErrorSeverity,
    InternalError,
    MissingParameterError,
    PageNotFoundError,
    RemoteRequestFailedError,
    UniVoucherError,
    UnknownToolError,
    UnsupportedChainError,
    ValidationError,
    to_univoucher_error,
)


class TestErrorTypes:
    """Test individual error types."""

    def test_page_not_found(self) -> None:
        """Test page errors carry the id and a user-error severity."""
        error = PageNotFoundError("faq", reason="file missing")

        assert error.message == "Documentation not found: faq"
        assert error.code == ErrorCode.PAGE_NOT_FOUND
        assert error.severity == ErrorSeverity.USER_ERROR
        assert error.details == {"page_id": "faq", "reason": "file missing"}

    def test_missing_parameter_names_every_field(self) -> None:
        """Test the message lists all missing parameters."""
        error = MissingParameterError("create_gift_card", ["tokenAddress", "tokenAmount"])

        assert error.message == (
            "Missing required parameter(s) for create_gift_card: tokenAddress, tokenAmount"
        )
        assert error.code == ErrorCode.MISSING_PARAMETER
        assert isinstance(error, ValidationError)

    def test_unsupported_chain_lists_supported(self) -> None:
        """Test the supported chain ids are part of the message."""
        error = UnsupportedChainError(999999, [1, 8453])

        assert error.message == "Unsupported chainId 999999. Supported chains: 1, 8453"
        assert error.details["received"] == "999999"

    def test_credential_missing_code(self) -> None:
        """Test the credential error keeps its own code."""
        error = CredentialMissingError("create_gift_card")

        assert error.code == ErrorCode.CREDENTIAL_MISSING
        assert error.details["operation"] == "create_gift_card"

    @pytest.mark.parametrize(
        ("status_code", "severity"),
        [
            (400, ErrorSeverity.USER_ERROR),
            (404, ErrorSeverity.USER_ERROR),
            (500, ErrorSeverity.TRANSIENT),
            (None, ErrorSeverity.TRANSIENT),
        ],
    )
    def test_remote_failure_severity(
        self, status_code: int | None, severity: ErrorSeverity
    ) -> None:
        """Test 4xx is a caller mistake and everything else is transient."""
        error = RemoteRequestFailedError("failed", status_code=status_code)
        assert error.severity == severity


class TestSerialization:
    """Test structured error output."""

    def test_to_details(self) -> None:
        """Test conversion to the pydantic model."""
        details = PageNotFoundError("index").to_details()

        assert isinstance(details, ErrorDetails)
        assert details.code == ErrorCode.PAGE_NOT_FOUND
        assert details.context == {"page_id": "index"}

    def test_details_dict_is_json_ready(self) -> None:
        """Test enums serialize to their string values."""
        error = UnknownToolError("nope", available=["get_chains"])

        assert error.to_details().to_dict() == {
            "code": "UNKNOWN_TOOL",
            "message": "Unknown tool: nope",
            "context": {"tool": "nope", "available": ["get_chains"]},
            "severity": "user_error",
        }


class _Model(BaseModel):
    count: int


class TestTranslation:
    """Test to_univoucher_error."""

    def test_domain_errors_pass_through(self) -> None:
        """Test UniVoucherError instances are returned unchanged."""
        error = PageNotFoundError("faq")
        assert to_univoucher_error(error) is error

    def test_pydantic_errors_become_validation_errors(self) -> None:
        """Test argument validation failures name the field."""
        with pytest.raises(PydanticValidationError) as exc_info:
            _Model(count="many")

        error = to_univoucher_error(exc_info.value)

        assert isinstance(error, ValidationError)
        assert error.message.startswith("Invalid arguments: count:")

    def test_value_errors_become_validation_errors(self) -> None:
        """Test plain ValueErrors keep their message."""
        error = to_univoucher_error(ValueError("bad category"))

        assert isinstance(error, ValidationError)
        assert error.message == "bad category"

    def test_other_errors_become_internal(self) -> None:
        """Test anything else is an internal error with the cause recorded."""
        error = to_univoucher_error(KeyError("x"))

        assert isinstance(error, InternalError)
        assert isinstance(error, UniVoucherError)
        assert error.details["cause_type"] == "KeyError"
