"""Request schemas for documentation tools.

Pydantic models validate the untyped argument mappings that arrive with a
tool call. Validation failures are translated into in-band tool errors by the
provider boundary.

Example:
    from univoucher_mcp.server.schemas import GetMultipleDocPagesRequest

    # Valid request
    request = GetMultipleDocPagesRequest(page_ids=["index", "faq"])

    # Invalid request (will raise ValidationError: at most 10 pages)
    request = GetMultipleDocPagesRequest(page_ids=["faq"] * 11)
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

MAX_BATCH_PAGES = 10

PageId = Annotated[str, StringConstraints(min_length=1, max_length=200, strip_whitespace=True)]

DocCategory = Literal["user-guide", "technical", "developers", "legal", "general"]

DocSection = Literal[
    "index",
    "faq",
    "fees",
    "user-guide",
    "technical",
    "developers",
    "privacy-policy",
    "license",
    "disclaimer",
]


class _ToolRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class GetDocPageRequest(_ToolRequest):
    """Arguments for get_doc_page."""

    page_id: PageId = Field(
        ...,
        description="Documentation page identifier",
        examples=["faq", "user-guide/quick-start"],
    )


class GetMultipleDocPagesRequest(_ToolRequest):
    """Arguments for get_multiple_doc_pages.

    Constraints:
    - page_ids: 1-10 identifiers, read independently and returned in order
    """

    page_ids: list[PageId] = Field(
        ...,
        min_length=1,
        max_length=MAX_BATCH_PAGES,
        description=f"Page identifiers to fetch (1-{MAX_BATCH_PAGES})",
    )


class ListDocPagesRequest(_ToolRequest):
    """Arguments for list_doc_pages."""

    category: DocCategory | None = Field(
        default=None, description="Optional category filter; omit to list every page"
    )


class SearchDocsRequest(_ToolRequest):
    """Arguments for search_docs."""

    query: Annotated[
        str, StringConstraints(min_length=1, max_length=500, strip_whitespace=True)
    ] = Field(..., description="Case-insensitive text to look for")
    section: DocSection | None = Field(
        default=None, description="Restrict the search to one section"
    )


__all__ = [
    "MAX_BATCH_PAGES",
    "DocCategory",
    "DocSection",
    "GetDocPageRequest",
    "GetMultipleDocPagesRequest",
    "ListDocPagesRequest",
    "SearchDocsRequest",
]
