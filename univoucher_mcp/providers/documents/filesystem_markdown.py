"""Filesystem Markdown documentation provider.

This module serves the UniVoucher documentation catalog from Markdown files on
the local filesystem, implementing the CapabilityProvider contract.

Each catalog identifier maps to ``<root>/<identifier>.md``. Identifiers with a
slash address a file in a subdirectory (``user-guide/quick-start``), the rest
address top-level files (``faq``).
"""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource, TextContent, Tool

from univoucher_mcp.framework.errors import PageNotFoundError, UnknownToolError
from univoucher_mcp.providers.base import (
    RESOURCE_SCHEME,
    CapabilityProvider,
    json_block,
    text_block,
)
from univoucher_mcp.providers.documents.catalog import (
    CATEGORIES,
    DIRECTORY_SECTIONS,
    DOC_PAGES,
    PAGE_IDS,
    PAGES_BY_ID,
    SEARCH_SECTIONS,
    pages_in_category,
)
from univoucher_mcp.server.schemas import (
    MAX_BATCH_PAGES,
    GetDocPageRequest,
    GetMultipleDocPagesRequest,
    ListDocPagesRequest,
    SearchDocsRequest,
)

logger = logging.getLogger(__name__)

MARKDOWN_MIME_TYPE = "text/markdown"

DOC_TOOL_NAMES = frozenset(
    {"list_doc_pages", "get_doc_page", "get_multiple_doc_pages", "search_docs"}
)


def title_banner(page_id: str) -> str:
    return f"# UniVoucher Documentation: {page_id}"


def not_found_marker(page_id: str) -> str:
    return f"[Page not found: {page_id}]"


def find_matching_lines(content: str, query: str) -> list[str]:
    """Return the lines of ``content`` containing ``query``, case-insensitively."""
    needle = query.lower()
    return [line for line in content.split("\n") if needle in line.lower()]


class UniVoucherDocumentationProvider(CapabilityProvider):
    """Documentation provider backed by a directory of Markdown files.

    Features:
    - Fixed page catalog exposed as ``univoucher://docs/<page-id>`` resources
    - Single and batch page reads with a title banner per page
    - Category listing
    - Line-level substring search across sections

    Example:
        >>> provider = UniVoucherDocumentationProvider(root="./docs")
        >>> content = await provider.get_page("faq")
    """

    name = "documentation"
    resource_prefix = f"{RESOURCE_SCHEME}://docs/"

    def __init__(self, root: str | Path) -> None:
        """Initialize documentation provider.

        Args:
            root: Directory holding the Markdown documentation tree
        """
        self.root = Path(root)

        # Missing pages are reported per request, so a missing root is not fatal here
        if not self.root.is_dir():
            logger.warning(
                "Documentation root is not a directory: %s "
                "(set UNIVOUCHER_DOCS_PATH or docs.docs_path to the docs tree)",
                self.root,
            )

        logger.info(
            "Initialized UniVoucherDocumentationProvider: root=%s, pages=%s",
            self.root,
            len(DOC_PAGES),
        )

    # ------------------------------------------------------------------
    # Capability contract
    # ------------------------------------------------------------------

    def handles_tool(self, name: str) -> bool:
        return name in DOC_TOOL_NAMES

    async def list_resources(self) -> list[Resource]:
        return [
            Resource(
                uri=f"{self.resource_prefix}{page.page_id}",
                name=page.name,
                description=page.description,
                mimeType=MARKDOWN_MIME_TYPE,
            )
            for page in DOC_PAGES
        ]

    async def read_resource(self, uri: str) -> list[ReadResourceContents]:
        """Read a documentation page as raw Markdown.

        Raises:
            PageNotFoundError: If the page is not in the catalog or its file is missing
        """
        page_id = uri.removeprefix(self.resource_prefix)
        content = await self._read_page(page_id)
        return [ReadResourceContents(content=content, mime_type=MARKDOWN_MIME_TYPE)]

    async def list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="list_doc_pages",
                description=(
                    "List UniVoucher documentation pages, optionally filtered by category"
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "category": {
                            "type": "string",
                            "enum": list(CATEGORIES),
                            "description": "Category filter (omit to list every page)",
                        },
                    },
                },
            ),
            Tool(
                name="get_doc_page",
                description="Get the full content of one UniVoucher documentation page",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "page_id": {
                            "type": "string",
                            "enum": list(PAGE_IDS),
                            "description": "Documentation page identifier",
                        },
                    },
                    "required": ["page_id"],
                },
            ),
            Tool(
                name="get_multiple_doc_pages",
                description=(
                    "Get several UniVoucher documentation pages in one call. "
                    "Missing pages are reported individually."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "page_ids": {
                            "type": "array",
                            "items": {"type": "string", "enum": list(PAGE_IDS)},
                            "minItems": 1,
                            "maxItems": MAX_BATCH_PAGES,
                            "description": f"Page identifiers (1-{MAX_BATCH_PAGES})",
                        },
                    },
                    "required": ["page_ids"],
                },
            ),
            Tool(
                name="search_docs",
                description="Search UniVoucher documentation for specific topics",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search query for documentation",
                        },
                        "section": {
                            "type": "string",
                            "enum": list(SEARCH_SECTIONS),
                            "description": "Specific documentation section to search in",
                        },
                    },
                    "required": ["query"],
                },
            ),
        ]

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> Sequence[TextContent]:
        if name == "list_doc_pages":
            request = ListDocPagesRequest(**arguments)
            return [json_block(self.list_pages(request.category))]

        if name == "get_doc_page":
            request = GetDocPageRequest(**arguments)
            return [text_block(await self.get_page(request.page_id))]

        if name == "get_multiple_doc_pages":
            request = GetMultipleDocPagesRequest(**arguments)
            return [text_block(block) for block in await self.get_multiple_pages(request.page_ids)]

        if name == "search_docs":
            request = SearchDocsRequest(**arguments)
            return [text_block(await self.search_docs(request.query, request.section))]

        raise UnknownToolError(name, sorted(DOC_TOOL_NAMES))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get_page(self, page_id: str) -> str:
        """Read a page and prefix it with its title banner.

        Raises:
            PageNotFoundError: If the page is not in the catalog or its file is missing
        """
        content = await self._read_page(page_id)
        return f"{title_banner(page_id)}\n\n{content}"

    async def get_multiple_pages(self, page_ids: list[str]) -> list[str]:
        """Read several pages, one output block per requested id in request order.

        A missing page does not abort the batch; its block carries a not-found marker.
        """

        async def _one(page_id: str) -> str:
            try:
                return await self.get_page(page_id)
            except PageNotFoundError:
                logger.info("Batch read: page not found: %s", page_id)
                return f"{title_banner(page_id)}\n\n{not_found_marker(page_id)}"

        return list(await asyncio.gather(*(_one(page_id) for page_id in page_ids)))

    def list_pages(self, category: str | None = None) -> dict[str, Any]:
        """List catalog pages, optionally filtered by category."""
        pages = pages_in_category(category)
        return {
            "category": category or "all",
            "count": len(pages),
            "pages": [
                {
                    "id": page.page_id,
                    "name": page.name,
                    "description": page.description,
                    "uri": f"{self.resource_prefix}{page.page_id}",
                }
                for page in pages
            ],
        }

    async def search_docs(self, query: str, section: str | None = None) -> str:
        """Case-insensitive line search over one section or all of them.

        Sections that cannot be read are skipped.
        """
        sections = [section] if section else list(SEARCH_SECTIONS)
        results: list[str] = []

        for sec in sections:
            try:
                results.extend(await asyncio.to_thread(self._search_section, query, sec))
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping unreadable section %s: %s", sec, e)

        if not results:
            return f'No results found for "{query}"'
        return "\n\n".join(results)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_path(self, page_id: str) -> Path:
        if page_id not in PAGES_BY_ID:
            raise PageNotFoundError(page_id, reason="not in documentation catalog")
        return self.root / PAGES_BY_ID[page_id].relative_path

    async def _read_page(self, page_id: str) -> str:
        file_path = self._resolve_path(page_id)
        try:
            content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PageNotFoundError(page_id, reason=f"cannot read {file_path}: {e}") from e

        logger.debug("Retrieved page: %s", page_id)
        return content

    def _search_section(self, query: str, section: str) -> list[str]:
        results = []

        if section in DIRECTORY_SECTIONS:
            section_dir = self.root / section
            files = sorted(
                p
                for p in section_dir.iterdir()
                if p.is_file() and p.suffix == ".md" and not p.name.startswith(".")
            )
            for file_path in files:
                try:
                    content = file_path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    logger.debug("Skipping unreadable file %s: %s", file_path, e)
                    continue
                matching_lines = find_matching_lines(content, query)
                if matching_lines:
                    heading = (
                        f"## {section.upper()}/{file_path.stem.replace('-', ' ').upper()}"
                    )
                    results.append(heading + "\n" + "\n".join(matching_lines))
        else:
            file_path = self.root / f"{section}.md"
            matching_lines = find_matching_lines(file_path.read_text(encoding="utf-8"), query)
            if matching_lines:
                heading = f"## {section.replace('-', ' ').upper()}"
                results.append(heading + "\n" + "\n".join(matching_lines))

        return results

    def get_provider_info(self) -> dict[str, Any]:
        info = super().get_provider_info()
        info.update({"root": str(self.root), "root_exists": self.root.is_dir()})
        return info
