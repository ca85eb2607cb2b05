"""Static catalog of UniVoucher documentation pages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DocPage:
    """One documentation page.

    Attributes:
        page_id: Identifier, also the file path relative to the docs root minus ``.md``
        name: Display name
        description: One-line description
    """

    page_id: str
    name: str
    description: str

    @property
    def relative_path(self) -> str:
        return f"{self.page_id}.md"

    @property
    def category(self) -> str | None:
        """Directory component of the id, or None for top-level pages."""
        if "/" not in self.page_id:
            return None
        return self.page_id.split("/", 1)[0]


DOC_PAGES: tuple[DocPage, ...] = (
    DocPage("index", "UniVoucher Documentation Index", "Main documentation index and overview"),
    DocPage("faq", "FAQ", "Frequently asked questions about UniVoucher"),
    DocPage("fees", "Fees", "Information about UniVoucher fees and pricing"),
    # User Guide
    DocPage("user-guide/quick-start", "Quick Start Guide", "Get started with UniVoucher quickly"),
    DocPage(
        "user-guide/wallet-connection",
        "Wallet Connection",
        "How to connect your wallet to UniVoucher",
    ),
    DocPage(
        "user-guide/creating-gift-cards",
        "Creating Gift Cards",
        "Complete guide to creating crypto gift cards",
    ),
    DocPage("user-guide/bulk-creation", "Bulk Creation", "Create multiple gift cards at once"),
    DocPage(
        "user-guide/viewing-gift-cards",
        "Viewing Gift Cards",
        "How to view and manage your gift cards",
    ),
    DocPage(
        "user-guide/redeeming-gift-cards",
        "Redeeming Gift Cards",
        "How to redeem UniVoucher gift cards",
    ),
    DocPage(
        "user-guide/managing-your-cards",
        "Managing Your Cards",
        "Manage your created and received cards",
    ),
    # Technical Documentation
    DocPage("technical/how-it-works", "How It Works", "Technical overview of UniVoucher protocol"),
    DocPage(
        "technical/smart-contract",
        "Smart Contract",
        "UniVoucher smart contract technical details",
    ),
    DocPage(
        "technical/supported-networks",
        "Supported Networks",
        "Blockchain networks supported by UniVoucher",
    ),
    DocPage("technical/card-security", "Card Security", "Security aspects of UniVoucher cards"),
    DocPage(
        "technical/card-id-format",
        "Card ID Format",
        "Understanding UniVoucher card ID structure",
    ),
    # Developer Resources
    DocPage(
        "developers/integration-guide",
        "Integration Guide",
        "Complete guide for integrating UniVoucher",
    ),
    DocPage("developers/security", "Developer Security", "Security considerations for developers"),
    DocPage("developers/api-reference", "API Reference", "UniVoucher API reference documentation"),
    # Legal Documents
    DocPage("privacy-policy", "Privacy Policy", "UniVoucher privacy policy"),
    DocPage("license", "License", "UniVoucher license information"),
    DocPage("disclaimer", "Disclaimer", "UniVoucher legal disclaimer"),
)

PAGES_BY_ID: dict[str, DocPage] = {page.page_id: page for page in DOC_PAGES}

PAGE_IDS: tuple[str, ...] = tuple(PAGES_BY_ID)

LEGAL_PAGE_IDS: tuple[str, ...] = ("privacy-policy", "license", "disclaimer")

CATEGORIES: tuple[str, ...] = ("user-guide", "technical", "developers", "legal", "general")

# Directory sections are scanned file by file; the rest are single top-level files
DIRECTORY_SECTIONS: tuple[str, ...] = ("user-guide", "technical", "developers")

SEARCH_SECTIONS: tuple[str, ...] = (
    "index",
    "faq",
    "fees",
    "user-guide",
    "technical",
    "developers",
    "privacy-policy",
    "license",
    "disclaimer",
)


def pages_in_category(category: str | None = None) -> list[DocPage]:
    """Filter the catalog by category.

    "legal" is a fixed allow-list, "general" is every top-level page outside
    it, and directory categories match the id prefix before the first slash.
    No category returns the whole catalog.

    Raises:
        ValueError: If category is not one of CATEGORIES
    """
    if category is None:
        return list(DOC_PAGES)
    if category not in CATEGORIES:
        msg = f"Unknown category '{category}'. Valid categories: {', '.join(CATEGORIES)}"
        raise ValueError(msg)
    if category == "legal":
        return [PAGES_BY_ID[page_id] for page_id in LEGAL_PAGE_IDS]
    if category == "general":
        return [
            page
            for page in DOC_PAGES
            if page.category is None and page.page_id not in LEGAL_PAGE_IDS
        ]
    return [page for page in DOC_PAGES if page.category == category]
