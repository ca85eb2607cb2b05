"""Shared fixtures for UniVoucher MCP tests."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from univoucher_mcp.providers.api import UniVoucherAPIClient, UniVoucherAPIProvider
from univoucher_mcp.providers.documents import UniVoucherDocumentationProvider
from univoucher_mcp.providers.documents.catalog import DOC_PAGES
from univoucher_mcp.server.config import APIConfig

API_BASE_URL = "https://api.test/v1"
OPENAPI_URL = "https://api.test/openapi.yaml"

# Page-specific lines used by the search tests
EXTRA_LINES = {
    "fees": "The protocol fee is 1% of the card amount.",
    "technical/card-security": "Card secrets use ENCRYPTION at rest.",
    "user-guide/quick-start": "Connect your wallet to begin.",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep UNIVOUCHER_* variables from the developer's shell out of tests."""
    for name in (
        "UNIVOUCHER_API_BASE_URL",
        "UNIVOUCHER_OPENAPI_URL",
        "UNIVOUCHER_TIMEOUT_SECONDS",
        "UNIVOUCHER_MAX_RETRIES",
        "UNIVOUCHER_DOCS_PATH",
        "UNIVOUCHER_LOG_LEVEL",
        "UNIVOUCHER_LOG_FORMAT",
        "UNIVOUCHER_PRIVATE_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Documentation tree with one file per catalog page plus some noise files."""
    root = tmp_path / "docs"
    for page in DOC_PAGES:
        file_path = root / page.relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [f"# {page.name}", "", f"{page.description}."]
        if page.page_id in EXTRA_LINES:
            lines.append(EXTRA_LINES[page.page_id])
        file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Ignored by search: hidden markdown file and non-markdown file
    (root / "technical" / ".draft.md").write_text("encryption draft\n", encoding="utf-8")
    (root / "technical" / "notes.txt").write_text("encryption notes\n", encoding="utf-8")
    return root


@pytest.fixture
def doc_provider(docs_root: Path) -> UniVoucherDocumentationProvider:
    return UniVoucherDocumentationProvider(root=docs_root)


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def make_api_provider() -> Callable[..., tuple[UniVoucherAPIProvider, RecordingTransport]]:
    """Factory for an API provider whose HTTP traffic goes to a mock handler."""

    def _make(
        handler: Handler,
        signing_key: str | None = None,
        max_retries: int = 1,
    ) -> tuple[UniVoucherAPIProvider, RecordingTransport]:
        transport = RecordingTransport(handler)
        config = APIConfig(
            base_url=API_BASE_URL,
            openapi_url=OPENAPI_URL,
            timeout_seconds=5,
            max_retries=max_retries,
        )
        client = UniVoucherAPIClient(
            config.base_url,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            transport=transport,
        )
        return UniVoucherAPIProvider(config, signing_key=signing_key, client=client), transport

    return _make


def json_ok(payload: object) -> Handler:
    """Handler answering every request with 200 and ``payload``."""

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    return _handler


def never_called(request: httpx.Request) -> httpx.Response:
    msg = f"unexpected request: {request.method} {request.url}"
    raise AssertionError(msg)
