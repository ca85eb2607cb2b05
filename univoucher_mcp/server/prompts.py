"""Prompt templates offered to MCP clients."""

from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

from univoucher_mcp.framework.errors import UnknownPromptError

SUPPORT_PROMPT = "univoucher_support"
API_QUERY_PROMPT = "univoucher_api_query"

API_QUERY_INSTRUCTIONS: dict[str, str] = {
    "card_details": (
        "- Get detailed information about a specific gift card (provide card ID or slot ID)\n"
        "- Show card status, amount, token, creator, and redemption details"
    ),
    "current_fees": (
        "- Get current protocol fees for specific chains\n"
        "- Show fee percentages and any recent changes"
    ),
    "user_cards": (
        "- Get all cards associated with a wallet address\n"
        "- Filter by creator, redeemer, or cards belonging to address\n"
        "- Show card counts and summaries"
    ),
    "chain_info": (
        "- Get information about supported blockchain networks\n"
        "- Show network details, contract addresses, and availability"
    ),
    "fee_history": (
        "- Get historical fee data for specific chains\n"
        "- Show fee changes over time"
    ),
    "protocol_stats": (
        "- Get general protocol statistics\n"
        "- Show total cards, active cards, and other metrics"
    ),
}

SUPPORT_TEMPLATE = """I need help with UniVoucher. Here's my question: "{query}"

Please provide comprehensive support based ONLY on verified information from the UniVoucher documentation. Follow these guidelines:

1. **Use only verified information** from UniVoucher docs - no guessing or assumptions
2. **Search multiple relevant documentation pages** to provide complete answers
3. **For general help**: Cover basic concepts, getting started, and common use cases
4. **For technical questions**: Provide detailed technical information, code examples, and implementation details
5. **For integration guidance**: Include step-by-step integration instructions, API references, and best practices
6. **For troubleshooting**: Identify common issues and provide verified solutions from the docs

If the documentation doesn't contain specific information about my question, clearly state that and suggest where I might find additional help.

Please start by listing and reading the relevant UniVoucher documentation pages (list_doc_pages, get_multiple_doc_pages) before responding."""  # noqa: E501

API_QUERY_TEMPLATE = """I need to query the UniVoucher API for real-time information. Here are the details:

**Query Type**: {query_type}
**Parameters**: {parameters}

Please help me get the following information using the UniVoucher API:

{instructions}

Use the appropriate UniVoucher API tools to fetch real-time data and provide a clear, formatted response with the requested information."""  # noqa: E501


def list_prompts() -> list[Prompt]:
    return [
        Prompt(
            name=SUPPORT_PROMPT,
            description=(
                "Get comprehensive support information from UniVoucher documentation. "
                "Provides verified information for general help, technical questions, "
                "integration guidance, and troubleshooting."
            ),
            arguments=[
                PromptArgument(
                    name="query",
                    description=(
                        "Your question or the specific topic you need help with "
                        "(e.g., 'How to create gift cards', 'Troubleshoot failed transaction')"
                    ),
                    required=True,
                ),
                PromptArgument(
                    name="support_type",
                    description="Type of support needed",
                    required=False,
                ),
            ],
        ),
        Prompt(
            name=API_QUERY_PROMPT,
            description=(
                "Query UniVoucher API for real-time protocol data. "
                "Get current fees, card details, chain information, and more."
            ),
            arguments=[
                PromptArgument(
                    name="query_type",
                    description=(
                        "Type of information to retrieve (e.g., 'card_details', "
                        "'current_fees', 'user_cards', 'chain_info')"
                    ),
                    required=True,
                ),
                PromptArgument(
                    name="parameters",
                    description=(
                        "Specific parameters for the query (e.g., card ID, wallet address, "
                        "chain ID)"
                    ),
                    required=False,
                ),
            ],
        ),
    ]


def api_query_instructions(query_type: str) -> str:
    """Instructions for a query type, with a generic fallback for unknown types."""
    return API_QUERY_INSTRUCTIONS.get(
        query_type,
        f"- Get {query_type} information from the UniVoucher protocol\n"
        "- Use appropriate API endpoints to fetch real-time data",
    )


def get_prompt(name: str, arguments: dict[str, str] | None = None) -> GetPromptResult:
    """Render a prompt.

    Raises:
        UnknownPromptError: If ``name`` is not a known prompt
    """
    arguments = arguments or {}

    if name == SUPPORT_PROMPT:
        query = arguments.get("query") or "general help"
        support_type = arguments.get("support_type") or "general"
        text = SUPPORT_TEMPLATE.format(query=query)
        description = f"UniVoucher Support: {support_type}"
    elif name == API_QUERY_PROMPT:
        query_type = arguments.get("query_type") or "general_info"
        parameters = arguments.get("parameters") or "none specified"
        text = API_QUERY_TEMPLATE.format(
            query_type=query_type,
            parameters=parameters,
            instructions=api_query_instructions(query_type),
        )
        description = f"UniVoucher API Query: {query_type}"
    else:
        raise UnknownPromptError(name)

    return GetPromptResult(
        description=description,
        messages=[PromptMessage(role="user", content=TextContent(type="text", text=text))],
    )
