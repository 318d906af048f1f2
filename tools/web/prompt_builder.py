"""Build the source-numbered prompt sent to the completion endpoint."""

from collections.abc import Sequence

from .contracts import SearchResult


def format_sources(results: Sequence[SearchResult]) -> str:
    blocks = []
    for index, result in enumerate(results, start=1):
        blocks.append(
            f"[Source {index}]\n"
            f"Title: {result.title}\n"
            f"URL: {result.url}\n"
            f"Content: {result.snippet}\n"
        )
    return "\n".join(blocks)


def build_prompt(query: str, results: Sequence[SearchResult]) -> str:
    """
    Build the analysis prompt with every result numbered as ``[Source N]``.

    An empty result list still yields a valid prompt with zero sources.

    Args:
        query: User query
        results: Search results, in citation order

    Returns:
        Prompt text asking for markdown citations ``[Source X](URL)``
    """
    sources_text = format_sources(results) if results else "(no search results were found)\n"

    return (
        f'Please analyze the following web search results for the query: "{query}"\n'
        "\n"
        "Search Results:\n"
        f"{sources_text}\n"
        "Please provide:\n"
        "1. A comprehensive answer based on these search results\n"
        "2. Include specific citations using markdown links: [Source X](URL) for each claim\n"
        "3. Use direct quotes when relevant, followed by the source link\n"
        "4. Be factual and precise\n"
        "\n"
        "Format your response in a clear, readable way with:\n"
        "- Main points and key findings\n"
        "- Supporting evidence from the sources (with clickable links)\n"
        "- Any relevant comparisons or contrasts\n"
        "- Conclusions based on the available information\n"
        "\n"
        "Remember: Every source citation should be a clickable link in markdown format "
        f"[Source X](URL) where X is the source number (1-{len(results)})."
    )


CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that provides accurate and informative responses "
    "based on the conversation history. Keep your responses focused and relevant to "
    "the user's questions."
)

CHAT_SPEAKERS = {"user": "Human", "assistant": "Assistant"}


def build_chat_prompt(messages: Sequence) -> str:
    """
    Flatten a message history into a single completion prompt.

    System messages are appended to the system preamble; user and assistant
    turns become ``Human:`` / ``Assistant:`` lines. The prompt ends with an
    open ``Assistant:`` turn.
    """
    system = [CHAT_SYSTEM_PROMPT]
    turns = []
    for message in messages:
        content = message.content.strip()
        if message.role == "system":
            system.append(content)
        elif message.role in CHAT_SPEAKERS:
            turns.append(f"{CHAT_SPEAKERS[message.role]}: {content}")
    return "\n".join(system) + "\n\n" + "\n".join(turns) + "\nAssistant:"
