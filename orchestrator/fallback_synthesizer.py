"""Deterministic markdown answer used when the completion call fails."""

import re

from models.answer import LLMAnswer
from tools.web.contracts import SearchResult

MAX_KEY_POINTS = 5

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def _first_sentence(text: str, limit: int = 240) -> str:
    sentence = _SENTENCE_END.split((text or "").strip(), maxsplit=1)[0]
    if len(sentence) > limit:
        sentence = sentence[:limit].rsplit(" ", 1)[0] + "..."
    return sentence


def synthesize_answer(query: str, results: list[SearchResult], model: str = "") -> LLMAnswer:
    """
    Build a summary, key points and a source list straight from the results.

    Citations use the same [Source N](url) form as model answers, numbered in
    result order.
    """
    if not results:
        return LLMAnswer(
            answer=f'No search results were found for "{query}".',
            sources=[],
            model=model,
            provider="fallback",
            synthesized=True,
        )

    numbered = list(enumerate(results, start=1))
    platforms = sorted({r.source for r in results})
    ranked = sorted(numbered, key=lambda pair: pair[1].weight, reverse=True)

    lines = [
        "## Summary",
        "",
        f'Found {len(results)} results for "{query}" across {", ".join(platforms)}. '
        "An AI-generated answer was not available, so the strongest results are listed below.",
        "",
        "## Key Points",
        "",
    ]
    for index, result in ranked[:MAX_KEY_POINTS]:
        point = _first_sentence(result.snippet) or result.title
        lines.append(f"- **{result.title}**: {point} [Source {index}]({result.url})")

    lines += ["", "## Sources", ""]
    for index, result in numbered:
        lines.append(f"{index}. [{result.title}]({result.url}) ({result.source})")

    return LLMAnswer(
        answer="\n".join(lines),
        sources=list(results),
        model=model,
        provider="fallback",
        synthesized=True,
    )
