"""Turn model citations into clickable markdown links to the cited source."""

import re
from collections.abc import Sequence

from .contracts import SearchResult


def fix_source_links(text: str, sources: Sequence[SearchResult]) -> str:
    """
    Rewrite every ``Source N`` citation into ``[Source N](<url of source N>)``.

    Four passes run in order for each source; each pass only touches forms the
    earlier passes left behind:
      1. ``[Source N](N)``  - model used the number as the link target
      2. ``[Source N]``     - bare bracket citation
      3. ``Source N``       - plain mention outside brackets
      4. ``[Source N](URL)`` - model echoed the prompt placeholder

    Args:
        text: Raw completion text
        sources: Sources in prompt order (Source 1 is sources[0])

    Returns:
        Text with resolved markdown links
    """
    if not text or not sources:
        return text or ""

    processed = text

    for index, source in enumerate(sources, start=1):
        processed = re.sub(
            rf"\[Source {index}\]\({index}\)",
            lambda _m, u=source.url, n=index: f"[Source {n}]({u})",
            processed,
        )

    for index, source in enumerate(sources, start=1):
        processed = re.sub(
            rf"\[Source {index}\](?!\()",
            lambda _m, u=source.url, n=index: f"[Source {n}]({u})",
            processed,
        )

    for index, source in enumerate(sources, start=1):
        # (?!\d) keeps Source 1 out of Source 10
        processed = re.sub(
            rf"Source {index}(?![\]\d])",
            lambda _m, u=source.url, n=index: f"[Source {n}]({u})",
            processed,
        )

    for index, source in enumerate(sources, start=1):
        processed = re.sub(
            rf"\[Source {index}\]\(URL\)",
            lambda _m, u=source.url, n=index: f"[Source {n}]({u})",
            processed,
        )

    return processed
