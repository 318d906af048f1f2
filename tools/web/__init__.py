"""Web search providers and per-platform fetchers."""

from .citations import fix_source_links
from .contracts import AggregatedResults, PlatformResults, SearchResult
from .prompt_builder import build_prompt

__all__ = ["AggregatedResults", "PlatformResults", "SearchResult", "build_prompt", "fix_source_links"]
