from tools.web.citations import fix_source_links
from tools.web.prompt_builder import build_prompt
from conftest import make_result

SOURCES = [
    make_result(title="One", url="https://one.example/a"),
    make_result(title="Two", url="https://two.example/b"),
    make_result(title="Three", url="https://three.example/c"),
]


def test_all_citation_forms_resolve_to_source_urls():
    text = "Growth is strong [Source 1], margins held [Source 2](2) and risks remain [Source 3](URL)."
    fixed = fix_source_links(text, SOURCES)
    assert fixed == (
        "Growth is strong [Source 1](https://one.example/a), "
        "margins held [Source 2](https://two.example/b) and "
        "risks remain [Source 3](https://three.example/c)."
    )


def test_plain_mention_becomes_link():
    fixed = fix_source_links("As Source 2 notes, demand is up.", SOURCES)
    assert fixed == "As [Source 2](https://two.example/b) notes, demand is up."


def test_existing_links_are_not_rewritten_twice():
    text = "See [Source 1](https://one.example/a)."
    assert fix_source_links(text, SOURCES) == text


def test_source_one_does_not_capture_source_ten():
    sources = [make_result(url=f"https://s{i}.example") for i in range(1, 11)]
    fixed = fix_source_links("Compare Source 10 with Source 1.", sources)
    assert fixed == "Compare [Source 10](https://s10.example) with [Source 1](https://s1.example)."


def test_citations_beyond_source_count_are_left_alone():
    assert fix_source_links("[Source 7]", SOURCES) == "[Source 7]"


def test_empty_inputs():
    assert fix_source_links("", SOURCES) == ""
    assert fix_source_links("text [Source 1]", []) == "text [Source 1]"


def test_prompt_numbers_sources_and_asks_for_markdown_links():
    prompt = build_prompt("ev market", SOURCES)
    assert 'for the query: "ev market"' in prompt
    assert "[Source 1]\nTitle: One\nURL: https://one.example/a" in prompt
    assert "[Source 3]" in prompt
    assert "[Source X](URL)" in prompt
    assert "(1-3)" in prompt


def test_prompt_with_no_results_is_still_valid():
    prompt = build_prompt("ev market", [])
    assert "(no search results were found)" in prompt
    assert "[Source 1]" not in prompt
